"""
Sample tasks loaded into an empty store on startup when SEED_SAMPLE_DATA is set.
"""
import logging
import os

from task_api.services.task_store import Task, TaskStatus, TaskStore

logger = logging.getLogger(__name__)

SAMPLE_TASKS = [
    ("Complete project documentation",
     "Write comprehensive API documentation with examples and usage guides",
     TaskStatus.TODO),
    ("Implement user authentication",
     "Add JWT-based authentication system for secure API access",
     TaskStatus.IN_PROGRESS),
    ("Set up CI/CD pipeline",
     "Configure GitHub Actions for automated testing and deployment",
     TaskStatus.TODO),
    ("Database optimization",
     "Optimize database queries and add proper indexing",
     TaskStatus.IN_PROGRESS),
    ("Write unit tests",
     "Implement comprehensive unit tests for all service methods",
     TaskStatus.COMPLETED),
    ("Deploy to production",
     "Deploy the application to AWS ECS with proper monitoring",
     TaskStatus.TODO),
    ("Security audit",
     "Conduct thorough security audit and fix vulnerabilities",
     TaskStatus.CANCELLED),
    ("Performance testing",
     "Run load tests and optimize application performance",
     TaskStatus.TODO),
    ("Code review process",
     "Establish code review guidelines and implement peer review process",
     TaskStatus.COMPLETED),
    ("API versioning strategy",
     "Define and implement API versioning strategy for backward compatibility",
     TaskStatus.IN_PROGRESS),
]


def seeding_enabled() -> bool:
    return os.getenv("SEED_SAMPLE_DATA", "").strip().lower() in ("1", "true", "yes", "on")


async def seed_sample_tasks(store: TaskStore) -> int:
    """Insert SAMPLE_TASKS if the store is empty. Returns how many were inserted."""
    if await store.count() > 0:
        logger.info("Data already exists, skipping sample data")
        return 0

    for title, description, status in SAMPLE_TASKS:
        await store.save(Task(title=title, description=description, status=status))
        logger.debug("Created sample task: %s", title)

    logger.info("Sample data loaded. Total tasks: %d", await store.count())
    return len(SAMPLE_TASKS)
