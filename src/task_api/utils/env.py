import os
import warnings
from pathlib import Path

from dotenv import load_dotenv


def load_local_env():
    """Load the repository-root .env unless running with APP_ENV=production.
    Values already present in the environment win."""
    if os.getenv("APP_ENV", "").strip().lower() == "production":
        return

    dotenv_path = Path(__file__).resolve().parents[3] / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)
    else:
        warnings.warn(
            f".env file not found at {dotenv_path}. "
            "Environment variables must be set via the system environment.",
            UserWarning
        )
