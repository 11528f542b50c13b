import pytest

from task_api.services.task_store import Task, TaskStatus


@pytest.mark.asyncio
async def test_save_assigns_id_and_timestamps(store):
    saved = await store.save(Task(title="Write docs", status=TaskStatus.TODO))

    assert saved.id == 1
    assert saved.created_at is not None
    assert saved.created_at == saved.updated_at


@pytest.mark.asyncio
async def test_update_keeps_created_at_and_refreshes_updated_at(store):
    saved = await store.save(Task(title="Write docs", status=TaskStatus.TODO))
    saved.status = TaskStatus.IN_PROGRESS

    updated = await store.save(saved)

    assert updated.id == saved.id
    assert updated.created_at == saved.created_at
    assert updated.updated_at > saved.updated_at


@pytest.mark.asyncio
async def test_returned_tasks_are_copies(store):
    saved = await store.save(Task(title="Write docs", status=TaskStatus.TODO))
    saved.title = "changed without saving"

    fetched = await store.find_by_id(saved.id)

    assert fetched.title == "Write docs"


@pytest.mark.asyncio
async def test_ids_are_not_reused_after_delete(store):
    first = await store.save(Task(title="a", status=TaskStatus.TODO))
    await store.delete_by_id(first.id)

    second = await store.save(Task(title="b", status=TaskStatus.TODO))

    assert second.id == first.id + 1
    assert not await store.exists_by_id(first.id)


@pytest.mark.asyncio
async def test_find_by_status_orders_newest_first(store):
    older = await store.save(Task(title="older", status=TaskStatus.TODO))
    await store.save(Task(title="other", status=TaskStatus.COMPLETED))
    newer = await store.save(Task(title="newer", status=TaskStatus.TODO))

    tasks = await store.find_by_status_order_by_created_at_desc(TaskStatus.TODO)

    assert [task.id for task in tasks] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_exists_by_title_is_exact(store):
    await store.save(Task(title="Foo", status=TaskStatus.TODO))

    assert await store.exists_by_title("Foo")
    assert not await store.exists_by_title("foo")
    assert not await store.exists_by_title("Fo")


@pytest.mark.asyncio
async def test_search_matches_title_or_description_case_insensitively(store):
    by_title = await store.save(Task(title="Deploy API", status=TaskStatus.TODO))
    by_description = await store.save(
        Task(title="Release", description="push the api build", status=TaskStatus.TODO)
    )
    await store.save(Task(title="Unrelated", status=TaskStatus.TODO))

    tasks = await store.search_by_keyword("Api")

    assert [task.id for task in tasks] == [by_title.id, by_description.id]


@pytest.mark.asyncio
async def test_counts(store):
    await store.save(Task(title="a", status=TaskStatus.TODO))
    await store.save(Task(title="b", status=TaskStatus.TODO))
    await store.save(Task(title="c", status=TaskStatus.CANCELLED))

    assert await store.count_by_status(TaskStatus.TODO) == 2
    assert await store.count_by_status(TaskStatus.COMPLETED) == 0
    assert await store.count() == 3
