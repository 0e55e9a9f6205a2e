import uuid

from app.errors import ErrorKind
from app.models import TaskCreate, TaskStatus, TaskUpdate
from app.store import DuplicateTitleError


def _create(service, title, description="d", status=None):
    result = service.create_task(TaskCreate(title=title, description=description, status=status))
    assert result.ok, result
    return result.value


def test_create_defaults_status_and_trims(service):
    task = _create(service, "  Buy milk  ")
    assert task.title == "Buy milk"
    assert task.status is TaskStatus.PENDING
    assert task.updatedAt >= task.createdAt


def test_create_keeps_requested_status(service):
    assert _create(service, "t", status="completed").status is TaskStatus.COMPLETED


def test_duplicate_title_rejected_and_original_unchanged(service, store):
    original = _create(service, "Report", "Q1", "pending")
    result = service.create_task(TaskCreate(title="Report", description="Q2"))
    assert result.error.kind == ErrorKind.DUPLICATE_TITLE
    assert len(store.tasks) == 1
    assert service.get_task(original.id).value == original


def test_duplicate_check_uses_trimmed_title(service):
    _create(service, "Report")
    assert service.create_task(TaskCreate(title=" Report ", description="x")).error.kind == ErrorKind.DUPLICATE_TITLE
    assert service.create_task(TaskCreate(title="report", description="x")).ok


def test_store_level_title_claim_maps_to_duplicate(service, store, monkeypatch):
    monkeypatch.setattr(store, "find", lambda *a, **kw: [])

    def lose_race(fields):
        raise DuplicateTitleError(fields["title"])

    monkeypatch.setattr(store, "insert", lose_race)
    result = service.create_task(TaskCreate(title="Report", description="x"))
    assert result.error.kind == ErrorKind.DUPLICATE_TITLE


def test_get_is_repeatable(service):
    task = _create(service, "t")
    assert service.get_task(task.id).value == service.get_task(task.id).value


def test_malformed_and_missing_ids_are_distinct(service):
    assert service.get_task("not-an-id").error.kind == ErrorKind.MALFORMED_ID
    assert service.get_task(str(uuid.uuid4())).error.kind == ErrorKind.NOT_FOUND
    assert service.delete_task("").error.kind == ErrorKind.MALFORMED_ID
    assert service.update_task("123", TaskUpdate(status="pending")).error.kind == ErrorKind.MALFORMED_ID


def test_delete_then_get_is_not_found(service):
    task = _create(service, "t")
    deleted = service.delete_task(task.id)
    assert deleted.value.id == task.id
    assert service.get_task(task.id).error.kind == ErrorKind.NOT_FOUND
    assert service.delete_task(task.id).error.kind == ErrorKind.NOT_FOUND


def test_update_any_status_to_any_status(service):
    task = _create(service, "t", status="completed")
    back = service.update_task(task.id, TaskUpdate(status="pending")).value
    assert back.status is TaskStatus.PENDING
    assert back.createdAt == task.createdAt
    assert back.updatedAt > task.updatedAt


def test_update_empty_and_invalid(service):
    task = _create(service, "t")
    assert service.update_task(task.id, TaskUpdate()).error.kind == ErrorKind.EMPTY_UPDATE
    bad = service.update_task(task.id, TaskUpdate(status="bogus"))
    assert bad.error.kind == ErrorKind.VALIDATION
    assert service.update_task(str(uuid.uuid4()), TaskUpdate(title="x")).error.kind == ErrorKind.NOT_FOUND


def test_update_cannot_take_another_tasks_title(service):
    _create(service, "A")
    b = _create(service, "B")
    assert service.update_task(b.id, TaskUpdate(title=" A ")).error.kind == ErrorKind.DUPLICATE_TITLE
    assert service.update_task(b.id, TaskUpdate(title="B", description="new")).ok


def test_stats_empty_population(service):
    assert service.stats().value == {"total": 0, "pending": 0, "in-progress": 0, "completed": 0}


def test_stats_total_is_sum_of_statuses(service):
    _create(service, "a")
    _create(service, "b", status="in-progress")
    _create(service, "c", status="in-progress")
    stats = service.stats().value
    assert stats == {"total": 3, "pending": 1, "in-progress": 2, "completed": 0}


def test_search_ignores_status(service):
    _create(service, "Buy milk", status="pending")
    _create(service, "Buy eggs", status="completed")
    _create(service, "Walk dog")
    page = service.list_tasks(search="bUy").value
    assert {t.title for t in page.tasks} == {"Buy milk", "Buy eggs"}
    assert page.total == 2


def test_listing_is_newest_first_and_paged(service):
    for i in range(5):
        _create(service, f"task {i}")
    page = service.list_tasks(page="2", limit="2").value
    assert [t.title for t in page.tasks] == ["task 2", "task 1"]
    assert (page.total, page.total_pages, page.has_next, page.has_prev) == (5, 3, True, True)


def test_invalid_status_filter_vs_invalid_status_on_create(service):
    _create(service, "a", status="completed")
    _create(service, "b")
    assert service.list_tasks(status="bogus").value.total == 2
    assert service.list_tasks(status="completed").value.total == 1
    assert service.create_task(TaskCreate(title="c", description="d", status="bogus")).error.kind == ErrorKind.VALIDATION


def test_list_by_status(service):
    _create(service, "a", status="completed")
    _create(service, "b")
    _create(service, "c", status="completed")
    assert [t.title for t in service.list_by_status("completed").value] == ["c", "a"]
    assert service.list_by_status("done").error.kind == ErrorKind.VALIDATION


def test_storage_failure_is_reported_not_raised(service, store):
    task = _create(service, "t")
    store.fail = True
    for result in (
        service.list_tasks(),
        service.get_task(task.id),
        service.create_task(TaskCreate(title="u", description="d")),
        service.update_task(task.id, TaskUpdate(status="completed")),
        service.delete_task(task.id),
        service.stats(),
    ):
        assert result.error.kind == ErrorKind.STORAGE


def test_update_of_missing_task_is_not_found_even_with_taken_title(service):
    _create(service, "A")
    result = service.update_task(str(uuid.uuid4()), TaskUpdate(title="A"))
    assert result.error.kind == ErrorKind.NOT_FOUND
