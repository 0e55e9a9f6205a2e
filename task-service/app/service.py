import logging
from typing import Dict, List

from app import errors
from app.models import Task, TaskCreate, TaskStatus, TaskUpdate
from app.query import NEWEST_FIRST, TaskFilter, TaskPage, build_list_query
from app.result import Err, Ok, Result
from app.store import DuplicateTitleError, StoreError, TaskStore
from app.validator import validate_create, validate_update

logger = logging.getLogger(__name__)

INVALID_STATUS_MESSAGE = "Invalid status. Must be: pending, in-progress, or completed"


class TaskService:
    def __init__(self, store: TaskStore):
        self.store = store

    def _storage_failure(self, message, exc):
        logger.exception("%s: %s", message, exc)
        return Err(errors.storage(message))

    def _check_id(self, task_id):
        if not task_id or not self.store.is_valid_id(task_id):
            return Err(errors.malformed_id())
        return None

    def list_tasks(self, status=None, search=None, page=None, limit=None) -> Result[TaskPage]:
        query = build_list_query(status=status, search=search, page=page, limit=limit)
        try:
            tasks = self.store.find(query.filter, query.sort, query.skip, query.limit)
            total = self.store.count_matching(query.filter)
        except StoreError as e:
            return self._storage_failure("Error fetching tasks", e)
        return Ok(TaskPage(tasks=tasks, total=total, page=query.page, limit=query.limit))

    def list_by_status(self, status: str) -> Result[List[Task]]:
        parsed = TaskStatus.parse(status)
        if parsed is None:
            return Err(errors.validation([INVALID_STATUS_MESSAGE]))
        try:
            return Ok(self.store.find(TaskFilter(status=parsed), NEWEST_FIRST))
        except StoreError as e:
            return self._storage_failure("Error fetching tasks by status", e)

    def get_task(self, task_id: str) -> Result[Task]:
        bad = self._check_id(task_id)
        if bad:
            return bad
        try:
            task = self.store.find_by_id(task_id)
        except StoreError as e:
            return self._storage_failure("Error fetching task", e)
        if task is None:
            return Err(errors.not_found())
        return Ok(task)

    def create_task(self, payload: TaskCreate) -> Result[Task]:
        checked = validate_create(payload)
        if not checked.ok:
            return checked
        fields = checked.value
        try:
            # lookup then insert is not atomic; the store's title claim catches the race
            if self.store.find(TaskFilter(title=fields.title), limit=1):
                return Err(errors.duplicate_title())
            task = self.store.insert(
                {"title": fields.title, "description": fields.description, "status": fields.status}
            )
        except DuplicateTitleError:
            logger.info("Concurrent create lost title claim title=%r", fields.title)
            return Err(errors.duplicate_title())
        except StoreError as e:
            return self._storage_failure("Error creating task", e)
        logger.info("Task created id=%s", task.id)
        return Ok(task)

    def update_task(self, task_id: str, payload: TaskUpdate) -> Result[Task]:
        bad = self._check_id(task_id)
        if bad:
            return bad
        checked = validate_update(payload)
        if not checked.ok:
            return checked
        changes = checked.value
        try:
            if self.store.find_by_id(task_id) is None:
                return Err(errors.not_found())
            title = changes.get("title")
            if title is not None:
                owners = self.store.find(TaskFilter(title=title), limit=1)
                if any(t.id != task_id for t in owners):
                    return Err(errors.duplicate_title())
            task = self.store.update_by_id(task_id, changes)
        except DuplicateTitleError:
            return Err(errors.duplicate_title())
        except StoreError as e:
            return self._storage_failure("Error updating task", e)
        if task is None:
            return Err(errors.not_found())
        logger.info("Task updated id=%s", task_id)
        return Ok(task)

    def delete_task(self, task_id: str) -> Result[Task]:
        bad = self._check_id(task_id)
        if bad:
            return bad
        try:
            task = self.store.delete_by_id(task_id)
        except StoreError as e:
            return self._storage_failure("Error deleting task", e)
        if task is None:
            return Err(errors.not_found())
        logger.info("Task deleted id=%s", task_id)
        return Ok(task)

    def stats(self) -> Result[Dict[str, int]]:
        try:
            counts = self.store.aggregate_by_status()
        except StoreError as e:
            return self._storage_failure("Error fetching task statistics", e)
        by_status = {status.value: int(counts.get(status, 0)) for status in TaskStatus}
        return Ok({"total": sum(by_status.values()), **by_status})
