import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

import redis

from app.models import Task, TaskStatus
from app.query import NEWEST_FIRST, SortSpec, TaskFilter

logger = logging.getLogger(__name__)

CREATED_INDEX = "tasks:created"
TITLE_INDEX = "tasks:titles"


class StoreError(Exception):
    pass


class DuplicateTitleError(StoreError):
    pass


class TaskStore(Protocol):
    def find(self, filter: TaskFilter, sort: SortSpec = NEWEST_FIRST, skip: int = 0, limit: Optional[int] = None) -> List[Task]: ...

    def count_matching(self, filter: TaskFilter) -> int: ...

    def find_by_id(self, task_id: str) -> Optional[Task]: ...

    def insert(self, fields: dict) -> Task: ...

    def update_by_id(self, task_id: str, changes: dict) -> Optional[Task]: ...

    def delete_by_id(self, task_id: str) -> Optional[Task]: ...

    def aggregate_by_status(self) -> Dict[TaskStatus, int]: ...

    def is_valid_id(self, task_id: str) -> bool: ...

    def ping(self) -> bool: ...


def new_task_id() -> str:
    return str(uuid.uuid4())


def is_uuid(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def task_key(task_id: str) -> str:
    return f"task:{task_id}"


def status_key(status: TaskStatus) -> str:
    return f"tasks:status:{status.value}"


class RedisTaskStore:
    """
    Redis-backed task store.

    Each task is a JSON document under ``task:{id}``. Listing order comes from
    sorted sets scored by the creation timestamp: one over every task and one
    per status. Titles are claimed in a title -> id hash with HSETNX, so the
    storage layer rejects a second record with the same title even when two
    creates race past the service's lookup.
    """

    def __init__(self, client: redis.Redis):
        self._r = client

    @contextmanager
    def _guard(self):
        try:
            yield
        except redis.RedisError as e:
            raise StoreError(str(e)) from e

    @staticmethod
    def _dump(task: Task) -> str:
        doc = task.model_dump(mode="json", exclude={"id"})
        return json.dumps(doc)

    @staticmethod
    def _load(task_id: str, raw: str) -> Task:
        return Task(id=task_id, **json.loads(raw))

    def _fetch(self, ids: List[str]) -> List[Task]:
        if not ids:
            return []
        raw = self._r.mget([task_key(i) for i in ids])
        # an index entry can outlive its document for the span of a concurrent delete
        return [self._load(i, doc) for i, doc in zip(ids, raw) if doc is not None]

    def _index_for(self, filter: TaskFilter) -> str:
        return status_key(filter.status) if filter.status is not None else CREATED_INDEX

    def _by_title(self, filter: TaskFilter) -> List[Task]:
        task_id = self._r.hget(TITLE_INDEX, filter.title)
        if task_id is None:
            return []
        return [t for t in self._fetch([task_id]) if filter.matches(t)]

    def is_valid_id(self, task_id: str) -> bool:
        return is_uuid(task_id)

    def ping(self) -> bool:
        with self._guard():
            return bool(self._r.ping())

    def find(self, filter: TaskFilter, sort: SortSpec = NEWEST_FIRST, skip: int = 0, limit: Optional[int] = None) -> List[Task]:
        if sort.field != "createdAt":
            raise ValueError(f"unsupported sort field: {sort.field}")
        if limit is not None and limit <= 0:
            return []
        with self._guard():
            if filter.title is not None:
                tasks = self._by_title(filter)
            elif not filter.search:
                index = self._index_for(filter)
                # skip past the end can exceed what ZRANGE accepts as an offset
                if skip >= self._r.zcard(index):
                    return []
                end = -1 if limit is None else skip + limit - 1
                ids = self._r.zrange(index, skip, end, desc=sort.descending)
                return self._fetch(ids)
            else:
                ids = self._r.zrange(self._index_for(filter), 0, -1, desc=sort.descending)
                tasks = [t for t in self._fetch(ids) if filter.matches(t)]
        end = None if limit is None else skip + limit
        return tasks[skip:end]

    def count_matching(self, filter: TaskFilter) -> int:
        with self._guard():
            if filter.title is not None:
                return len(self._by_title(filter))
            if not filter.search:
                return int(self._r.zcard(self._index_for(filter)))
            ids = self._r.zrange(self._index_for(filter), 0, -1)
            return sum(1 for t in self._fetch(ids) if filter.matches(t))

    def find_by_id(self, task_id: str) -> Optional[Task]:
        with self._guard():
            raw = self._r.get(task_key(task_id))
        if raw is None:
            return None
        return self._load(task_id, raw)

    def insert(self, fields: dict) -> Task:
        now = utcnow()
        task = Task(
            id=new_task_id(),
            title=fields["title"],
            description=fields["description"],
            status=fields.get("status") or TaskStatus.PENDING,
            createdAt=now,
            updatedAt=now,
        )
        score = now.timestamp()
        with self._guard():
            if not self._r.hsetnx(TITLE_INDEX, task.title, task.id):
                raise DuplicateTitleError(task.title)
            try:
                with self._r.pipeline(transaction=True) as p:
                    p.set(task_key(task.id), self._dump(task))
                    p.zadd(CREATED_INDEX, {task.id: score})
                    p.zadd(status_key(task.status), {task.id: score})
                    p.execute()
            except redis.RedisError:
                self._r.hdel(TITLE_INDEX, task.title)
                raise
        logger.debug("Task inserted id=%s status=%s", task.id, task.status.value)
        return task

    def update_by_id(self, task_id: str, changes: dict) -> Optional[Task]:
        with self._guard():
            raw = self._r.get(task_key(task_id))
            if raw is None:
                return None
            current = self._load(task_id, raw)

            new_title = changes.get("title")
            moved_title = new_title is not None and new_title != current.title
            if moved_title and not self._r.hsetnx(TITLE_INDEX, new_title, task_id):
                if self._r.hget(TITLE_INDEX, new_title) != task_id:
                    raise DuplicateTitleError(new_title)

            updates = {k: v for k, v in changes.items() if k in ("title", "description", "status") and v is not None}
            updates["updatedAt"] = max(utcnow(), current.createdAt)
            updated = current.model_copy(update=updates)

            score = current.createdAt.timestamp()
            try:
                with self._r.pipeline(transaction=True) as p:
                    p.set(task_key(task_id), self._dump(updated))
                    if updated.status != current.status:
                        p.zrem(status_key(current.status), task_id)
                        p.zadd(status_key(updated.status), {task_id: score})
                    if moved_title:
                        p.hdel(TITLE_INDEX, current.title)
                    p.execute()
            except redis.RedisError:
                if moved_title:
                    self._r.hdel(TITLE_INDEX, new_title)
                raise
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(updates))
        return updated

    def delete_by_id(self, task_id: str) -> Optional[Task]:
        with self._guard():
            raw = self._r.get(task_key(task_id))
            if raw is None:
                return None
            task = self._load(task_id, raw)
            with self._r.pipeline(transaction=True) as p:
                p.delete(task_key(task_id))
                p.zrem(CREATED_INDEX, task_id)
                p.zrem(status_key(task.status), task_id)
                p.hdel(TITLE_INDEX, task.title)
                p.execute()
        logger.debug("Task deleted id=%s", task_id)
        return task

    def aggregate_by_status(self) -> Dict[TaskStatus, int]:
        with self._guard():
            with self._r.pipeline(transaction=False) as p:
                for status in TaskStatus:
                    p.zcard(status_key(status))
                counts = p.execute()
        return {status: int(n) for status, n in zip(TaskStatus, counts)}
