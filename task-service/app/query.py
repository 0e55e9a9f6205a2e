import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

from app.models import Task, TaskStatus

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class TaskFilter:
    status: Optional[TaskStatus] = None
    search: Optional[str] = None
    title: Optional[str] = None

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.title is not None and task.title != self.title:
            return False
        if self.search:
            needle = self.search.casefold()
            return needle in task.title.casefold() or needle in task.description.casefold()
        return True


@dataclass(frozen=True)
class SortSpec:
    field: str = "createdAt"
    descending: bool = True


NEWEST_FIRST = SortSpec("createdAt", descending=True)


@dataclass(frozen=True)
class ListQuery:
    filter: TaskFilter
    page: int
    limit: int
    sort: SortSpec = NEWEST_FIRST

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class TaskPage:
    tasks: List[Task]
    total: int
    page: int
    limit: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def parse_int(raw, default: int) -> int:
    """Lenient integer parse: leading digits win, zero or garbage means default."""
    if raw is None:
        return default
    if isinstance(raw, int):
        value = raw
    else:
        m = _INT_PREFIX.match(str(raw))
        if not m:
            return default
        value = int(m.group(1))
    return value or default


def build_list_query(status=None, search=None, page=None, limit=None) -> ListQuery:
    # unknown statuses are ignored when listing, unlike writes
    parsed_status = TaskStatus.parse(status) if status else None
    return ListQuery(
        filter=TaskFilter(status=parsed_status, search=search or None),
        page=max(1, parse_int(page, DEFAULT_PAGE)),
        limit=min(MAX_LIMIT, max(1, parse_int(limit, DEFAULT_LIMIT))),
    )
