from typing import Iterable, Optional, Union

from app.errors import ErrorKind, TaskError
from app.models import Task
from app.query import TaskPage


def _data(value):
    if isinstance(value, Task):
        return value.public()
    if isinstance(value, (list, tuple)):
        return [_data(v) for v in value]
    return value


def shape_success(data: Union[Task, Iterable[Task], dict], message: Optional[str] = None, **extra) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    body.update(extra)
    body["data"] = _data(data)
    return body


def shape_page(page: TaskPage) -> dict:
    return shape_success(
        page.tasks,
        count=len(page.tasks),
        total=page.total,
        page=page.page,
        totalPages=page.total_pages,
        hasNext=page.has_next,
        hasPrev=page.has_prev,
    )


def shape_failure(error: TaskError) -> dict:
    body = {"success": False, "message": error.message}
    if error.kind == ErrorKind.VALIDATION:
        body["errors"] = list(error.errors)
    return body
