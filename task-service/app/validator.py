from dataclasses import dataclass
from typing import List, Optional

from app import errors
from app.models import STATUS_VALUES, TaskCreate, TaskStatus, TaskUpdate
from app.result import Err, Ok, Result

TITLE_MAX = 100
DESCRIPTION_MAX = 500
STATUS_MESSAGE = "Status must be one of: " + ", ".join(STATUS_VALUES)


@dataclass(frozen=True)
class TaskFields:
    title: str
    description: str
    status: TaskStatus


def _text(label: str, value: Optional[str], max_len: int, required: bool, problems: List[str]) -> Optional[str]:
    if value is None:
        if required:
            problems.append(f"{label} is required")
        return None
    value = value.strip()
    if not value:
        problems.append(f"{label} cannot be empty")
        return None
    if len(value) > max_len:
        problems.append(f"{label} cannot exceed {max_len} characters")
        return None
    return value


def _status(value: Optional[str], problems: List[str]) -> Optional[TaskStatus]:
    if value is None:
        return None
    status = TaskStatus.parse(value)
    if status is None:
        problems.append(STATUS_MESSAGE)
    return status


def validate_create(payload: TaskCreate) -> Result[TaskFields]:
    problems: List[str] = []
    title = _text("Title", payload.title, TITLE_MAX, True, problems)
    description = _text("Description", payload.description, DESCRIPTION_MAX, True, problems)
    status = _status(payload.status, problems)
    if problems:
        return Err(errors.validation(problems))
    return Ok(TaskFields(title=title, description=description, status=status or TaskStatus.PENDING))


def validate_update(payload: TaskUpdate) -> Result[dict]:
    """Normalize a partial update; only provided fields appear in the result."""
    provided = payload.provided()
    if not provided:
        return Err(errors.empty_update())

    problems: List[str] = []
    changes = {}
    if "title" in provided:
        changes["title"] = _text("Title", provided["title"], TITLE_MAX, False, problems)
    if "description" in provided:
        changes["description"] = _text("Description", provided["description"], DESCRIPTION_MAX, False, problems)
    if "status" in provided:
        changes["status"] = _status(provided["status"], problems)
    if problems:
        return Err(errors.validation(problems))
    return Ok(changes)
