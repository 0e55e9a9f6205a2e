from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ErrorKind(str, Enum):
    MALFORMED_ID = "malformed_id"
    VALIDATION = "validation"
    EMPTY_UPDATE = "empty_update"
    DUPLICATE_TITLE = "duplicate_title"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


HTTP_STATUS = {
    ErrorKind.MALFORMED_ID: 400,
    ErrorKind.VALIDATION: 400,
    ErrorKind.EMPTY_UPDATE: 400,
    ErrorKind.DUPLICATE_TITLE: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
}


@dataclass(frozen=True)
class TaskError:
    kind: ErrorKind
    message: str
    errors: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


def malformed_id() -> TaskError:
    return TaskError(ErrorKind.MALFORMED_ID, "Invalid task ID format")


def not_found() -> TaskError:
    return TaskError(ErrorKind.NOT_FOUND, "Task not found")


def duplicate_title() -> TaskError:
    return TaskError(ErrorKind.DUPLICATE_TITLE, "A task with this title already exists")


def validation(errors: List[str]) -> TaskError:
    return TaskError(ErrorKind.VALIDATION, "Validation error", list(errors))


def empty_update() -> TaskError:
    return TaskError(ErrorKind.EMPTY_UPDATE, "No update data provided")


def storage(message: str) -> TaskError:
    return TaskError(ErrorKind.STORAGE, message)
