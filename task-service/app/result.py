"""Tagged results returned by the task engine instead of raised errors."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from app.errors import TaskError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: TaskError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
