"""Tagged results returned by every public client operation.

Callers branch on ``result.ok`` (or ``isinstance(result, Ok)``) instead of
catching exceptions::

    result = await controller.submit_login(email, password)
    if result.ok:
        session = result.value
    else:
        show(result.error.message)
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .error import ErrorKind, TranslatedError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying `value`."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a `TranslatedError`."""

    error: TranslatedError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    def map(self, fn: Callable[[Any], Any]) -> "Err":
        return self

    def unwrap(self) -> Any:
        raise ValueError(f"Called unwrap() on an error result: {self.error.kind.value}")


Result = Union[Ok[T], Err]
