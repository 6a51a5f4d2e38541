from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


# PUBLIC_INTERFACE
class DomainError(Exception):
    """
    Failure of a client operation, expressed as a human-readable message.

    ``status_code`` records the HTTP status that caused it (None for transport
    failures) for logging only; presentation code reads ``message``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok = True


@dataclass(frozen=True)
class Err:
    error: DomainError
    ok = False


# Outcome of a gateway call: either Ok(value) or Err(error)
Result = Union[Ok[T], Err]
