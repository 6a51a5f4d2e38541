from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base class for errors that the HTTP layer turns into JSON responses.

    Response format:
        {"error": "<machine readable code>", "message": "<human readable message>"}
    """

    status_code = 500
    code = "internal_error"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    message = "Request validation failed"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    message = "Resource not found"


class StoreUnavailable(AppError):
    """Database or connection failure. The cause is chained, never serialized."""

    status_code = 500
    code = "store_unavailable"
    message = "Storage is unavailable"


# PUBLIC_INTERFACE
@contextmanager
def store_failures(code: str, message: str) -> Iterator[None]:
    """
    Re-raise any ``StoreUnavailable`` from the wrapped block as a 500 carrying an
    operation specific code and message. The underlying cause is logged here and
    stays out of the response body.
    """
    try:
        yield
    except StoreUnavailable as exc:
        logger.error("%s (%s)", message, code, exc_info=exc)
        raise StoreUnavailable(message, code=code) from exc
