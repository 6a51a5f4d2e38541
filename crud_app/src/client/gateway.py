from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar

import httpx

from .errors import DomainError, Err, Ok, Result
from .models import Task, TaskDraft, User, UserDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_API_URL = "http://localhost:8080"


class _Gateway:
    """
    Shared request plumbing for the resource gateways.

    Each call is a single request/response exchange: no retry, no batching, no
    caching. Transport failures, timeouts, non-2xx statuses and unreadable bodies
    are logged and come back as ``Err(DomainError(message))``; callers never see
    an ``httpx`` exception or a raw response.
    """

    resource = ""

    def __init__(self, http: httpx.AsyncClient, base_url: str = DEFAULT_API_URL) -> None:
        self._http = http
        self._url = f"{base_url.rstrip('/')}/api/{self.resource}"

    def _item_url(self, item_id: int) -> str:
        return f"{self._url}/{item_id}"

    async def _call(
        self,
        method: str,
        url: str,
        message: str,
        parse: Callable[[Any], T],
        json: Optional[dict] = None,
    ) -> Result[T]:
        try:
            response = await self._http.request(method, url, json=json)
            response.raise_for_status()
            return Ok(parse(response.json()))
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error("%s: %s %s returned %s", message, method, url, status_code)
            return Err(DomainError(message, status_code))
        except httpx.HTTPError as exc:
            logger.error("%s: %s %s failed: %r", message, method, url, exc)
            return Err(DomainError(message))
        except (ValueError, TypeError) as exc:
            logger.error("%s: unreadable response from %s %s: %s", message, method, url, exc)
            return Err(DomainError(message))


# PUBLIC_INTERFACE
class UserGateway(_Gateway):
    """Client for the ``/api/users`` endpoints."""

    resource = "users"

    async def fetch_all(self) -> Result[List[User]]:
        return await self._call(
            "GET", self._url, "Error fetching users", lambda body: [User.model_validate(u) for u in body]
        )

    async def create(self, draft: UserDraft) -> Result[User]:
        return await self._call(
            "POST", self._url, "Error adding user", User.model_validate, json=draft.model_dump()
        )

    async def remove_by_id(self, user_id: int) -> Result[User]:
        return await self._call("DELETE", self._item_url(user_id), "Error deleting user", User.model_validate)


# PUBLIC_INTERFACE
class TaskGateway(_Gateway):
    """Client for the ``/api/tasks`` endpoints."""

    resource = "tasks"

    async def fetch_all(self) -> Result[List[Task]]:
        return await self._call(
            "GET", self._url, "Error fetching tasks", lambda body: [Task.model_validate(t) for t in body]
        )

    async def create(self, draft: TaskDraft) -> Result[Task]:
        return await self._call(
            "POST", self._url, "Error adding task", Task.model_validate, json=draft.model_dump()
        )

    async def toggle_by_id(self, task_id: int) -> Result[Task]:
        return await self._call("PATCH", self._item_url(task_id), "Error updating task", Task.model_validate)

    async def remove_by_id(self, task_id: int) -> Result[Task]:
        return await self._call("DELETE", self._item_url(task_id), "Error deleting task", Task.model_validate)
