from __future__ import annotations

import enum
import logging
from typing import Callable, Generic, List, Optional, TypeVar

from .errors import Err, Result
from .gateway import TaskGateway, UserGateway
from .models import Task, TaskDraft, User, UserDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", User, Task)


class LoadState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class _ListComponent(Generic[E]):
    """
    Local copy of one entity list plus a user-visible error slot.

    The list is only changed after the server acknowledged an operation; a failed
    operation leaves it untouched and puts the domain error message in ``error``.
    """

    def __init__(self) -> None:
        self.items: List[E] = []
        self.error: Optional[str] = None
        self.state = LoadState.IDLE

    def _settle(self, result: Result[T], on_success: Callable[[T], None]) -> bool:
        if isinstance(result, Err):
            logger.warning("%s: %s", type(self).__name__, result.error.message)
            self.error = result.error.message
            return False
        on_success(result.value)
        self.error = None
        return True

    async def _load(self, fetch) -> None:
        # Loading happens once; later calls are no-ops
        if self.state is not LoadState.IDLE:
            return
        self.state = LoadState.LOADING
        loaded = self._settle(await fetch(), self._replace_all)
        self.state = LoadState.LOADED if loaded else LoadState.LOAD_FAILED

    def _replace_all(self, items: List[E]) -> None:
        self.items = list(items)

    def _append(self, item: E) -> None:
        self.items.append(item)

    def _drop(self, item_id: int) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def _swap(self, item: E) -> None:
        self.items = [item if i.id == item.id else i for i in self.items]


# PUBLIC_INTERFACE
class UsersComponent(_ListComponent[User]):
    """Users list with an add form (``new_name``/``new_email``) and per-row removal."""

    def __init__(self, gateway: UserGateway) -> None:
        super().__init__()
        self._gateway = gateway
        self.new_name = ""
        self.new_email = ""

    @property
    def users(self) -> List[User]:
        return self.items

    async def init(self) -> None:
        await self._load(self._gateway.fetch_all)

    async def add_user(self) -> bool:
        draft = UserDraft(name=self.new_name, email=self.new_email)
        added = self._settle(await self._gateway.create(draft), self._append)
        if added:
            self.new_name = ""
            self.new_email = ""
        return added

    async def remove_user(self, user_id: int) -> bool:
        return self._settle(await self._gateway.remove_by_id(user_id), lambda _: self._drop(user_id))


# PUBLIC_INTERFACE
class TasksComponent(_ListComponent[Task]):
    """Tasks list with an add form (``new_title``/``new_description``), toggling and removal."""

    def __init__(self, gateway: TaskGateway) -> None:
        super().__init__()
        self._gateway = gateway
        self.new_title = ""
        self.new_description = ""

    @property
    def tasks(self) -> List[Task]:
        return self.items

    async def init(self) -> None:
        await self._load(self._gateway.fetch_all)

    async def add_task(self) -> bool:
        draft = TaskDraft(title=self.new_title, description=self.new_description)
        added = self._settle(await self._gateway.create(draft), self._append)
        if added:
            self.new_title = ""
            self.new_description = ""
        return added

    async def toggle_task(self, task_id: int) -> bool:
        return self._settle(await self._gateway.toggle_by_id(task_id), self._swap)

    async def remove_task(self, task_id: int) -> bool:
        return self._settle(await self._gateway.remove_by_id(task_id), lambda _: self._drop(task_id))
