from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple

from .models import TaskEntity, UserEntity
from .schemas import TaskCreate, UserCreate
from .settings import Settings

logger = logging.getLogger(__name__)

DEMO_USERS: Tuple[UserEntity, ...] = (
    {"id": 1, "name": "Mario Rossi", "email": "mario@prova.com"},
    {"id": 2, "name": "Giulia Bianchi", "email": "giulia@prova.com"},
)


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract store contract for users."""

    @abstractmethod
    def list(self) -> List[UserEntity]:
        """Return all users in insertion order."""

    @abstractmethod
    def create(self, data: UserCreate) -> UserEntity:
        """Assign the next id, store the user and return it."""

    @abstractmethod
    def remove(self, user_id: int) -> Optional[UserEntity]:
        """Remove a user by id. Return the removed user, or None if not found."""

    def close(self) -> None:
        """Release any resources held by the store."""


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract store contract for tasks."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return all tasks in insertion order."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Assign the next id, store a not-completed task and return it."""

    @abstractmethod
    def remove(self, task_id: int) -> Optional[TaskEntity]:
        """Remove a task by id. Return the removed task, or None if not found."""

    @abstractmethod
    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        """Flip the completed flag of a task. Return the updated task, or None if not found."""

    def close(self) -> None:
        """Release any resources held by the store."""


class _InMemoryStore:
    """
    Thread-safe, insertion-ordered collection of dict records keyed by id.

    New ids are ``max(existing ids) + 1``, or 1 when the store is empty, so an id
    freed by removing the highest record is handed out again.
    """

    def __init__(self, initial: Iterable[dict] = ()) -> None:
        self._lock = RLock()
        self._items: Dict[int, dict] = {}
        for item in initial:
            self._items[int(item["id"])] = dict(item)

    def _next_id(self) -> int:
        return max(self._items) + 1 if self._items else 1

    def all(self) -> List[dict]:
        with self._lock:
            return [item.copy() for item in self._items.values()]

    def add(self, fields: dict) -> dict:
        with self._lock:
            entity = {"id": self._next_id(), **fields}
            self._items[entity["id"]] = entity
            return entity.copy()

    def pop(self, item_id: int) -> Optional[dict]:
        with self._lock:
            return self._items.pop(item_id, None)

    def flip(self, item_id: int, field: str) -> Optional[dict]:
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                return None
            updated = {**existing, field: not existing[field]}
            self._items[item_id] = updated
            return updated.copy()


class InMemoryUserRepository(UserRepository):
    """
    In-memory users store, optionally seeded with existing users.
    """

    def __init__(self, initial: Iterable[UserEntity] = ()) -> None:
        self._store = _InMemoryStore(initial)

    def list(self) -> List[UserEntity]:
        return self._store.all()  # type: ignore[return-value]

    def create(self, data: UserCreate) -> UserEntity:
        return self._store.add({"name": data.name, "email": data.email})  # type: ignore[return-value]

    def remove(self, user_id: int) -> Optional[UserEntity]:
        return self._store.pop(user_id)  # type: ignore[return-value]


class InMemoryTaskRepository(TaskRepository):
    """
    In-memory tasks store.
    """

    def __init__(self, initial: Iterable[TaskEntity] = ()) -> None:
        self._store = _InMemoryStore(initial)

    def list(self) -> List[TaskEntity]:
        return self._store.all()  # type: ignore[return-value]

    def create(self, data: TaskCreate) -> TaskEntity:
        return self._store.add(  # type: ignore[return-value]
            {"title": data.title, "description": data.description or "", "completed": False}
        )

    def remove(self, task_id: int) -> Optional[TaskEntity]:
        return self._store.pop(task_id)  # type: ignore[return-value]

    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        return self._store.flip(task_id, "completed")  # type: ignore[return-value]


# PUBLIC_INTERFACE
def build_repositories(settings: Settings) -> Tuple[UserRepository, TaskRepository]:
    """
    Factory returning the configured ``(users, tasks)`` stores.
    - memory: InMemoryUserRepository (seeded with demo users unless disabled) and InMemoryTaskRepository
    - sql: SQLUserRepository and SQLTaskRepository sharing one pooled Database
    """
    if settings.persistence_backend == "sql":
        from .db import Database, SQLTaskRepository, SQLUserRepository

        database = Database(settings.database_url(), pool_size=settings.db_pool_size)
        logger.info("Using SQL persistence backend (%s)", database.dialect)
        return SQLUserRepository(database), SQLTaskRepository(database)

    logger.info("Using in-memory persistence backend")
    seed = DEMO_USERS if settings.seed_demo_users else ()
    return InMemoryUserRepository(seed), InMemoryTaskRepository()
