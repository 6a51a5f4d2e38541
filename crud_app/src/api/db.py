from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreUnavailable
from .models import TaskEntity, UserEntity
from .repositories import TaskRepository, UserRepository
from .schemas import TaskCreate, UserCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    users: str = "users"
    tasks: str = "tasks"
    id: str = "id"
    name: str = "name"
    email: str = "email"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"


_COLS = _Cols()

_SCHEMA = {
    "sqlite": (
        f"""
        CREATE TABLE IF NOT EXISTS {_COLS.users} (
            {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
            {_COLS.name} TEXT NOT NULL,
            {_COLS.email} TEXT NOT NULL
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {_COLS.tasks} (
            {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
            {_COLS.title} TEXT NOT NULL,
            {_COLS.description} TEXT NULL,
            {_COLS.completed} BOOLEAN NOT NULL DEFAULT 0
        )
        """,
    ),
    "mysql": (
        f"""
        CREATE TABLE IF NOT EXISTS {_COLS.users} (
            {_COLS.id} INT AUTO_INCREMENT PRIMARY KEY,
            {_COLS.name} VARCHAR(255) NOT NULL,
            {_COLS.email} VARCHAR(255) NOT NULL
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {_COLS.tasks} (
            {_COLS.id} INT AUTO_INCREMENT PRIMARY KEY,
            {_COLS.title} TEXT NOT NULL,
            {_COLS.description} TEXT NULL,
            {_COLS.completed} BOOLEAN NOT NULL DEFAULT FALSE
        )
        """,
    ),
}
_SCHEMA["mariadb"] = _SCHEMA["mysql"]


@dataclass
class QueryResult:
    """Outcome of a single statement."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    last_insert_id: Optional[int] = None


# PUBLIC_INTERFACE
class Database:
    """
    Persistence adapter over a pooled SQLAlchemy engine.

    Every call to ``query`` borrows one connection from the pool, runs exactly one
    parameterized statement in its own transaction and hands the connection back,
    whether the statement succeeded or not. Values are always passed as bound
    parameters (``:name`` placeholders); they are never formatted into SQL text.
    Driver and connectivity failures surface as ``StoreUnavailable``; there is no retry.

    Only SQLite and MySQL/MariaDB URLs are accepted: new ids are read back through
    the driver's ``lastrowid``.
    """

    def __init__(self, url: str, pool_size: Optional[int] = None, echo: bool = False) -> None:
        backend = make_url(url).get_backend_name()
        if backend not in _SCHEMA:
            raise ValueError(f"Unsupported database backend {backend!r}; use sqlite or mysql")
        kwargs: Dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
        if pool_size and backend != "sqlite":
            kwargs["pool_size"] = pool_size
        self._engine: Engine = create_engine(url, **kwargs)

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        try:
            with self._engine.begin() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                if result.returns_rows:
                    rows = [dict(row._mapping) for row in result]
                    return QueryResult(rows=rows, rowcount=len(rows))
                return QueryResult(rowcount=result.rowcount, last_insert_id=result.lastrowid)
        except SQLAlchemyError as exc:
            logger.error("Query failed: %s", sql.strip().splitlines()[0], exc_info=exc)
            raise StoreUnavailable() from exc

    def ensure_schema(self) -> None:
        """Create the users and tasks tables if they do not exist yet."""
        statements = _SCHEMA[self.dialect]
        for ddl in statements:
            self.query(ddl)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()


def _row_to_user(row: Mapping[str, Any]) -> UserEntity:
    return {
        "id": int(row[_COLS.id]),
        "name": str(row[_COLS.name]),
        "email": str(row[_COLS.email]),
    }


def _row_to_task(row: Mapping[str, Any]) -> TaskEntity:
    return {
        "id": int(row[_COLS.id]),
        "title": str(row[_COLS.title]),
        "description": row[_COLS.description] if row[_COLS.description] is not None else "",
        "completed": bool(row[_COLS.completed]),
    }


class SQLUserRepository(UserRepository):
    """
    Users store backed by the ``users`` table; ids come from the auto-increment key.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._db.ensure_schema()

    def _get(self, user_id: int) -> Optional[UserEntity]:
        rows = self._db.query(
            f"SELECT * FROM {_COLS.users} WHERE {_COLS.id} = :id", {"id": user_id}
        ).rows
        return _row_to_user(rows[0]) if rows else None

    def list(self) -> List[UserEntity]:
        rows = self._db.query(f"SELECT * FROM {_COLS.users} ORDER BY {_COLS.id}").rows
        return [_row_to_user(r) for r in rows]

    def create(self, data: UserCreate) -> UserEntity:
        result = self._db.query(
            f"INSERT INTO {_COLS.users} ({_COLS.name}, {_COLS.email}) VALUES (:name, :email)",
            {"name": data.name, "email": data.email},
        )
        created = self._get(int(result.last_insert_id or 0))
        if created is None:
            raise StoreUnavailable()
        return created

    def remove(self, user_id: int) -> Optional[UserEntity]:
        existing = self._get(user_id)
        if existing is None:
            return None
        result = self._db.query(f"DELETE FROM {_COLS.users} WHERE {_COLS.id} = :id", {"id": user_id})
        return existing if result.rowcount > 0 else None

    def close(self) -> None:
        self._db.dispose()


class SQLTaskRepository(TaskRepository):
    """
    Tasks store backed by the ``tasks`` table.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._db.ensure_schema()

    def _get(self, task_id: int) -> Optional[TaskEntity]:
        rows = self._db.query(
            f"SELECT * FROM {_COLS.tasks} WHERE {_COLS.id} = :id", {"id": task_id}
        ).rows
        return _row_to_task(rows[0]) if rows else None

    def list(self) -> List[TaskEntity]:
        rows = self._db.query(f"SELECT * FROM {_COLS.tasks} ORDER BY {_COLS.id}").rows
        return [_row_to_task(r) for r in rows]

    def create(self, data: TaskCreate) -> TaskEntity:
        result = self._db.query(
            f"""
            INSERT INTO {_COLS.tasks} ({_COLS.title}, {_COLS.description}, {_COLS.completed})
            VALUES (:title, :description, :completed)
            """,
            {"title": data.title, "description": data.description, "completed": False},
        )
        created = self._get(int(result.last_insert_id or 0))
        if created is None:
            raise StoreUnavailable()
        return created

    def remove(self, task_id: int) -> Optional[TaskEntity]:
        existing = self._get(task_id)
        if existing is None:
            return None
        result = self._db.query(f"DELETE FROM {_COLS.tasks} WHERE {_COLS.id} = :id", {"id": task_id})
        return existing if result.rowcount > 0 else None

    def close(self) -> None:
        self._db.dispose()

    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        result = self._db.query(
            f"UPDATE {_COLS.tasks} SET {_COLS.completed} = NOT {_COLS.completed} WHERE {_COLS.id} = :id",
            {"id": task_id},
        )
        if result.rowcount == 0:
            return None
        return self._get(task_id)
