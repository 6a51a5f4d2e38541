from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from src.api.db import Database, SQLTaskRepository, SQLUserRepository
from src.api.errors import StoreUnavailable
from src.api.main import create_app
from src.api.schemas import TaskCreate, UserCreate
from src.api.settings import get_settings


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    yield db
    db.dispose()


class TestDatabase:
    def test_query_binds_parameters(self, database):
        database.ensure_schema()
        hostile = "x'); DROP TABLE users; --"
        database.query("INSERT INTO users (name, email) VALUES (:name, :email)", {"name": hostile, "email": "e"})
        rows = database.query("SELECT name FROM users WHERE name = :name", {"name": hostile}).rows
        assert rows == [{"name": hostile}]

    def test_insert_reports_last_insert_id_and_rowcount(self, database):
        database.ensure_schema()
        result = database.query("INSERT INTO users (name, email) VALUES (:n, :e)", {"n": "A", "e": "a@x"})
        assert result.last_insert_id == 1
        assert result.rowcount == 1

    def test_failure_surfaces_as_store_unavailable(self, database):
        with pytest.raises(StoreUnavailable) as excinfo:
            database.query("SELECT * FROM missing_table")
        # The driver error is chained but not part of the public message
        assert excinfo.value.__cause__ is not None
        assert "missing_table" not in excinfo.value.message

    def test_ensure_schema_is_idempotent(self, database):
        database.ensure_schema()
        database.ensure_schema()
        assert database.dialect == "sqlite"


class TestSQLUserRepository:
    def test_create_list_remove(self, database):
        repo = SQLUserRepository(database)
        first = repo.create(UserCreate(name="Ada", email="ada@x.com"))
        second = repo.create(UserCreate(name="Bob", email="bob@x.com"))
        assert (first["id"], second["id"]) == (1, 2)
        assert repo.list() == [first, second]

        assert repo.remove(first["id"]) == first
        assert repo.remove(first["id"]) is None
        assert repo.list() == [second]


class TestSQLTaskRepository:
    def test_create_and_toggle(self, database):
        repo = SQLTaskRepository(database)
        created = repo.create(TaskCreate(title="Write report", description="Q3"))
        assert created == {"id": 1, "title": "Write report", "description": "Q3", "completed": False}

        assert repo.toggle_completed(1)["completed"] is True
        assert repo.toggle_completed(1)["completed"] is False

    def test_missing_ids(self, database):
        repo = SQLTaskRepository(database)
        assert repo.toggle_completed(5) is None
        assert repo.remove(5) is None

    def test_remove_returns_task(self, database):
        repo = SQLTaskRepository(database)
        created = repo.create(TaskCreate(title="Temp"))
        assert repo.remove(created["id"]) == created
        assert repo.list() == []

    def test_lost_table_raises_store_unavailable(self, database):
        repo = SQLTaskRepository(database)
        database.query("DROP TABLE tasks")
        with pytest.raises(StoreUnavailable):
            repo.list()


class TestSQLBackendThroughApi:
    def make_client(self, database) -> TestClient:
        users, tasks = SQLUserRepository(database), SQLTaskRepository(database)
        return TestClient(create_app(replace(get_settings(), persistence_backend="sql"), users, tasks))

    def test_database_failure_during_list_is_500(self, database):
        client = self.make_client(database)

        assert client.post("/api/tasks", json={"title": "Persisted"}).status_code == 201
        assert [t["title"] for t in client.get("/api/tasks").json()] == ["Persisted"]

        database.query("DROP TABLE tasks")
        res = client.get("/api/tasks")
        assert res.status_code == 500
        assert res.json() == {"error": "tasks_fetch_failed", "message": "Error fetching tasks"}

    @pytest.mark.parametrize(
        "method, path",
        [
            ("patch", "/api/tasks/99999999999999999999"),
            ("delete", "/api/tasks/99999999999999999999"),
            ("delete", "/api/users/99999999999999999999"),
        ],
    )
    def test_id_beyond_integer_column_is_400(self, database, method, path):
        client = self.make_client(database)
        res = getattr(client, method)(path)
        assert res.status_code == 400
        assert res.json()["error"] == "validation_error"

    def test_largest_id_is_a_plain_404(self, database):
        client = self.make_client(database)
        res = client.patch(f"/api/tasks/{2**63 - 1}")
        assert res.status_code == 404
        assert res.json()["error"] == "task_not_found"


class TestUnsupportedBackends:
    def test_url_without_lastrowid_support_is_rejected(self):
        with pytest.raises(ValueError, match="postgresql"):
            Database("postgresql://app@localhost/todo_db")
