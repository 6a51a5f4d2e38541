from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from src.api.errors import StoreUnavailable
from src.api.main import create_app
from src.api.repositories import InMemoryTaskRepository, InMemoryUserRepository, TaskRepository
from src.api.settings import get_settings


class BrokenTaskRepository(TaskRepository):
    """Store whose backing database is down."""

    def list(self):
        raise StoreUnavailable()

    def create(self, data):
        raise StoreUnavailable()

    def remove(self, task_id):
        raise StoreUnavailable()

    def toggle_completed(self, task_id):
        raise StoreUnavailable()


def make_client(tasks=None) -> TestClient:
    app = create_app(
        settings=replace(get_settings(), persistence_backend="memory"),
        users=InMemoryUserRepository(),
        tasks=tasks if tasks is not None else InMemoryTaskRepository(),
    )
    return TestClient(app)


def create_task_payload(title="Test Task", description="Do something"):
    return {"title": title, "description": description}


@pytest.fixture
def client() -> TestClient:
    return make_client()


class TestTasksCRUD:
    def test_list_empty(self, client):
        res = client.get("/api/tasks")
        assert res.status_code == 200
        assert res.json() == []

    def test_create_task(self, client):
        res = client.post("/api/tasks", json=create_task_payload(title="Buy milk"))
        assert res.status_code == 201
        assert res.json() == {"id": 1, "title": "Buy milk", "description": "Do something", "completed": False}

    def test_create_ignores_completed_and_id(self, client):
        payload = {"id": 42, "title": "Sneaky", "description": "x", "completed": True}
        res = client.post("/api/tasks", json=payload)
        assert res.status_code == 201
        task = res.json()
        assert task["id"] == 1
        assert task["completed"] is False

    def test_create_without_description(self, client):
        res = client.post("/api/tasks", json={"title": "Only title"})
        assert res.status_code == 201
        assert res.json()["description"] == ""

    def test_ids_follow_creation_order(self, client):
        ids = [client.post("/api/tasks", json=create_task_payload(title=f"Task {i}")).json()["id"] for i in range(4)]
        assert ids == [1, 2, 3, 4]
        assert [t["title"] for t in client.get("/api/tasks").json()] == ["Task 0", "Task 1", "Task 2", "Task 3"]

    def test_toggle_flips_completed(self):
        seeded = [
            {"id": i, "title": f"Task {i}", "description": "", "completed": False} for i in range(1, 6)
        ]
        client = make_client(tasks=InMemoryTaskRepository(seeded))

        res = client.patch("/api/tasks/5")
        assert res.status_code == 200
        assert res.json() == {"id": 5, "title": "Task 5", "description": "", "completed": True}

        res = client.patch("/api/tasks/5")
        assert res.json()["completed"] is False

    def test_toggle_unknown_id_is_404(self, client):
        res = client.patch("/api/tasks/7")
        assert res.status_code == 404
        assert res.json() == {"error": "task_not_found", "message": "Task not found"}

    def test_delete_task(self, client):
        tid = client.post("/api/tasks", json=create_task_payload(title="ToDelete")).json()["id"]

        res = client.delete(f"/api/tasks/{tid}")
        assert res.status_code == 200
        assert res.json()["id"] == tid
        assert res.json()["title"] == "ToDelete"
        assert client.get("/api/tasks").json() == []

        res_again = client.delete(f"/api/tasks/{tid}")
        assert res_again.status_code == 404
        assert res_again.json()["error"] == "task_not_found"


class TestValidationErrors:
    def test_missing_title_is_400(self, client):
        res = client.post("/api/tasks", json={"description": "no title"})
        assert res.status_code == 400
        body = res.json()
        assert body["error"] == "validation_error"
        assert isinstance(body["detail"], list)

    def test_malformed_json_is_400(self, client):
        res = client.post("/api/tasks", content=b"{not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 400

    def test_non_numeric_ids_are_400_not_404(self, client):
        assert client.patch("/api/tasks/five").status_code == 400
        assert client.delete("/api/tasks/five").status_code == 400


class TestStoreFailures:
    def test_list_failure_is_500_without_partial_data(self):
        client = make_client(tasks=BrokenTaskRepository())
        res = client.get("/api/tasks")
        assert res.status_code == 500
        assert res.json() == {"error": "tasks_fetch_failed", "message": "Error fetching tasks"}

    @pytest.mark.parametrize(
        "method, path, code",
        [
            ("post", "/api/tasks", "task_create_failed"),
            ("patch", "/api/tasks/1", "task_toggle_failed"),
            ("delete", "/api/tasks/1", "task_delete_failed"),
        ],
    )
    def test_mutation_failures_are_500(self, method, path, code):
        client = make_client(tasks=BrokenTaskRepository())
        kwargs = {"json": create_task_payload()} if method == "post" else {}
        res = getattr(client, method)(path, **kwargs)
        assert res.status_code == 500
        assert res.json()["error"] == code
