from datetime import datetime

from fastapi.testclient import TestClient

from studymate_shared.errors import NotFound

from app.dependencies import get_student_store
from app.main import create_app
from app.security import get_owner_id


async def _noop_init_db(settings):  # pragma: no cover
    return None


async def _noop_close_db():  # pragma: no cover
    return None


class InMemoryStudentStore:
    def __init__(self):
        self.rows = []

    async def create(self, *, owner_id, name, student_number, email):
        student_id = len(self.rows) + 1
        self.rows.append(
            {
                "id": student_id,
                "owner_id": owner_id,
                "name": name,
                "student_number": student_number,
                "email": email,
                "created_at": datetime(2024, 5, 1, 9, 30),
            }
        )
        return student_id

    async def list_for_owner(self, owner_id):
        return [dict(row) for row in self.rows if row["owner_id"] == owner_id]

    async def get(self, student_id, owner_id):
        for row in self.rows:
            if row["id"] == student_id and row["owner_id"] == owner_id:
                return dict(row)
        raise NotFound("Student not found")

    async def delete(self, student_id, owner_id):
        before = len(self.rows)
        self.rows = [row for row in self.rows if not (row["id"] == student_id and row["owner_id"] == owner_id)]
        return before - len(self.rows)


def _build_client(monkeypatch, students, owner_id="alice"):
    monkeypatch.setattr("app.main.init_db", _noop_init_db)
    monkeypatch.setattr("app.main.close_db", _noop_close_db)

    app = create_app()
    app.dependency_overrides[get_owner_id] = lambda: owner_id
    app.dependency_overrides[get_student_store] = lambda: students
    return TestClient(app)


def test_create_list_and_fetch_student(monkeypatch):
    students = InMemoryStudentStore()
    client = _build_client(monkeypatch, students)

    created = client.post(
        "/v1/students", json={"name": "Ada", "studentNumber": "S-001", "email": "ada@example.com"}
    )
    assert created.status_code == 201
    student_id = created.json()["id"]
    assert students.rows[0]["owner_id"] == "alice"

    listing = client.get("/v1/students")
    assert [row["student_number"] for row in listing.json()] == ["S-001"]

    detail = client.get(f"/v1/students/{student_id}")
    assert detail.status_code == 200
    assert detail.json()["email"] == "ada@example.com"


def test_create_student_requires_every_field(monkeypatch):
    students = InMemoryStudentStore()
    client = _build_client(monkeypatch, students)

    response = client.post("/v1/students", json={"name": "Ada", "email": "ada@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidRequest"
    assert students.rows == []


def test_students_of_other_owners_are_hidden(monkeypatch):
    students = InMemoryStudentStore()
    students.rows.append(
        {"id": 1, "owner_id": "bob", "name": "Bo", "student_number": "S-9", "email": "bo@example.com", "created_at": None}
    )
    client = _build_client(monkeypatch, students)

    assert client.get("/v1/students").json() == []
    assert client.get("/v1/students/1").status_code == 404
    assert client.delete("/v1/students/1").status_code == 404
    assert len(students.rows) == 1


def test_delete_student(monkeypatch):
    students = InMemoryStudentStore()
    client = _build_client(monkeypatch, students)
    student_id = client.post(
        "/v1/students", json={"name": "Ada", "student_number": "S-001", "email": "ada@example.com"}
    ).json()["id"]

    response = client.delete(f"/v1/students/{student_id}")

    assert response.status_code == 200
    assert response.json()["message"] == "Student deleted successfully"
    assert students.rows == []
