from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from app.main import app
from app.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from app.services.employee_store import EmployeeNotFoundError
from app.services.view_sessions import form_sessions, listing_sessions


def _make_employee(employee_id: str, name: str, **overrides: Any) -> Employee:
    data: dict[str, Any] = {
        "id": employee_id,
        "name": name,
        "age": 30,
        "gender": "female",
        "occupation": "Engineer",
        "phone": "+4915112345678",
        "mail": f"{name.lower()}@acme.io",
    }
    data.update(overrides)
    return Employee(**data)


_VALID_DRAFT: dict[str, Any] = {
    "name": "Carol",
    "age": "41",
    "gender": "other",
    "occupation": "Accountant",
    "phone": "+12025550143",
    "mail": "carol@acme.io",
}


class InMemoryStore:
    """Stands in for EmployeeStore with the same async surface."""

    def __init__(self, employees: list[Employee] | None = None) -> None:
        self.rows: dict[str, Employee] = {e.id: e for e in employees or []}
        self._next_id = 1000

    async def list_employees(self) -> list[Employee]:
        return [self.rows[k] for k in sorted(self.rows)]

    async def get_employee(self, employee_id: str) -> Employee:
        try:
            return self.rows[employee_id]
        except KeyError as e:
            raise EmployeeNotFoundError(f"Employee '{employee_id}' not found") from e

    async def insert_employee(self, employee: EmployeeCreate) -> Employee:
        self._next_id += 1
        row = Employee(id=str(self._next_id), **employee.model_dump())
        self.rows[row.id] = row
        return row

    async def update_employee(self, employee_id: str, employee: EmployeeUpdate) -> Employee:
        if employee_id not in self.rows:
            raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")
        row = Employee(id=employee_id, **employee.model_dump())
        self.rows[employee_id] = row
        return row

    async def delete_employees(self, employee_ids) -> None:
        for employee_id in employee_ids:
            self.rows.pop(employee_id, None)


@pytest.fixture
def employees() -> list[Employee]:
    return [
        _make_employee("1", "Alice", age=30, occupation="Designer"),
        _make_employee("2", "Bob", age=25, gender="male", occupation="Plumber"),
    ]


@pytest.fixture
def store(employees) -> InMemoryStore:
    return InMemoryStore(employees)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_sessions():
    yield
    listing_sessions.clear()
    form_sessions.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_employee():
    return _make_employee


@pytest.fixture
def valid_draft() -> dict[str, Any]:
    return dict(_VALID_DRAFT)


@pytest.fixture
def store_factory():
    return InMemoryStore
