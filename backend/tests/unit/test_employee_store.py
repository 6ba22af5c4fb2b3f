from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from app.core.config import Settings
from app.models.employee import EmployeeCreate, EmployeeUpdate
from app.services.employee_store import (
    EmployeeNotFoundError,
    EmployeeStore,
    EmployeeStoreError,
    in_filter,
)

ROW = {
    "id": 1,
    "name": "Alice",
    "age": 30,
    "gender": "female",
    "occupation": "Designer",
    "phone": "+4915112345678",
    "mail": "alice@acme.io",
}


def _make_settings() -> Settings:
    return Settings(
        SUPABASE_URL="https://project.supabase.co/",
        SUPABASE_KEY="anon-key",
        EMPLOYEE_TABLE="Employee",
    )


def _response(status: int, body=None) -> MagicMock:
    response = MagicMock()
    response.status = status
    text = "" if body is None else json.dumps(body)
    response.text = AsyncMock(return_value=text)
    response.json = AsyncMock(return_value=body)
    return response


def _mock_session(response: MagicMock) -> MagicMock:
    mock_request_context = AsyncMock()
    mock_request_context.__aenter__.return_value = response
    mock_request_context.__aexit__.return_value = None

    session = MagicMock()
    session.request.return_value = mock_request_context
    return session


def _mock_client_session(session: MagicMock) -> AsyncMock:
    mock_client_session = AsyncMock()
    mock_client_session.__aenter__.return_value = session
    mock_client_session.__aexit__.return_value = None
    return mock_client_session


async def _initialized_store() -> EmployeeStore:
    store = EmployeeStore()
    await store.initialize(_make_settings())
    return store


def test_in_filter_quotes_values():
    assert in_filter(["1", 'a"b']) == 'in.("1","a\\"b")'


@pytest.mark.anyio
async def test_initialize_without_credentials():
    store = EmployeeStore()
    await store.initialize(Settings())

    assert store.initialized is False
    with pytest.raises(EmployeeStoreError, match="not initialized"):
        await store.list_employees()


@pytest.mark.anyio
async def test_initialize_sets_table_url():
    store = await _initialized_store()

    assert store.initialized is True
    assert store.table_url == "https://project.supabase.co/rest/v1/Employee"


@pytest.mark.anyio
async def test_list_employees_orders_by_id():
    store = await _initialized_store()
    session = _mock_session(_response(200, [ROW]))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        employees = await store.list_employees()

    assert [e.id for e in employees] == ["1"]
    assert employees[0].name == "Alice"

    args, kwargs = session.request.call_args
    assert args == ("GET", "https://project.supabase.co/rest/v1/Employee")
    assert kwargs["params"] == {"select": "*", "order": "id.asc"}
    assert kwargs["headers"]["apikey"] == "anon-key"
    assert kwargs["headers"]["Authorization"] == "Bearer anon-key"


@pytest.mark.anyio
async def test_get_employee_filters_by_id():
    store = await _initialized_store()
    session = _mock_session(_response(200, [ROW]))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        employee = await store.get_employee("1")

    assert employee.id == "1"
    assert session.request.call_args.kwargs["params"] == {"select": "*", "id": "eq.1"}


@pytest.mark.anyio
async def test_get_employee_not_found():
    store = await _initialized_store()
    session = _mock_session(_response(200, []))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeNotFoundError):
            await store.get_employee("missing")


@pytest.mark.anyio
async def test_get_employee_rejects_multiple_rows():
    store = await _initialized_store()
    session = _mock_session(_response(200, [ROW, {**ROW, "id": 2}]))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeStoreError, match="Expected one"):
            await store.get_employee("1")


@pytest.mark.anyio
async def test_insert_employee_posts_row_without_id():
    store = await _initialized_store()
    session = _mock_session(_response(201, [ROW]))
    payload = EmployeeCreate.model_validate({k: v for k, v in ROW.items() if k != "id"})

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        employee = await store.insert_employee(payload)

    assert employee.id == "1"
    args, kwargs = session.request.call_args
    assert args[0] == "POST"
    assert kwargs["json"] == [{k: v for k, v in ROW.items() if k != "id"}]
    assert kwargs["headers"]["Prefer"] == "return=representation"


@pytest.mark.anyio
async def test_update_employee_patches_by_id():
    store = await _initialized_store()
    session = _mock_session(_response(200, [{**ROW, "age": 31}]))
    payload = EmployeeUpdate.model_validate({**ROW, "age": 31})

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        employee = await store.update_employee("1", payload)

    assert employee.age == 31
    args, kwargs = session.request.call_args
    assert args[0] == "PATCH"
    assert kwargs["params"] == {"id": "eq.1"}
    assert "id" not in kwargs["json"]


@pytest.mark.anyio
async def test_update_employee_not_found():
    store = await _initialized_store()
    session = _mock_session(_response(200, []))
    payload = EmployeeUpdate.model_validate(ROW)

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeNotFoundError):
            await store.update_employee("9", payload)


@pytest.mark.anyio
async def test_delete_employees_single_batched_request():
    store = await _initialized_store()
    session = _mock_session(_response(204))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        await store.delete_employees({"2", "1"})

    session.request.assert_called_once()
    args, kwargs = session.request.call_args
    assert args[0] == "DELETE"
    assert kwargs["params"] == {"id": 'in.("1","2")'}


@pytest.mark.anyio
async def test_delete_employees_empty_set_makes_no_request():
    store = await _initialized_store()

    with patch("app.services.employee_store.aiohttp.ClientSession") as mock_cls:
        await store.delete_employees([])

    mock_cls.assert_not_called()


@pytest.mark.anyio
async def test_error_status_raises_with_store_message():
    store = await _initialized_store()
    session = _mock_session(_response(401, {"message": "Invalid API key"}))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeStoreError, match="401 - Invalid API key"):
            await store.list_employees()


@pytest.mark.anyio
async def test_transport_error_is_wrapped():
    store = await _initialized_store()
    session = MagicMock()
    session.request.side_effect = aiohttp.ClientConnectionError("connection refused")

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeStoreError, match="connection refused"):
            await store.list_employees()


@pytest.mark.anyio
async def test_malformed_row_raises_store_error():
    store = await _initialized_store()
    session = _mock_session(_response(200, [{"id": 1, "name": "A"}]))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        with pytest.raises(EmployeeStoreError, match="Malformed"):
            await store.list_employees()


@pytest.mark.anyio
async def test_check_connection_success():
    store = await _initialized_store()
    session = _mock_session(_response(200, [{"id": 1}]))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        assert await store.check_connection() is True


@pytest.mark.anyio
async def test_check_connection_failure():
    store = await _initialized_store()
    session = _mock_session(_response(500, {"message": "boom"}))

    with patch("app.services.employee_store.aiohttp.ClientSession", return_value=_mock_client_session(session)):
        assert await store.check_connection() is False


@pytest.mark.anyio
async def test_check_connection_not_initialized():
    store = EmployeeStore()
    assert await store.check_connection() is False
