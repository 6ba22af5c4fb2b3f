"""Hosted Employee table client (PostgREST over HTTP)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import aiohttp
from pydantic import ValidationError

from app.core.config import Settings
from app.models.employee import Employee, EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeStoreError(Exception):
    pass


class EmployeeNotFoundError(EmployeeStoreError):
    pass


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def in_filter(ids: Iterable[str]) -> str:
    return "in.(" + ",".join(_quote(str(i)) for i in ids) + ")"


def _error_message(status: int, body: Any, text: str) -> str:
    if isinstance(body, dict) and body.get("message"):
        return f"{status} - {body['message']}"
    return f"{status} - {text}" if text else str(status)


class EmployeeStore:
    def __init__(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""
        self.table = ""
        self.timeout = 30.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            logger.warning("Store credentials missing — EmployeeStore not initialized")
            return

        self.base_url = settings.SUPABASE_URL.rstrip("/")
        self.api_key = settings.SUPABASE_KEY
        self.table = settings.EMPLOYEE_TABLE
        self.timeout = settings.STORE_TIMEOUT_SECONDS
        self.initialized = True
        logger.info("EmployeeStore initialized (table=%s)", self.table)

    async def close(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""
        self.table = ""

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
        prefer: str | None = None,
    ) -> Any:
        if not self.initialized:
            raise EmployeeStoreError("Employee store not initialized")

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method,
                    self.table_url,
                    params=params,
                    json=payload,
                    headers=self._headers(prefer),
                ) as response:
                    text = await response.text()
                    body: Any = None
                    if text:
                        try:
                            body = await response.json(content_type=None)
                        except ValueError:
                            body = None

                    if 200 <= response.status < 300:
                        return body

                    raise EmployeeStoreError(_error_message(response.status, body, text))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Store request %s failed: %s", method, e)
            raise EmployeeStoreError(str(e) or e.__class__.__name__) from e

    def _to_employee(self, row: Any) -> Employee:
        try:
            return Employee.model_validate(row)
        except ValidationError as e:
            raise EmployeeStoreError(f"Malformed employee row: {e.error_count()} invalid field(s)") from e

    def _rows(self, body: Any) -> list[Any]:
        if body is None:
            return []
        if not isinstance(body, list):
            raise EmployeeStoreError("Unexpected store response")
        return body

    async def list_employees(self) -> list[Employee]:
        body = await self._request("GET", params={"select": "*", "order": "id.asc"})
        return [self._to_employee(row) for row in self._rows(body)]

    async def get_employee(self, employee_id: str) -> Employee:
        body = await self._request("GET", params={"select": "*", "id": f"eq.{employee_id}"})
        rows = self._rows(body)
        if not rows:
            raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")
        if len(rows) > 1:
            raise EmployeeStoreError(f"Expected one employee for id '{employee_id}', got {len(rows)}")
        return self._to_employee(rows[0])

    async def insert_employee(self, employee: EmployeeCreate) -> Employee:
        body = await self._request(
            "POST",
            payload=[employee.model_dump(mode="json")],
            prefer="return=representation",
        )
        rows = self._rows(body)
        if len(rows) != 1:
            raise EmployeeStoreError(f"Insert returned {len(rows)} rows")
        employee_row = self._to_employee(rows[0])
        logger.info("Inserted employee %s", employee_row.id)
        return employee_row

    async def update_employee(self, employee_id: str, employee: EmployeeUpdate) -> Employee:
        body = await self._request(
            "PATCH",
            params={"id": f"eq.{employee_id}"},
            payload=employee.model_dump(mode="json"),
            prefer="return=representation",
        )
        rows = self._rows(body)
        if not rows:
            raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")
        logger.info("Updated employee %s", employee_id)
        return self._to_employee(rows[0])

    async def delete_employees(self, employee_ids: Iterable[str]) -> None:
        ids = sorted({str(i) for i in employee_ids})
        if not ids:
            return

        await self._request("DELETE", params={"id": in_filter(ids)}, prefer="return=minimal")
        logger.info("Deleted %d employee(s)", len(ids))

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            await self._request("GET", params={"select": "id", "limit": "1"})
            return True
        except EmployeeStoreError:
            logger.exception("EmployeeStore connection check failed")
            return False


employee_store = EmployeeStore()
