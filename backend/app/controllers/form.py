"""Employee create/edit form."""

from __future__ import annotations

import logging
from typing import Any

from app.models.employee import (
    EMPLOYEE_FIELDS,
    EmployeeCreate,
    EmployeeUpdate,
    blank_draft,
    validate_employee,
)
from app.models.views import FormState, Navigation, Notification
from app.services.employee_store import EmployeeStore, EmployeeStoreError

logger = logging.getLogger(__name__)

LISTING_PATH = "/"

MSG_FETCH_FAILED = "Could not fetch employee data."


class FormController:
    def __init__(self, store: EmployeeStore, redirect_delay: float = 2.0) -> None:
        self.store = store
        self.redirect_delay = redirect_delay
        self.state = FormState(values=blank_draft())
        self._validate()

    async def initialize(self, employee_id: str | None = None) -> None:
        """Switch to edit mode and load the record when an id is given."""
        if not employee_id:
            self.state.mode = "create"
            return

        self.state.mode = "edit"
        self.state.employee_id = employee_id
        self.state.loading = True
        try:
            employee = await self.store.get_employee(employee_id)
        except EmployeeStoreError:
            logger.exception("Failed to fetch employee %s", employee_id)
            self._notify(MSG_FETCH_FAILED, "error")
            self.state.navigation = Navigation(path=LISTING_PATH)
            return
        finally:
            self.state.loading = False

        self.state.values = employee.model_dump(mode="json")
        self._validate()

    def set_field(self, name: str, value: Any) -> None:
        if name == "id":
            raise ValueError("Employee id cannot be changed")
        if name not in EMPLOYEE_FIELDS:
            raise KeyError(name)
        self.state.values[name] = value
        self._validate()

    def touch(self, name: str) -> None:
        if name not in EMPLOYEE_FIELDS:
            raise KeyError(name)
        self.state.touched.add(name)

    @property
    def visible_errors(self) -> dict[str, str]:
        return {f: msg for f, msg in self.state.errors.items() if f in self.state.touched}

    @property
    def is_valid(self) -> bool:
        return not self.state.errors

    @property
    def can_submit(self) -> bool:
        return self.is_valid and not self.state.submitting and not self.state.loading

    async def submit(self) -> bool:
        if self.state.submitting or self.state.loading:
            return False

        self.state.touched = set(EMPLOYEE_FIELDS)
        self._validate()
        if not self.is_valid:
            return False

        fields = {f: self.state.values[f] for f in EMPLOYEE_FIELDS}
        editing = self.state.mode == "edit"

        self.state.submitting = True
        self.state.navigation = None
        try:
            if editing:
                await self.store.update_employee(self.state.employee_id, EmployeeUpdate.model_validate(fields))
            else:
                await self.store.insert_employee(EmployeeCreate.model_validate(fields))
        except EmployeeStoreError as e:
            logger.exception("Failed to save employee")
            self._notify(f"Failed to save data: {e}", "error")
            return False
        finally:
            self.state.submitting = False

        self._notify(f"Employee {'updated' if editing else 'saved'} successfully!", "success")
        self.state.navigation = Navigation(path=LISTING_PATH, delay_seconds=self.redirect_delay)
        return True

    def _validate(self) -> None:
        self.state.errors = validate_employee(self.state.values)

    def _notify(self, message: str, severity: str) -> None:
        self.state.notification = Notification(message=message, severity=severity)

    def dismiss_notification(self) -> None:
        self.state.notification = None
