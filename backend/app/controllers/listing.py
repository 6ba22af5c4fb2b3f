"""Employee listing: table state, selection and guarded deletes."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from app.models.employee import EMPLOYEE_FIELDS, Employee
from app.models.views import ListingState, Notification, PendingDelete, SortRule
from app.services.employee_store import EmployeeStore, EmployeeStoreError

logger = logging.getLogger(__name__)

DATA_COLUMNS: tuple[str, ...] = EMPLOYEE_FIELDS

MSG_NOTHING_SELECTED = "Please select records to delete."
MSG_CONFIRM_ALL = "Are you sure you want to delete ALL employees?"
MSG_CONFIRM_SINGLE = "Are you sure you want to delete this employee?"
MSG_DELETED_BULK = "Selected employees deleted successfully!"
MSG_DELETED_SINGLE = "Employee deleted successfully!"


class ListingStateError(Exception):
    pass


def _check_column(column: str) -> None:
    if column not in DATA_COLUMNS:
        raise ValueError(f"Unknown column: {column}")


def _sort_key(column: str):
    def key(employee: Employee) -> Any:
        value = getattr(employee, column)
        if isinstance(value, str):
            return value.casefold()
        return value

    return key


def _matches(value: Any, needle: str) -> bool:
    return needle.casefold() in str(value).casefold()


class ListingController:
    """Owns the in-memory employee collection and all table interaction state.

    Only :meth:`load` and :meth:`confirm_delete` talk to the store; sorting,
    filtering and pagination run over the loaded collection.
    """

    def __init__(self, store: EmployeeStore, page_size: int = 10) -> None:
        self.store = store
        self.state = ListingState(page_size=page_size)

    # Loading

    async def load(self) -> bool:
        self.state.loading = True
        try:
            employees = await self.store.list_employees()
        except EmployeeStoreError as e:
            logger.exception("Failed to load employees")
            self._notify(f"Error fetching employees: {e}", "error")
            return False
        finally:
            self.state.loading = False

        self.state.employees = employees
        loaded_ids = {employee.id for employee in employees}
        self.state.row_selection &= loaded_ids
        if self.state.select_all_data:
            self.state.row_selection = set(loaded_ids)
        self._clamp_page()
        logger.debug("Loaded %d employees", len(employees))
        return True

    # Sorting

    def toggle_sorting(self, column: str) -> None:
        _check_column(column)
        current = next((rule for rule in self.state.sorting if rule.column == column), None)
        desc = current is not None and not current.desc
        self.state.sorting = [SortRule(column=column, desc=desc)]

    def set_sorting(self, rules: Iterable[SortRule]) -> None:
        rules = list(rules)
        for rule in rules:
            _check_column(rule.column)
        self.state.sorting = rules

    def clear_sorting(self) -> None:
        self.state.sorting = []

    # Filtering

    def set_column_filter(self, column: str, text: str) -> None:
        _check_column(column)
        if text:
            self.state.column_filters[column] = text
        else:
            self.state.column_filters.pop(column, None)
        self.state.page_index = 0

    def set_global_filter(self, text: str) -> None:
        self.state.global_filter = text
        self.state.page_index = 0

    # Column visibility

    def set_column_visibility(self, column: str, visible: bool) -> None:
        _check_column(column)
        self.state.column_visibility[column] = visible

    @property
    def visible_columns(self) -> list[str]:
        return [c for c in DATA_COLUMNS if self.state.column_visibility.get(c, True)]

    # Row models

    @property
    def filtered_rows(self) -> list[Employee]:
        rows = self.state.employees
        for column, text in self.state.column_filters.items():
            rows = [row for row in rows if _matches(getattr(row, column), text)]
        if self.state.global_filter:
            text = self.state.global_filter
            rows = [row for row in rows if any(_matches(getattr(row, c), text) for c in DATA_COLUMNS)]
        return rows

    @property
    def sorted_rows(self) -> list[Employee]:
        rows = list(self.filtered_rows)
        # Least significant rule first; sorted() is stable.
        for rule in reversed(self.state.sorting):
            rows = sorted(rows, key=_sort_key(rule.column), reverse=rule.desc)
        return rows

    @property
    def page_rows(self) -> list[Employee]:
        start = self.state.page_index * self.state.page_size
        return self.sorted_rows[start : start + self.state.page_size]

    # Pagination

    @property
    def page_count(self) -> int:
        return math.ceil(len(self.filtered_rows) / self.state.page_size)

    @property
    def can_previous_page(self) -> bool:
        return self.state.page_index > 0

    @property
    def can_next_page(self) -> bool:
        return self.state.page_index < self.page_count - 1

    def next_page(self) -> None:
        if self.can_next_page:
            self.state.page_index += 1

    def previous_page(self) -> None:
        if self.can_previous_page:
            self.state.page_index -= 1

    def go_to_page(self, page_index: int) -> None:
        self.state.page_index = page_index
        self._clamp_page()

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("Page size must be at least 1")
        first_row = self.state.page_index * self.state.page_size
        self.state.page_size = page_size
        self.state.page_index = first_row // page_size
        self._clamp_page()

    def _clamp_page(self) -> None:
        self.state.page_index = max(0, min(self.state.page_index, self.page_count - 1))

    # Selection

    @property
    def selected_ids(self) -> list[str]:
        return [e.id for e in self.state.employees if e.id in self.state.row_selection]

    def toggle_row_selected(self, employee_id: str, selected: bool | None = None) -> None:
        if employee_id not in {e.id for e in self.state.employees}:
            raise ValueError(f"Unknown row: {employee_id}")
        if selected is None:
            selected = employee_id not in self.state.row_selection
        if selected:
            self.state.row_selection.add(employee_id)
        else:
            self.state.row_selection.discard(employee_id)
            self.state.select_all_data = False

    def toggle_select_all(self, checked: bool) -> None:
        """Select or clear every loaded row, ignoring filters and pagination."""
        self.state.select_all_data = checked
        if checked:
            self.state.row_selection = {e.id for e in self.state.employees}
        else:
            self.state.row_selection = set()

    def reset_selection(self) -> None:
        self.state.row_selection = set()
        self.state.select_all_data = False

    # Deleting

    def request_delete(self, target_ids: Iterable[str] | None = None) -> PendingDelete | None:
        if self.state.select_all_data:
            targets = frozenset(e.id for e in self.state.employees)
            message = MSG_CONFIRM_ALL
        else:
            if target_ids is None:
                targets = frozenset(self.state.row_selection)
            else:
                targets = frozenset(str(i) for i in target_ids)
            message = f"Are you sure you want to delete {len(targets)} selected employee(s)?"

        if not targets:
            self.state.pending = None
            self._notify(MSG_NOTHING_SELECTED, "info")
            return None

        self.state.pending = PendingDelete(kind="bulk-delete", target_ids=targets, message=message)
        return self.state.pending

    def request_delete_one(self, employee_id: str) -> PendingDelete:
        self.state.pending = PendingDelete(
            kind="single-delete",
            target_ids=frozenset([employee_id]),
            message=MSG_CONFIRM_SINGLE,
        )
        return self.state.pending

    def cancel_delete(self) -> None:
        self.state.pending = None

    async def confirm_delete(self) -> bool:
        pending = self.state.pending
        if pending is None:
            raise ListingStateError("No delete is awaiting confirmation")
        self.state.pending = None

        single = pending.kind == "single-delete"
        try:
            await self.store.delete_employees(pending.target_ids)
        except EmployeeStoreError as e:
            logger.exception("Failed to delete %d employee(s)", len(pending.target_ids))
            noun = "employee" if single else "employees"
            self._notify(f"Error deleting {noun}: {e}", "error")
            return False

        self.reset_selection()
        self._notify(MSG_DELETED_SINGLE if single else MSG_DELETED_BULK, "success")
        await self.load()
        return True

    # Notifications

    def _notify(self, message: str, severity: str) -> None:
        self.state.notification = Notification(message=message, severity=severity)

    def dismiss_notification(self) -> None:
        self.state.notification = None
