"""State models for the listing and form views."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from app.models.employee import Employee

Severity = Literal["success", "error", "info", "warning"]
DeleteKind = Literal["bulk-delete", "single-delete"]
FormMode = Literal["create", "edit"]


class Notification(BaseModel):
    message: str
    severity: Severity = "info"


class Navigation(BaseModel):
    """A navigation the client should perform, after ``delay_seconds``."""

    path: str
    delay_seconds: float = 0.0


class SortRule(BaseModel):
    column: str
    desc: bool = False


class PendingDelete(BaseModel):
    """A delete awaiting user confirmation."""

    model_config = {"frozen": True}

    kind: DeleteKind
    target_ids: frozenset[str]
    message: str


class ListingState(BaseModel):
    employees: list[Employee] = []
    sorting: list[SortRule] = []
    column_filters: dict[str, str] = {}
    global_filter: str = ""
    column_visibility: dict[str, bool] = {}
    row_selection: set[str] = set()
    select_all_data: bool = False
    page_index: int = 0
    page_size: int = 10
    pending: PendingDelete | None = None
    notification: Notification | None = None
    loading: bool = False


class FormState(BaseModel):
    mode: FormMode = "create"
    employee_id: str | None = None
    values: dict[str, Any] = {}
    errors: dict[str, str] = {}
    touched: set[str] = set()
    submitting: bool = False
    loading: bool = False
    notification: Notification | None = None
    navigation: Navigation | None = None


# API snapshots


class ListingSnapshot(BaseModel):
    session_id: str
    rows: list[Employee]
    total_rows: int
    filtered_rows: int
    visible_columns: list[str]
    sorting: list[SortRule]
    column_filters: dict[str, str]
    global_filter: str
    selected_ids: list[str]
    select_all_data: bool
    page_index: int
    page_size: int
    page_count: int
    can_previous_page: bool
    can_next_page: bool
    pending: PendingDelete | None = None
    notification: Notification | None = None
    loading: bool


class FormSnapshot(BaseModel):
    session_id: str
    mode: FormMode
    employee_id: str | None = None
    values: dict[str, Any]
    errors: dict[str, str] = Field(default_factory=dict, description="Errors of touched fields only")
    is_valid: bool
    can_submit: bool
    submitting: bool
    loading: bool
    notification: Notification | None = None
    navigation: Navigation | None = None
