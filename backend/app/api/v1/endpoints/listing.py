from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from app.controllers.listing import ListingController, ListingStateError
from app.core.config import settings
from app.models.views import ListingSnapshot, SortRule
from app.services.employee_store import employee_store
from app.services.view_sessions import SessionNotFoundError, listing_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/views/listing", tags=["views"])


class ToggleSortingRequest(BaseModel):
    column: str


class SortingRequest(BaseModel):
    rules: list[SortRule] = []


class FilterRequest(BaseModel):
    column: str | None = Field(default=None, description="Omit to set the global filter")
    text: str = ""


class VisibilityRequest(BaseModel):
    column: str
    visible: bool


class PaginationRequest(BaseModel):
    step: Literal["next", "previous"] | None = None
    page_index: int | None = Field(default=None, ge=0)
    page_size: int | None = Field(default=None, ge=1, le=500)


class SelectionRequest(BaseModel):
    employee_id: str
    selected: bool | None = None


class SelectAllRequest(BaseModel):
    checked: bool


class DeleteRequest(BaseModel):
    employee_ids: list[str] | None = None


def get_listing(session_id: str) -> ListingController:
    try:
        return listing_sessions.get(session_id)
    except SessionNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Listing session '{session_id}' not found",
        ) from err


def _bad_request(err: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))


def build_snapshot(session_id: str, listing: ListingController) -> ListingSnapshot:
    state = listing.state
    return ListingSnapshot(
        session_id=session_id,
        rows=listing.page_rows,
        total_rows=len(state.employees),
        filtered_rows=len(listing.filtered_rows),
        visible_columns=listing.visible_columns,
        sorting=state.sorting,
        column_filters=state.column_filters,
        global_filter=state.global_filter,
        selected_ids=listing.selected_ids,
        select_all_data=state.select_all_data,
        page_index=state.page_index,
        page_size=state.page_size,
        page_count=listing.page_count,
        can_previous_page=listing.can_previous_page,
        can_next_page=listing.can_next_page,
        pending=state.pending,
        notification=state.notification,
        loading=state.loading,
    )


@router.post("", response_model=ListingSnapshot, status_code=status.HTTP_201_CREATED)
async def open_listing():
    listing = ListingController(employee_store, page_size=settings.LISTING_PAGE_SIZE)
    await listing.load()
    session_id = listing_sessions.add(listing)
    return build_snapshot(session_id, listing)


@router.get("/{session_id}", response_model=ListingSnapshot)
async def get_listing_state(session_id: str, listing: ListingController = Depends(get_listing)):  # noqa: B008
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/reload", response_model=ListingSnapshot)
async def reload_listing(session_id: str, listing: ListingController = Depends(get_listing)):  # noqa: B008
    await listing.load()
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/sorting/toggle", response_model=ListingSnapshot)
async def toggle_sorting(
    session_id: str,
    request: ToggleSortingRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    try:
        listing.toggle_sorting(request.column)
    except ValueError as err:
        raise _bad_request(err) from err
    return build_snapshot(session_id, listing)


@router.put("/{session_id}/sorting", response_model=ListingSnapshot)
async def set_sorting(
    session_id: str,
    request: SortingRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    try:
        listing.set_sorting(request.rules)
    except ValueError as err:
        raise _bad_request(err) from err
    return build_snapshot(session_id, listing)


@router.put("/{session_id}/filters", response_model=ListingSnapshot)
async def set_filter(
    session_id: str,
    request: FilterRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    try:
        if request.column is None:
            listing.set_global_filter(request.text)
        else:
            listing.set_column_filter(request.column, request.text)
    except ValueError as err:
        raise _bad_request(err) from err
    return build_snapshot(session_id, listing)


@router.put("/{session_id}/visibility", response_model=ListingSnapshot)
async def set_visibility(
    session_id: str,
    request: VisibilityRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    try:
        listing.set_column_visibility(request.column, request.visible)
    except ValueError as err:
        raise _bad_request(err) from err
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/pagination", response_model=ListingSnapshot)
async def paginate(
    session_id: str,
    request: PaginationRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    if request.page_size is not None:
        listing.set_page_size(request.page_size)
    if request.page_index is not None:
        listing.go_to_page(request.page_index)
    if request.step == "next":
        listing.next_page()
    elif request.step == "previous":
        listing.previous_page()
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/selection", response_model=ListingSnapshot)
async def select_row(
    session_id: str,
    request: SelectionRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    try:
        listing.toggle_row_selected(request.employee_id, request.selected)
    except ValueError as err:
        raise _bad_request(err) from err
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/select-all", response_model=ListingSnapshot)
async def select_all(
    session_id: str,
    request: SelectAllRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    listing.toggle_select_all(request.checked)
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/delete", response_model=ListingSnapshot)
async def request_delete(
    session_id: str,
    request: DeleteRequest,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    listing.request_delete(request.employee_ids)
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/delete/{employee_id}", response_model=ListingSnapshot)
async def request_delete_one(
    session_id: str,
    employee_id: str,
    listing: ListingController = Depends(get_listing),  # noqa: B008
):
    listing.request_delete_one(employee_id)
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/confirm", response_model=ListingSnapshot)
async def confirm_delete(session_id: str, listing: ListingController = Depends(get_listing)):  # noqa: B008
    try:
        await listing.confirm_delete()
    except ListingStateError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    return build_snapshot(session_id, listing)


@router.post("/{session_id}/cancel", response_model=ListingSnapshot)
async def cancel_delete(session_id: str, listing: ListingController = Depends(get_listing)):  # noqa: B008
    listing.cancel_delete()
    return build_snapshot(session_id, listing)


@router.delete("/{session_id}/notification", response_model=ListingSnapshot)
async def dismiss_notification(session_id: str, listing: ListingController = Depends(get_listing)):  # noqa: B008
    listing.dismiss_notification()
    return build_snapshot(session_id, listing)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_listing(session_id: str):
    listing_sessions.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
