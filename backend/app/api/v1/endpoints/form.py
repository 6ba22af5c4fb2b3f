from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from app.controllers.form import FormController
from app.core.config import settings
from app.models.views import FormSnapshot
from app.services.employee_store import employee_store
from app.services.view_sessions import SessionNotFoundError, form_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/views/form", tags=["views"])


class OpenFormRequest(BaseModel):
    employee_id: str | None = None


class FieldsRequest(BaseModel):
    values: dict[str, Any]


class TouchRequest(BaseModel):
    fields: list[str]


def get_form(session_id: str) -> FormController:
    try:
        return form_sessions.get(session_id)
    except SessionNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form session '{session_id}' not found",
        ) from err


def build_snapshot(session_id: str, form: FormController) -> FormSnapshot:
    state = form.state
    return FormSnapshot(
        session_id=session_id,
        mode=state.mode,
        employee_id=state.employee_id,
        values=state.values,
        errors=form.visible_errors,
        is_valid=form.is_valid,
        can_submit=form.can_submit,
        submitting=state.submitting,
        loading=state.loading,
        notification=state.notification,
        navigation=state.navigation,
    )


@router.post("", response_model=FormSnapshot, status_code=status.HTTP_201_CREATED)
async def open_form(request: OpenFormRequest):
    form = FormController(employee_store, redirect_delay=settings.REDIRECT_DELAY_SECONDS)
    await form.initialize(request.employee_id)
    session_id = form_sessions.add(form)
    logger.info("Opened %s form (employee=%s)", form.state.mode, request.employee_id)
    return build_snapshot(session_id, form)


@router.get("/{session_id}", response_model=FormSnapshot)
async def get_form_state(session_id: str, form: FormController = Depends(get_form)):  # noqa: B008
    return build_snapshot(session_id, form)


@router.patch("/{session_id}/fields", response_model=FormSnapshot)
async def set_fields(
    session_id: str,
    request: FieldsRequest,
    form: FormController = Depends(get_form),  # noqa: B008
):
    try:
        for name, value in request.values.items():
            form.set_field(name, value)
    except KeyError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown field: {err.args[0]}",
        ) from err
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return build_snapshot(session_id, form)


@router.post("/{session_id}/touch", response_model=FormSnapshot)
async def touch_fields(
    session_id: str,
    request: TouchRequest,
    form: FormController = Depends(get_form),  # noqa: B008
):
    try:
        for name in request.fields:
            form.touch(name)
    except KeyError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown field: {err.args[0]}",
        ) from err
    return build_snapshot(session_id, form)


@router.post("/{session_id}/submit", response_model=FormSnapshot)
async def submit_form(session_id: str, form: FormController = Depends(get_form)):  # noqa: B008
    await form.submit()
    return build_snapshot(session_id, form)


@router.delete("/{session_id}/notification", response_model=FormSnapshot)
async def dismiss_notification(session_id: str, form: FormController = Depends(get_form)):  # noqa: B008
    form.dismiss_notification()
    return build_snapshot(session_id, form)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_form(session_id: str):
    form_sessions.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
