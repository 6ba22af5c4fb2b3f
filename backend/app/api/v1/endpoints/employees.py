from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status

from app.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from app.services.employee_store import EmployeeNotFoundError, EmployeeStoreError, employee_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _not_found(employee_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Employee '{employee_id}' not found",
    )


@router.get("", response_model=list[Employee])
async def list_employees():
    try:
        return await employee_store.list_employees()
    except EmployeeStoreError as err:
        logger.exception("Failed to list employees")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to retrieve employees: {err}",
        ) from err


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(employee_id: str):
    try:
        return await employee_store.get_employee(employee_id)
    except EmployeeNotFoundError as err:
        raise _not_found(employee_id) from err
    except EmployeeStoreError as err:
        logger.exception("Failed to get employee %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to retrieve employee: {err}",
        ) from err


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(employee: EmployeeCreate):
    try:
        return await employee_store.insert_employee(employee)
    except EmployeeStoreError as err:
        logger.exception("Failed to create employee")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to save employee: {err}",
        ) from err


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(employee_id: str, employee: EmployeeUpdate):
    try:
        return await employee_store.update_employee(employee_id, employee)
    except EmployeeNotFoundError as err:
        raise _not_found(employee_id) from err
    except EmployeeStoreError as err:
        logger.exception("Failed to update employee %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to save employee: {err}",
        ) from err


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employees(ids: list[str] = Query(default=[])):  # noqa: B008
    if not ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No employee ids given",
        )

    try:
        await employee_store.delete_employees(ids)
    except EmployeeStoreError as err:
        logger.exception("Failed to delete %d employee(s)", len(ids))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to delete employees: {err}",
        ) from err

    return Response(status_code=status.HTTP_204_NO_CONTENT)
