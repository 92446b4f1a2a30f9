"""Employees API router — directory listing and record CRUD."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from staff_directory.db.session import get_db
from staff_directory.schemas.schemas import EmployeePayload, MessageResponse
from staff_directory.services.record_service import record_service
from staff_directory.core.config import settings
from staff_directory.core.middleware import client_address
from staff_directory.core.security import Caller, get_optional_caller, require_authenticated

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("")
async def list_employees(
    search: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    office: Optional[str] = Query(None),
    position: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """List employees. Anonymous callers never see admin-only columns."""
    return record_service.list_records(
        db, caller,
        search=search, department=department, office=office, position=position,
        page=page, limit=limit,
    )


@router.get("/{employee_id}")
async def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Get a single employee."""
    return record_service.get_record(db, caller, employee_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeePayload,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Create an employee."""
    return record_service.create_record(
        db, caller, body.model_dump(), ip_address=client_address(request),
    )


@router.put("/{employee_id}")
async def update_employee(
    employee_id: int,
    body: EmployeePayload,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Update an employee."""
    return record_service.update_record(
        db, caller, employee_id, body.model_dump(), ip_address=client_address(request),
    )


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Delete an employee."""
    record_service.delete_record(db, caller, employee_id, ip_address=client_address(request))
    return MessageResponse(message="Employee deleted")
