"""Columns API router — registry listing and schema changes."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from staff_directory.db.session import get_db
from staff_directory.schemas.schemas import (
    ColumnCreate, ColumnUpdate, ColumnOrder, ColumnOut, ColumnListResponse, MessageResponse,
)
from staff_directory.services.column_service import column_service
from staff_directory.services.schema_service import schema_service
from staff_directory.core.middleware import client_address
from staff_directory.core.security import Caller, get_optional_caller, require_authenticated

router = APIRouter(prefix="/columns", tags=["columns"])


@router.get("", response_model=ColumnListResponse)
async def list_columns(
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """List dynamic columns; admin-only columns are shown to administrators only."""
    columns = column_service.list_columns(db, include_admin_only=caller is not None)
    return {"columns": [c.to_dict() for c in columns]}


@router.post("", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
async def add_column(
    body: ColumnCreate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Add a column to the employees table."""
    definition = schema_service.add_column(
        db, caller,
        column_name=body.column_name,
        display_name=body.display_name,
        data_type=body.data_type,
        is_nullable=body.is_nullable,
        admin_only=body.admin_only,
        ip_address=client_address(request),
    )
    return definition.to_dict()


@router.put("/order", response_model=ColumnListResponse)
async def reorder_columns(
    body: ColumnOrder,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Set the display order of columns."""
    columns = column_service.reorder(db, caller, body.order, ip_address=client_address(request))
    return {"columns": [c.to_dict() for c in columns]}


@router.patch("/{column_name}", response_model=ColumnOut)
async def update_column(
    column_name: str,
    body: ColumnUpdate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Update a column's display name, visibility, order, or admin-only flag."""
    definition = column_service.update_metadata(
        db, caller, column_name,
        ip_address=client_address(request),
        **body.model_dump(exclude_unset=True),
    )
    return definition.to_dict()


@router.delete("/{column_name}", response_model=MessageResponse)
async def drop_column(
    column_name: str,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Drop a column and all data stored in it."""
    schema_service.drop_column(db, caller, column_name, ip_address=client_address(request))
    return MessageResponse(message=f"Column '{column_name}' deleted")
