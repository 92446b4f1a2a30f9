"""Audit log, statistics, and filter-option routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from staff_directory.db.session import get_db
from staff_directory.schemas.schemas import AuditLogOut
from staff_directory.services.audit_service import audit_service
from staff_directory.services.record_service import record_service
from staff_directory.core.security import Caller, get_optional_caller, require_authenticated

router = APIRouter(tags=["logs"])


@router.get("/logs")
async def get_logs(
    admin_username: Optional[str] = Query(None),
    action_type: Optional[str] = Query(None),
    table_name: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_authenticated),
):
    """Query the audit log (administrators only)."""
    result = audit_service.query_logs(
        db, page, limit,
        admin_username=admin_username, action_type=action_type, table_name=table_name,
    )
    return {
        "logs": [AuditLogOut.model_validate(log) for log in result["logs"]],
        "pagination": result["pagination"],
    }


@router.get("/stats")
async def get_stats(db: Session = Depends(get_db)):
    """Employees added and updated today."""
    return audit_service.today_stats(db)


@router.get("/filters")
async def get_filters(
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Distinct values for the directory filters visible to the caller."""
    return record_service.filter_options(db, caller)
