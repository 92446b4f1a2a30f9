"""Admins API router — owner-only account management."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from staff_directory.db.session import get_db
from staff_directory.schemas.schemas import AdminCreate, AdminUpdate, AdminOut, MessageResponse
from staff_directory.services.account_service import account_service
from staff_directory.core.security import Caller, require_owner

router = APIRouter(prefix="/admins", tags=["admins"])


@router.get("")
async def list_admins(
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_owner),
):
    """List administrators, owners first."""
    return {
        "admins": [AdminOut.model_validate(a) for a in account_service.list_accounts(db)],
    }


@router.post("", response_model=AdminOut, status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_owner),
):
    """Create an administrator."""
    return account_service.create_account(
        db, caller, body.username, body.password, body.full_name, body.role,
    )


@router.put("/{admin_id}", response_model=AdminOut)
async def update_admin(
    admin_id: int,
    body: AdminUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_owner),
):
    """Update another administrator."""
    return account_service.update_account(
        db, caller, admin_id, **body.model_dump(exclude_unset=True),
    )


@router.delete("/{admin_id}", response_model=MessageResponse)
async def delete_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_owner),
):
    """Delete an administrator."""
    account_service.delete_account(db, caller, admin_id)
    return MessageResponse(message="Administrator deleted")
