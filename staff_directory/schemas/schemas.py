"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


# ---- Auth ----
class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""

class AdminOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: Dict[str, Any]


# ---- Admin accounts ----
class AdminCreate(BaseModel):
    username: str = ""
    password: str = ""
    full_name: Optional[str] = None
    role: Optional[str] = None

class AdminUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None


# ---- Columns ----
class ColumnOut(BaseModel):
    column_name: str
    display_name: str
    data_type: str
    is_nullable: bool
    is_visible: bool
    sort_order: int
    admin_only: bool

class ColumnCreate(BaseModel):
    column_name: str = ""
    display_name: str = ""
    data_type: str = ""
    is_nullable: bool = True
    admin_only: bool = False

class ColumnUpdate(BaseModel):
    display_name: Optional[str] = None
    admin_only: Optional[bool] = None
    is_visible: Optional[bool] = None
    sort_order: Optional[int] = None

class ColumnOrder(BaseModel):
    order: List[str] = Field(default_factory=list)

class ColumnListResponse(BaseModel):
    columns: List[ColumnOut]


# ---- Employees ----
class EmployeePayload(BaseModel):
    """Open-ended record body; keys are checked against the live table."""

    class Config:
        extra = "allow"


# ---- Audit ----
class AuditLogOut(BaseModel):
    id: int
    admin_username: str
    action_type: str
    table_name: Optional[str] = None
    record_id: Optional[int] = None
    old_values: Optional[Any] = None
    new_values: Optional[Any] = None
    description: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Generic ----
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
