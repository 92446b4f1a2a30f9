"""Audit service — append-only audit trail for all mutations."""

import json
import math
from datetime import date
from typing import Optional, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from staff_directory.models.audit_log import AuditLog, AuditAction
from staff_directory.models.employee import RECORD_TABLE

# Never written into a snapshot, whatever the caller passes in.
REDACTED_KEYS = {"password", "password_hash"}


def _snapshot(value: Optional[Any]) -> Optional[Any]:
    """Make a value JSON-safe (dates, decimals) and strip credentials."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = {k: v for k, v in value.items() if k not in REDACTED_KEYS}
    return json.loads(json.dumps(value, default=str))


class AuditService:
    """Records immutable audit log entries for administrative actions."""

    @staticmethod
    def log(
        db: Session,
        admin_username: str,
        action_type: AuditAction,
        table_name: Optional[str] = None,
        record_id: Optional[int] = None,
        old_values: Optional[Any] = None,
        new_values: Optional[Any] = None,
        description: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Stage a single audit log record in the caller's transaction.

        The entry is committed together with the mutation it describes, so
        a rolled-back change never leaves a log line behind.
        """
        entry = AuditLog(
            admin_username=admin_username,
            action_type=AuditAction(action_type).value,
            table_name=table_name,
            record_id=record_id,
            old_values=_snapshot(old_values),
            new_values=_snapshot(new_values),
            description=description,
            ip_address=ip_address,
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def query_logs(
        db: Session,
        page: int = 1,
        limit: int = 50,
        admin_username: Optional[str] = None,
        action_type: Optional[str] = None,
        table_name: Optional[str] = None,
    ):
        """Query audit logs with filters and pagination, newest first."""
        query = db.query(AuditLog)

        if admin_username:
            query = query.filter(AuditLog.admin_username == admin_username)
        if action_type:
            query = query.filter(AuditLog.action_type == action_type)
        if table_name:
            query = query.filter(AuditLog.table_name == table_name)

        total = query.count()
        logs = (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "logs": logs,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    @staticmethod
    def today_stats(db: Session, today: Optional[date] = None) -> dict:
        """Count employee records created and updated today."""
        today = today or date.today()
        rows = (
            db.query(AuditLog.action_type, func.count(AuditLog.id))
            .filter(
                AuditLog.table_name == RECORD_TABLE,
                AuditLog.action_type.in_([AuditAction.create.value, AuditAction.update.value]),
                func.date(AuditLog.created_at) == today.isoformat(),
            )
            .group_by(AuditLog.action_type)
            .all()
        )
        counts = dict(rows)
        return {
            "addedToday": counts.get(AuditAction.create.value, 0),
            "updatedToday": counts.get(AuditAction.update.value, 0),
        }


audit_service = AuditService()
