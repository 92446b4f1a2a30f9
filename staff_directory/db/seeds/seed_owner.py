"""Seed the owner account from env vars."""

from sqlalchemy.orm import Session
from staff_directory.models.admin import Admin, AdminRole
from staff_directory.core.security import hash_password
from staff_directory.core.config import settings


def seed_owner(
    db: Session,
    username: str = settings.OWNER_USERNAME,
    password: str = settings.OWNER_PASSWORD,
    full_name: str = settings.OWNER_FULL_NAME,
) -> bool:
    """Create the owner account if not already present. Returns True if created."""
    existing = db.query(Admin).filter(Admin.username == username).first()
    if existing:
        print(f"ℹ️  Account '{username}' already exists, skipping.")
        return False

    owner = Admin(
        username=username,
        password_hash=hash_password(password),
        full_name=full_name,
        role=AdminRole.owner.value,
    )
    db.add(owner)
    db.commit()
    print(f"✅ Created owner: {username}")
    return True
