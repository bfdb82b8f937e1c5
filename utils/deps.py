from core.database import SessionLocal
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from middleware.auth import Identity, admin_chain, default_chain, ensure_role
from models.enums import UserRole
from services.storage_service import StorageService, get_storage


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


def get_identity(request: Request, db: db_dependency) -> Identity:
    return default_chain.resolve(request, db)


def get_admin_identity(request: Request, db: db_dependency) -> Identity:
    identity = admin_chain.resolve(request, db)
    return ensure_role(identity, [UserRole.ADMIN.value])


def require_roles(*roles: str):
    """Dependency factory: authenticate with the default chain, then gate on role."""
    def dependency(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
        return ensure_role(identity, roles)
    return dependency


identity_dependency = Annotated[Identity, Depends(get_identity)]
admin_dependency = Annotated[Identity, Depends(get_admin_identity)]

admin_only = Annotated[Identity, Depends(require_roles(UserRole.ADMIN.value))]
manufacturer_or_admin = Annotated[Identity, Depends(require_roles(UserRole.MANUFACTURER.value))]
brand_or_admin = Annotated[Identity, Depends(require_roles(UserRole.BRAND.value))]
retailer_or_admin = Annotated[Identity, Depends(require_roles(UserRole.RETAILER.value))]

storage_dependency = Annotated[StorageService, Depends(get_storage)]
