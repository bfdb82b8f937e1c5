import math
from sqlalchemy import or_
from sqlalchemy.orm import Session
from models.users import User
from schemas.auth_schemas import AdminUpdateUserRequest
from services.auth_service import AuthService
from utils.logger import get_logger

logger = get_logger(__name__)


class AdminService:

    @staticmethod
    def list_users(db: Session, page: int = 1, limit: int = 10,
                   search: str | None = None, role: str | None = None) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)

        query = db.query(User)
        if role:
            query = query.filter(User.role.ilike(role))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.company_name.ilike(pattern),
            ))

        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "users": users,
            "totalCount": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        }

    @staticmethod
    def update_user(db: Session, user_id: int, body: AdminUpdateUserRequest) -> User:
        user = AuthService.get_user_by_id(db, user_id)
        user = AuthService.apply_profile_update(user, body, db)
        logger.info("User updated by admin", extra={"user_id": user.id})
        return user

    @staticmethod
    def delete_user(db: Session, user_id: int) -> None:
        user = AuthService.get_user_by_id(db, user_id)
        db.delete(user)
        db.commit()
        logger.info("User deleted by admin", extra={"user_id": user_id})

    @staticmethod
    def set_role(db: Session, user_id: int, role: str) -> User:
        user = AuthService.get_user_by_id(db, user_id)
        user.role = role
        db.commit()
        db.refresh(user)
        logger.info("User role changed", extra={"user_id": user.id, "role": role})
        return user

    @staticmethod
    def set_status(db: Session, user_id: int, status: str) -> User:
        user = AuthService.get_user_by_id(db, user_id)
        user.status = status
        db.commit()
        db.refresh(user)
        logger.info("User status changed", extra={"user_id": user.id, "status": status})
        return user
