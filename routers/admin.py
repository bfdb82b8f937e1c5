from fastapi import APIRouter, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.auth_schemas import (AdminUpdateUserRequest, LoginRequest, UpdateProfileRequest,
                                  UpdateRoleRequest, UpdateStatusRequest, serialize_user)
from services.admin_service import AdminService
from services.auth_service import AuthService
from services.token_service import TokenService
from utils.deps import admin_dependency, db_dependency
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"]
)


@router.post("/login", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
async def admin_login(request: Request, body: LoginRequest, db: db_dependency):
    """
    Checks admin credentials and returns the values the admin console sends
    back as its header bundle on every later request.
    """
    user = AuthService.authenticate_admin(body.email, body.password, db)
    token = TokenService.create_access_token(user.id, user.email, user.role)

    logger.info("Admin logged in", extra={"user_id": user.id})

    return {
        "success": True,
        "message": "Admin login successful",
        "role": user.role,
        "email": user.email,
        "name": user.name,
        "token": token,
        "headers": {
            "AdminAuthorization": f"Bearer {token}",
            "X-Admin-Role": user.role,
            "X-Admin-Email": user.email,
        },
    }


@router.get("/me", status_code=status.HTTP_200_OK)
async def admin_me(identity: admin_dependency):
    return {
        "success": True,
        "data": {
            "id": identity.user_id,
            "email": identity.email,
            "role": identity.role,
            "name": identity.user.name if identity.user else None,
        },
    }


@router.get("/users", status_code=status.HTTP_200_OK)
async def list_users(identity: admin_dependency, db: db_dependency, page: int = 1, limit: int = 10,
                     search: str | None = None, role: str | None = None):
    result = AdminService.list_users(db, page=page, limit=limit, search=search, role=role)
    result["users"] = [serialize_user(user) for user in result["users"]]
    return {"success": True, "data": result}


@router.get("/users/{user_id}", status_code=status.HTTP_200_OK)
async def get_user(user_id: int, identity: admin_dependency, db: db_dependency):
    return {"success": True, "data": serialize_user(AuthService.get_user_by_id(db, user_id))}


@router.put("/users/{user_id}", status_code=status.HTTP_200_OK)
async def update_user(user_id: int, identity: admin_dependency, body: AdminUpdateUserRequest,
                      db: db_dependency):
    user = AdminService.update_user(db, user_id, body)
    return {"success": True, "data": serialize_user(user)}


@router.patch("/users/{user_id}/profile", status_code=status.HTTP_200_OK)
async def update_user_profile(user_id: int, identity: admin_dependency, body: UpdateProfileRequest,
                              db: db_dependency):
    user = AuthService.apply_profile_update(AuthService.get_user_by_id(db, user_id), body, db)
    return {"success": True, "data": serialize_user(user)}


@router.delete("/users/{user_id}", status_code=status.HTTP_200_OK)
async def delete_user(user_id: int, identity: admin_dependency, db: db_dependency):
    AdminService.delete_user(db, user_id)
    return {"success": True, "message": "User deleted successfully"}


@router.patch("/users/{user_id}/role", status_code=status.HTTP_200_OK)
async def update_user_role(user_id: int, identity: admin_dependency, body: UpdateRoleRequest,
                           db: db_dependency):
    user = AdminService.set_role(db, user_id, body.role)
    return {"success": True, "data": serialize_user(user)}


@router.patch("/users/{user_id}/status", status_code=status.HTTP_200_OK)
async def update_user_status(user_id: int, identity: admin_dependency, body: UpdateStatusRequest,
                             db: db_dependency):
    user = AdminService.set_status(db, user_id, body.status)
    return {"success": True, "data": serialize_user(user)}
