from fastapi import APIRouter, BackgroundTasks, Request, Response
from starlette import status
from core.config import settings
from core.exceptions import NotFound
from middleware.rate_limiter import limiter
from schemas.auth_schemas import (CreateUserRequest, ForgotPasswordRequest, LoginRequest,
                                  ResendVerificationRequest, ResetPasswordRequest, UpdateProfileRequest,
                                  VerifyEmailRequest, serialize_user)
from services.auth_service import AuthService
from services.session_service import SessionService
from services.token_service import TokenService
from utils.deps import db_dependency, identity_dependency
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/users",
    tags=["users"]
)


def _set_session_cookie(response: Response, cookie_value: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=cookie_value,
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def _profile_owner(identity):
    # the admin header channel may carry an email with no account behind it
    if identity.user is None:
        raise NotFound("User not found")
    return identity.user


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register_user(request: Request, body: CreateUserRequest, db: db_dependency, bg: BackgroundTasks):
    user = AuthService.create_user(body, db)
    bg.add_task(AuthService.send_verification_quietly, user.email, user.verification_code)

    logger.info(
        "User registered successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return {
        "success": True,
        "message": "Registration successful. Please check your email for verification code.",
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "status": user.status,
        },
    }


@router.post("/login", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
async def login_user(request: Request, response: Response, body: LoginRequest, db: db_dependency):
    user = AuthService.authenticate_user(body.email, body.password, db)

    token = TokenService.create_access_token(user.id, user.email, user.role)
    _set_session_cookie(response, SessionService.create(db, user))

    logger.info(
        "User logged in successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "companyName": user.company_name,
        "role": user.role,
        "status": user.status,
        "profileComplete": user.profile_complete,
        "token": token,
    }


@router.post("/logout", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def logout_user(request: Request, response: Response, db: db_dependency):
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if cookie:
        SessionService.destroy(db, cookie)

    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    logger.info("User logged out")

    return {"success": True, "message": "Logged out successfully"}


@router.post("/verify-email", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def verify_email(request: Request, body: VerifyEmailRequest, db: db_dependency):
    """
    Verifies user's email with the provided code.

    Checks:
    - User exists
    - Not already verified
    - Code matches
    - Code not expired
    """
    user = AuthService.verify_user(body, db)
    return {"success": True, "message": "Email verified successfully", "status": user.status}


@router.post("/resend-verification", status_code=status.HTTP_200_OK)
@limiter.limit("3/minute")
async def resend_verification(request: Request, body: ResendVerificationRequest, db: db_dependency):
    AuthService.resend_verification(body.email, db)
    return {"success": True, "message": "Verification code sent. Please check your email."}


@router.post("/forgot-password", status_code=status.HTTP_200_OK)
@limiter.limit("3/minute")
async def forgot_password(request: Request, body: ForgotPasswordRequest, db: db_dependency):
    """
    Request password reset via email.
    The response is the same whether or not the email has an account.
    """
    AuthService.request_password_reset(body.email, db)
    return {
        "success": True,
        "message": "If an account with that email exists, a password reset link has been sent.",
    }


@router.post("/reset-password", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
async def reset_password(request: Request, body: ResetPasswordRequest, db: db_dependency):
    AuthService.reset_password(body, db)
    return {"success": True, "message": "Password has been reset successfully. Please login again."}


@router.get("/profile", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def get_profile(request: Request, identity: identity_dependency):
    return serialize_user(_profile_owner(identity))


@router.get("/me", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def get_me(request: Request, identity: identity_dependency):
    return serialize_user(_profile_owner(identity))


@router.put("/profile", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def update_profile(request: Request, identity: identity_dependency, body: UpdateProfileRequest,
                         db: db_dependency):
    user = AuthService.apply_profile_update(_profile_owner(identity), body, db)

    logger.info("Profile updated", extra={"user_id": user.id})
    return serialize_user(user)
