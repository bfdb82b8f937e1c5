from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.config import settings
from core.exceptions import (ConflictError, CredentialError, ExternalServiceError, Forbidden,
                             NotFound, Unauthorized, ValidationError)
from models.enums import UserRole, UserStatus
from models.users import User
from schemas.auth_schemas import (CreateUserRequest, ResetPasswordRequest, UpdateProfileRequest,
                                  VerifyEmailRequest)
from services.email_service import send_password_reset_email, send_verification_email
from services.session_service import SessionService
from utils.hashing import verify_password
from utils.logger import get_logger
from utils.password_reset import build_reset_url, generate_password_reset_token, hash_token
from utils.verification import generate_verification_code, get_code_expiry_time, is_expired

logger = get_logger(__name__)

INVALID_LOGIN_MESSAGE = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.lower().strip()


class AuthService:

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    def create_user(request: CreateUserRequest, db: Session) -> User:
        """
        Creates a pending user with a fresh verification code.

        Flow:
        1. Check if email already exists
        2. Generate verification code
        3. Create user (status pending)
        The caller mails the code (see send_verification_quietly).
        """
        email = normalize_email(request.email)
        if AuthService.get_user_by_email(db, email):
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": email}
            )
            raise ConflictError("User already exists")

        model = User(
            name=request.name,
            email=email,
            company_name=request.company_name,
            role=request.role,
            status=UserStatus.PENDING.value,
            verification_code=generate_verification_code(),
            verification_code_expires_at=get_code_expiry_time(),
        )
        model.password = request.password

        db.add(model)
        try:
            db.commit()
        except IntegrityError:
            # concurrent registration with the same email
            db.rollback()
            raise ConflictError("User already exists")

        db.refresh(model)
        return model

    @staticmethod
    def send_verification_quietly(to_email: str, code: str):
        """Registration must not fail because mail is down; the user can resend."""
        try:
            send_verification_email(to_email, code)
        except ExternalServiceError:
            logger.error("Verification email not sent at registration", extra={"email": to_email})

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        user = AuthService.get_user_by_email(db, email)

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"email": email}
            )
            raise Unauthorized(INVALID_LOGIN_MESSAGE)

        try:
            password_ok = verify_password(password, user.hashed_password)
        except CredentialError:
            password_ok = False

        if not password_ok:
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise Unauthorized(INVALID_LOGIN_MESSAGE)

        if not user.is_verified:
            logger.warning(
                "Login attempt with unverified email",
                extra={"user_id": user.id, "email": email}
            )
            raise Forbidden("Email not verified. Please check your inbox.")

        if not user.is_active:
            logger.warning(
                "Login failed - inactive account",
                extra={"user_id": user.id, "email": email, "status": user.status}
            )
            raise Unauthorized(INVALID_LOGIN_MESSAGE)

        user.last_login = datetime.now(timezone.utc)
        db.commit()

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )
        return user

    @staticmethod
    def authenticate_admin(email: str, password: str, db: Session) -> User:
        user = AuthService.get_user_by_email(db, email)
        if not user or user.role != UserRole.ADMIN.value:
            logger.warning("Admin login failed - not an admin", extra={"email": email})
            raise Unauthorized("Invalid credentials or not an admin user")

        try:
            password_ok = verify_password(password, user.hashed_password)
        except CredentialError:
            password_ok = False

        if not password_ok:
            logger.warning("Admin login failed - invalid password", extra={"user_id": user.id})
            raise Unauthorized("Invalid credentials")

        user.last_login = datetime.now(timezone.utc)
        db.commit()
        return user

    @staticmethod
    def verify_user(body: VerifyEmailRequest, db: Session) -> User:
        user = AuthService.get_user_by_email(db, body.email)
        if not user:
            raise NotFound("User not found")

        if user.is_verified:
            raise ValidationError.single("email", "Email already verified", body.email)

        if body.code != user.verification_code:
            raise ValidationError.single("code", "Invalid verification code", body.code)

        if is_expired(user.verification_code_expires_at):
            raise ValidationError.single("code", "Verification code expired", body.code)

        user.status = UserStatus.ACTIVE.value
        user.verification_code = user.verification_code_expires_at = None
        db.commit()

        logger.info("Email verified successfully", extra={"user_id": user.id})
        return user

    @staticmethod
    def resend_verification(email: str, db: Session) -> None:
        """
        Issues a fresh code and mails it. Mail failure propagates as a 500.
        """
        user = AuthService.get_user_by_email(db, email)
        if not user:
            raise NotFound("User not found")

        if user.is_verified:
            raise ValidationError.single("email", "Email already verified", email)

        user.verification_code = generate_verification_code()
        user.verification_code_expires_at = get_code_expiry_time()
        db.commit()

        send_verification_email(user.email, user.verification_code)

    @staticmethod
    def request_password_reset(email: str, db: Session) -> None:
        """
        Stores a reset token digest and mails the plain token.

        Unknown emails are ignored silently so the endpoint does not reveal
        which addresses have accounts.
        """
        user = AuthService.get_user_by_email(db, email)
        if not user:
            logger.info("Password reset requested for unknown email", extra={"email": email})
            return

        reset = generate_password_reset_token()
        user.password_reset_token = reset.token_hash
        user.password_reset_expires_at = reset.expires_at
        db.commit()

        try:
            send_password_reset_email(user.email, reset.plain_token, build_reset_url(reset.plain_token))
        except ExternalServiceError:
            # a token the user never received must not stay valid
            user.password_reset_token = user.password_reset_expires_at = None
            db.commit()
            raise ExternalServiceError("Email could not be sent")

        logger.info("Password reset email sent", extra={"user_id": user.id})

    @staticmethod
    def reset_password(body: ResetPasswordRequest, db: Session) -> User:
        token_hash = hash_token(body.token)
        user = db.query(User).filter(User.password_reset_token == token_hash).first()

        if not user or is_expired(user.password_reset_expires_at):
            logger.warning("Password reset with invalid or expired token")
            raise ValidationError.single("token", "Invalid or expired token")

        user.password = body.new_password
        user.password_reset_token = user.password_reset_expires_at = None
        db.commit()

        SessionService.destroy_all(db, user.id)
        logger.info("Password reset completed", extra={"user_id": user.id})
        return user

    @staticmethod
    def apply_profile_update(user: User, body: UpdateProfileRequest, db: Session) -> User:
        """
        Applies the fields present in ``body``. ``description`` and
        ``companyDescription`` are two names for one profile text and are
        kept equal.
        """
        changes = body.model_dump(exclude_unset=True)

        password = changes.pop("password", None)
        if password:
            user.password = password

        if "email" in changes and changes["email"]:
            email = normalize_email(changes.pop("email"))
            if email != user.email:
                if AuthService.get_user_by_email(db, email):
                    raise ConflictError("Email already in use")
                user.email = email

        text = changes.pop("description", None)
        company_text = changes.pop("company_description", None)
        if company_text is not None:
            text = company_text
        if text is not None:
            user.description = user.company_description = text

        for field, value in changes.items():
            # explicit nulls do not clear fields
            if value is None:
                continue
            setattr(user, field, value)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email already in use")

        db.refresh(user)
        return user

    @staticmethod
    def ensure_default_admin(db: Session) -> User | None:
        """
        Creates the configured admin account, or promotes an existing account
        with that email. Does nothing without DEFAULT_ADMIN_PASSWORD.
        """
        if not settings.DEFAULT_ADMIN_PASSWORD:
            logger.info("Default admin not configured, skipping")
            return None

        email = normalize_email(settings.DEFAULT_ADMIN_EMAIL)
        user = AuthService.get_user_by_email(db, email)

        if user:
            if user.role != UserRole.ADMIN.value or not user.is_active:
                user.role = UserRole.ADMIN.value
                user.status = UserStatus.ACTIVE.value
                db.commit()
                logger.info("Existing account promoted to admin", extra={"user_id": user.id})
            return user

        user = User(
            name="Administrator",
            email=email,
            role=UserRole.ADMIN.value,
            status=UserStatus.ACTIVE.value,
            profile_complete=True,
        )
        user.password = settings.DEFAULT_ADMIN_PASSWORD
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info("Default admin created", extra={"user_id": user.id})
        return user
