from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from models.enums import UserRole, UserStatus
import phonenumbers
import re


def _check_password_strength(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one letter
    - At least one digit
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Za-z]', value):
        raise ValueError('Password must contain at least one letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one digit')

    return value


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: EmailStr
    password: str
    company_name: str = Field(default="", alias="companyName")
    role: str = UserRole.MANUFACTURER.value

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        if not value.strip():
            raise ValueError('Name is required')
        return value.strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return _check_password_strength(value)

    @field_validator('role')
    @classmethod
    def validate_role(cls, value):
        # admins are never self-registered
        allowed = [role for role in UserRole.values() if role != UserRole.ADMIN.value]
        if value not in allowed:
            raise ValueError(f"Role must be one of: {', '.join(allowed)}")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        if not value:
            raise ValueError('Password is required')
        return value


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str

    @field_validator('code')
    @classmethod
    def validate_code(cls, value):
        if len(value) != 6 or not value.isdigit():
            raise ValueError('must be a 6-digit code')
        return value


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    new_password: str = Field(alias="password")

    @field_validator('token')
    @classmethod
    def validate_token(cls, value):
        if not value or not value.strip():
            raise ValueError('Reset token cannot be empty')
        return value.strip()

    @field_validator('new_password')
    @classmethod
    def validate_password(cls, value):
        return _check_password_strength(value)


class UpdateProfileRequest(BaseModel):
    """Every field optional; only the ones sent are changed."""
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    company_name: str | None = Field(default=None, alias="companyName")
    phone: str | None = None
    website: str | None = None
    address: str | None = None
    description: str | None = None
    company_description: str | None = Field(default=None, alias="companyDescription")
    avatar: str | None = None
    industry: str | None = None
    certificates: str | None = None
    establish: int | None = None
    profile_complete: bool | None = Field(default=None, alias="profileComplete")

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        if value is None:
            return value
        return _check_password_strength(value)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value):
        """
        Validates phone number format using Google's phonenumbers library.
        Accepts international format: +201234567890
        """
        if value is None or not value.strip():
            return value
        try:
            parsed = phonenumbers.parse(value, None)
            if not phonenumbers.is_valid_number(parsed):
                raise ValueError('Invalid phone number')

            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

        except phonenumbers.NumberParseException:
            raise ValueError('Phone number must include country code (e.g.: +966xxxxxxxxx, +20xxxxxxxxxx)')


class AdminUpdateUserRequest(UpdateProfileRequest):
    role: str | None = None
    status: str | None = None

    @field_validator('role')
    @classmethod
    def validate_role(cls, value):
        if value is not None and value not in UserRole.values():
            raise ValueError(f"Role must be one of: {', '.join(UserRole.values())}")
        return value

    @field_validator('status')
    @classmethod
    def validate_status(cls, value):
        if value is not None and value not in UserStatus.values():
            raise ValueError(f"Status must be one of: {', '.join(UserStatus.values())}")
        return value


class UpdateRoleRequest(BaseModel):
    role: str

    @field_validator('role')
    @classmethod
    def validate_role(cls, value):
        if value not in UserRole.values():
            raise ValueError(f"Role must be one of: {', '.join(UserRole.values())}")
        return value


class UpdateStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value):
        if value not in UserStatus.values():
            raise ValueError(f"Status must be one of: {', '.join(UserStatus.values())}")
        return value


def serialize_user(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "companyName": user.company_name,
        "role": user.role,
        "status": user.status,
        "profileComplete": user.profile_complete,
        "phone": user.phone,
        "website": user.website,
        "address": user.address,
        "description": user.description,
        "companyDescription": user.company_description,
        "avatar": user.avatar,
        "industry": user.industry,
        "certificates": user.certificates,
        "establish": user.establish,
        "lastLogin": user.last_login,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }
