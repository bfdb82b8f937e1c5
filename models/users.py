from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean, DateTime, Enum)
from sqlalchemy.orm import relationship
from models.enums import UserRole, UserStatus
from models.mixins import TimestampMixin
from utils.hashing import get_password_hash


class User(Base, TimestampMixin):
    __tablename__ = "users"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", back_populates="user", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    company_name = Column(String, default="")
    role = Column(Enum(*UserRole.values(), name="user_role", native_enum=False),
                  nullable=False, default=UserRole.MANUFACTURER.value)
    status = Column(Enum(*UserStatus.values(), name="user_status", native_enum=False),
                    nullable=False, default=UserStatus.PENDING.value)
    profile_complete = Column(Boolean, default=False, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    # Profile fields
    phone = Column(String)
    website = Column(String)
    address = Column(String)
    description = Column(String)
    company_description = Column(String)
    avatar = Column(String)
    industry = Column(String)
    certificates = Column(String)
    establish = Column(Integer)
    # Email verification fields
    verification_code = Column(String(6), nullable=True)
    verification_code_expires_at = Column(DateTime(timezone=True), nullable=True)
    # Password reset fields (only the token digest is stored)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def password(self):
        raise AttributeError("Plain passwords are not stored")

    @password.setter
    def password(self, value: str):
        # Always hashed; a value that happens to look like a hash is still a plain password
        self.hashed_password = get_password_hash(value)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_verified(self) -> bool:
        return self.status != UserStatus.PENDING.value
