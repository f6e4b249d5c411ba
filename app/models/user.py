from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, deferred
from typing import List
from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError
from ..core.database import Base
from ..core.security import UserRole

EMAIL_ADAPTER = TypeAdapter(EmailStr)
MIN_PASSWORD_LENGTH = 6

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # Only loaded when a query asks for it explicitly
    password_hash = deferred(Column(String(255), nullable=False))
    name = Column(String(100), nullable=False)
    role = Column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        index=True,
    )

    # Profile
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    profile_image = Column(String(500), nullable=True)

    # Account state
    is_active = Column(Boolean, default=True, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor_profile = relationship("Doctor", back_populates="user", uselist=False)

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


def validate_signup_fields(email: str, password: str, name: str) -> List[str]:
    """Return every violated field rule, in field order."""
    errors = []
    try:
        EMAIL_ADAPTER.validate_python(email or "")
    except PydanticValidationError:
        errors.append("Please provide a valid email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not (name or "").strip():
        errors.append("Name is required")
    return errors
