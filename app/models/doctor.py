from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Float, Text, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, validates
from typing import List
import enum
import secrets
import time

from ..core.database import Base

MAX_BIO_LENGTH = 1000
MAX_RATING = 5

class DayOfWeek(str, enum.Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Professional information
    specialization = Column(String(100), nullable=False, index=True)
    license_number = Column(String(50), nullable=False, unique=True)
    qualification = Column(JSON, nullable=False, default=list)
    experience = Column(Integer, nullable=False, default=0)
    consultation_fee = Column(Float, nullable=False, default=0)
    bio = Column(Text, nullable=True)
    services = Column(JSON, nullable=False, default=list)

    # Weekly availability: [{"day": "Monday", "startTime": "09:00", "endTime": "17:00"}]
    available_slots = Column(JSON, nullable=False, default=list)

    # Reviews
    rating = Column(Float, nullable=False, default=0, index=True)
    total_reviews = Column(Integer, nullable=False, default=0)

    # Verification
    is_verified = Column(Boolean, nullable=False, default=False, index=True)
    verification_documents = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor_profile")

    @validates("specialization", "license_number")
    def _strip(self, key, value):
        return value.strip() if isinstance(value, str) else value

    @classmethod
    def placeholder_for(cls, user_id: int) -> "Doctor":
        """Profile created at doctor signup, to be completed later."""
        return cls(
            user_id=user_id,
            specialization="General",
            license_number=f"TEMP-{int(time.time() * 1000)}-{secrets.token_hex(3)}",
            qualification=["To be updated"],
            experience=0,
            consultation_fee=0,
            bio="",
            services=[],
            available_slots=[],
            verification_documents=[],
            is_verified=False,
        )

    def validation_errors(self) -> List[str]:
        """Return every violated field rule, in field order."""
        errors = []
        if not (self.specialization or "").strip():
            errors.append("Specialization is required")
        if not (self.license_number or "").strip():
            errors.append("License number is required")
        if not self.qualification:
            errors.append("At least one qualification is required")
        if self.experience is None:
            errors.append("Experience is required")
        elif self.experience < 0:
            errors.append("Experience cannot be negative")
        if self.consultation_fee is None:
            errors.append("Consultation fee is required")
        elif self.consultation_fee < 0:
            errors.append("Consultation fee cannot be negative")
        if self.rating is not None and not 0 <= self.rating <= MAX_RATING:
            errors.append(f"Rating must be between 0 and {MAX_RATING}")
        if self.bio and len(self.bio) > MAX_BIO_LENGTH:
            errors.append(f"Bio cannot exceed {MAX_BIO_LENGTH} characters")
        return errors

    def __repr__(self):
        return f"<Doctor(id={self.id}, user_id={self.user_id}, specialization='{self.specialization}')>"
