"""
Doctor directory: filtered listing, single lookup and self-service profile updates.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional, Tuple
import logging
import math

from ..models.doctor import Doctor
from ..models.user import User
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schemas.doctor import DoctorProfileUpdate, Pagination

logger = logging.getLogger(__name__)

# Request fields a doctor may change on their own profile
UPDATABLE_FIELDS = (
    "specialization",
    "license_number",
    "qualification",
    "experience",
    "consultation_fee",
    "available_slots",
    "bio",
    "services",
)

# Cleared rather than nulled when sent as null; qualification is validated instead
LIST_FIELDS = ("available_slots", "services")


def _like_term(value: str) -> str:
    """Substring pattern with LIKE wildcards in ``value`` taken literally."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def list_doctors(
        self,
        page: int = 1,
        limit: int = 10,
        specialization: Optional[str] = None,
        min_rating: Optional[float] = None,
        verified_only: bool = False,
    ) -> Tuple[List[Doctor], Pagination]:
        """
        Get a page of doctors, best rated first.

        Args:
            page: Page number (1-based)
            limit: Number of doctors per page
            specialization: Case-insensitive substring of the specialization
            min_rating: Lowest rating to include
            verified_only: Only include verified doctors

        Returns:
            Tuple of the doctors on the page and the pagination metadata
        """
        query = self.db.query(Doctor)

        if specialization:
            query = query.filter(
                Doctor.specialization.ilike(_like_term(specialization), escape="\\")
            )

        if min_rating is not None:
            query = query.filter(Doctor.rating >= min_rating)

        if verified_only:
            query = query.filter(Doctor.is_verified.is_(True))

        total = query.count()

        doctors = (
            query.options(joinedload(Doctor.user))
            .order_by(Doctor.rating.desc(), Doctor.total_reviews.desc(), Doctor.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        pagination = Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        )
        return doctors, pagination

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = (
            self.db.query(Doctor)
            .options(joinedload(Doctor.user))
            .filter(Doctor.id == doctor_id)
            .first()
        )
        if not doctor:
            raise NotFoundError("Doctor not found")
        return doctor

    def get_profile_for_user(self, user: User) -> Doctor:
        """The profile owned by an authenticated doctor."""
        doctor = (
            self.db.query(Doctor)
            .options(joinedload(Doctor.user))
            .filter(Doctor.user_id == user.id)
            .first()
        )
        if not doctor:
            raise NotFoundError("Doctor profile not found")
        return doctor

    def update_profile_for_user(self, user: User, changes: DoctorProfileUpdate) -> Doctor:
        """
        Apply a partial update to the caller's own profile.

        Each field present in the request replaces the stored value; fields
        absent from the request are left as they are.
        """
        doctor = self.get_profile_for_user(user)

        for field in UPDATABLE_FIELDS:
            if field not in changes.model_fields_set:
                continue
            value = getattr(changes, field)
            if field in LIST_FIELDS and value is None:
                value = []
            elif field == "available_slots":
                value = [slot.model_dump(by_alias=True, mode="json") for slot in value]
            setattr(doctor, field, value)

        errors = doctor.validation_errors()
        if errors:
            self.db.rollback()
            raise ValidationError(", ".join(errors))

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"License number conflict updating doctor profile {doctor.id}")
            raise ConflictError("A doctor with this license number already exists")

        self.db.refresh(doctor)
        logger.info(f"Doctor profile {doctor.id} updated by user {user.id}")
        return doctor
