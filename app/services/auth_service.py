from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer
from typing import Optional, Tuple
import logging

from ..models.user import User, validate_signup_fields
from ..models.doctor import Doctor
from ..core.exceptions import (
    AuthenticationError, AuthorizationError, ConflictError, ValidationError
)
from ..core.security import (
    verify_password, get_password_hash, TokenService, UserRole
)
from ..schemas.auth import UserLogin, UserSignup

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User with this email already exists"

class AuthService:
    def __init__(self, db: Session, token_service: TokenService):
        self.db = db
        self.tokens = token_service

    def signup(self, signup_data: UserSignup) -> Tuple[User, str]:
        """Register a new account and sign it in.

        Doctor accounts get a placeholder profile written in the same
        transaction as the account itself.
        """
        if not (signup_data.email and signup_data.password
                and signup_data.name and signup_data.user_type):
            raise ValidationError(
                "Please provide all required fields: email, password, name, userType"
            )

        try:
            role = UserRole(signup_data.user_type)
        except ValueError:
            raise ValidationError('User type must be either "patient" or "doctor"')

        email = User.normalize_email(signup_data.email)
        if self.get_user_by_email(email):
            raise ConflictError(DUPLICATE_EMAIL)

        errors = validate_signup_fields(email, signup_data.password, signup_data.name)
        if errors:
            raise ValidationError(", ".join(errors))

        new_user = User(
            email=email,
            password_hash=get_password_hash(signup_data.password),
            name=signup_data.name.strip(),
            role=role,
            phone=signup_data.phone,
            address=signup_data.address,
            date_of_birth=signup_data.date_of_birth,
            gender=signup_data.gender,
            is_active=True,
            is_email_verified=False
        )
        self.db.add(new_user)

        try:
            if role == UserRole.DOCTOR:
                # Flush to obtain the user id for the profile's back-reference
                self.db.flush()
                self.db.add(Doctor.placeholder_for(new_user.id))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Signup conflict for {email}")
            raise ConflictError(DUPLICATE_EMAIL)

        self.db.refresh(new_user)
        logger.info(f"Registered {role.value} account {new_user.id}")

        token = self.tokens.issue(new_user.id, new_user.email, new_user.role)
        return new_user, token

    def login(self, login_data: UserLogin) -> Tuple[User, str]:
        """Check credentials and issue a new session token.

        Unknown email and wrong password share one message so callers cannot
        probe which emails are registered.
        """
        if not login_data.email or not login_data.password:
            raise ValidationError("Please provide email and password")

        email = User.normalize_email(login_data.email)
        user = self.get_user_for_credential_check(email)

        if not user:
            logger.info("Login failed: unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info(f"Login refused for deactivated account {user.id}")
            raise AuthorizationError(
                "Your account has been deactivated. Please contact support."
            )

        if not verify_password(login_data.password, user.password_hash):
            logger.info(f"Login failed: bad password for account {user.id}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = self.tokens.issue(user.id, user.email, user.role)
        if user.role == UserRole.DOCTOR and user.doctor_profile is None:
            logger.warning(f"Doctor account {user.id} has no profile")

        logger.info(f"Account {user.id} logged in")
        return user, token

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Public lookup; the password hash stays unloaded."""
        return self.db.query(User).filter(User.email == email).first()

    def get_user_for_credential_check(self, email: str) -> Optional[User]:
        """Lookup that also loads the password hash."""
        return self.db.query(User).options(
            undefer(User.password_hash)
        ).filter(User.email == email).first()

    def set_user_active(self, email: str, is_active: bool) -> Optional[User]:
        """Flip the active flag. Returns None if no such account."""
        user = self.get_user_by_email(User.normalize_email(email))
        if not user:
            return None
        user.is_active = is_active
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Account {user.id} {'activated' if is_active else 'deactivated'}")
        return user
