from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from ..core.database import get_db
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from ..core.security import (
    security, get_token_service, SessionClaims, TokenService, UserRole
)
from ..models.user import User

ROLE_DENIED_MESSAGES = {
    UserRole.DOCTOR: "Access denied. Only doctors can access this route.",
    UserRole.PATIENT: "Access denied. Only patients can access this route.",
}

async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service)
) -> SessionClaims:
    """Extract and verify the bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(
            "Not authorized to access this route. No token provided."
        )

    claims = token_service.verify(credentials.credentials)
    if not claims:
        raise AuthenticationError("Invalid or expired token")

    return claims

async def get_current_user(
    claims: SessionClaims = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Load the account named by the token.

    A deleted account is reported as not found rather than as a bad token.
    """
    user = db.query(User).filter(User.id == claims.user_id).first()
    if not user:
        raise NotFoundError("User not found")

    if not user.is_active:
        raise AuthorizationError("Your account has been deactivated")

    return user

# Role-based access control dependencies
def require_role(role: UserRole):
    """Create a dependency that only lets one role through."""
    denied_message = ROLE_DENIED_MESSAGES[role]

    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role != role:
            raise AuthorizationError(denied_message)
        return current_user

    return role_checker

get_doctor_user = require_role(UserRole.DOCTOR)
get_patient_user = require_role(UserRole.PATIENT)
