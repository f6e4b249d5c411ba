from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel, ValidationError as PydanticValidationError
from enum import Enum

from .config import settings

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72

# Bearer credentials; a missing header is reported by the auth gate itself
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None

class SessionClaims(BaseModel):
    """Identity claims carried by a verified session token."""
    user_id: int
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime

# Password utilities
def _truncate_password(password: str) -> str:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against its hash.

    A missing or malformed hash is treated as a mismatch.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(_truncate_password(plain_password), hashed_password)
    except (ValueError, TypeError):
        return False

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(_truncate_password(password))

class TokenService:
    """Issues and verifies signed session tokens.

    The signing key is fixed for the lifetime of the instance; changing it
    invalidates every token issued before.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256",
                 expires_delta: timedelta = timedelta(days=7)):
        if not secret_key:
            raise ValueError("Token signing key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, user_id: int, email: str, role: UserRole,
              now: Optional[datetime] = None) -> str:
        """Create a signed token for the given identity."""
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "role": UserRole(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_delta).timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[SessionClaims]:
        """Decode a token, returning None if it is forged, malformed or expired."""
        if not token:
            return None
        try:
            payload = TokenPayload(**jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm]
            ))
        except (JWTError, PydanticValidationError):
            return None

        if not payload.sub or not payload.sub.isdigit() or payload.exp is None:
            return None
        try:
            role = UserRole(payload.role)
        except ValueError:
            return None

        return SessionClaims(
            user_id=int(payload.sub),
            email=payload.email or "",
            role=role,
            issued_at=datetime.fromtimestamp(payload.iat or payload.exp, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload.exp, tz=timezone.utc),
        )

@lru_cache()
def get_token_service() -> TokenService:
    """Token service built once from application settings."""
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )
