"""
JWT authentication and password hashing utilities.

WHY: This module provides the two security primitives the API needs:
1. Password hashing with bcrypt
2. JWT token issuance and verification through a TokenService that is
   constructed with its signing key, so nothing here reads ambient state
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from ticketdesk.core.config import Settings
from ticketdesk.core.exceptions import TokenExpiredError, TokenInvalidError


# Password hashing context
# WHY: bcrypt with default cost factor (12 rounds) provides strong protection
# against brute-force attacks while maintaining acceptable performance.
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password (60 characters, includes salt and cost factor)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    WHY: Constant-time comparison (built into passlib) prevents timing
    attacks that could leak information about the password.

    Args:
        plain_password: Password provided by user
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# JWT Token Management
# ============================================================================


class TokenService:
    """
    Issues and verifies access tokens.

    WHY: The signing key is handed in at construction instead of being read
    from module globals, so each app instance (and each test) owns its key
    and the verification path can be exercised with any secret.

    Token claims:
    - userId: integer user id
    - role: the user's role at issuance time
    - exp / iat: standard expiry and issued-at claims
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 480,
    ):
        if not secret:
            raise ValueError("TokenService requires a non-empty signing secret")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRATION_MINUTES,
        )

    @property
    def expires_in_seconds(self) -> int:
        return self.expires_minutes * 60

    def create_access_token(
        self,
        user_id: int,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed JWT for a user.

        Args:
            user_id: Id placed in the userId claim
            role: Role name placed in the role claim
            expires_delta: Optional custom lifetime (defaults to the service's)

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expires_minutes))

        to_encode: Dict[str, Any] = {
            "userId": user_id,
            "role": role,
            "exp": expire,
            "iat": now,
        }
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded token payload

        Raises:
            TokenExpiredError: If token has expired
            TokenInvalidError: If token is malformed, badly signed or lacks claims
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError(message="Token has expired")
        except JWTError as e:
            raise TokenInvalidError(message="Invalid or expired token", error=str(e))

        if not isinstance(payload.get("userId"), int) or not payload.get("role"):
            raise TokenInvalidError(message="Invalid token: missing claims")

        return payload
