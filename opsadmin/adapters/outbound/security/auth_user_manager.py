# opsadmin/adapters/outbound/security/auth_user_manager.py

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext

from opsadmin.adapters.configuration.config import Settings
from opsadmin.domain.exceptions import InvalidCredentialsException

TOKEN_TYPE_USER = "user"


class UserAuthManager:
    """
    Password hashing and JWT access tokens for users.
    """

    crypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "UserAuthManager":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    @classmethod
    async def hash_password(cls, password: str) -> str:
        """Return the hash of a plain text password."""
        return cls.crypt_context.hash(password)

    @classmethod
    async def verify_password(cls, plain_password: str, hashed_password: str) -> bool:
        """Verify if the plain text password matches the stored hash."""
        return cls.crypt_context.verify(plain_password, hashed_password)

    def create_access_token(
            self,
            user_id: int,
            name: str,
            email: str,
            expires_delta: Optional[timedelta] = None,
    ) -> Tuple[str, datetime]:
        """
        Create a JWT access token for an authenticated user.

        Returns:
            (token, expiration time)
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)

        expire = datetime.now(timezone.utc) + expires_delta
        payload = {
            "sub": str(user_id),
            "name": name,
            "email": email,
            "type": TOKEN_TYPE_USER,
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm), expire

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT access token.

        Raises:
            InvalidCredentialsException: Token is malformed, expired or of another type
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise InvalidCredentialsException(detail="Invalid or expired token")

        if payload.get("type") != TOKEN_TYPE_USER:
            raise InvalidCredentialsException(detail="Invalid token: incorrect type")

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            raise InvalidCredentialsException(detail="Invalid token: missing subject")

        return payload
