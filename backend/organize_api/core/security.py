from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from organize_api.core.errors import AuthenticationError, FatalConfigError


class PasswordHasher:
    """
    Salted one-way hashing of user secrets with bcrypt.

    bcrypt generates a fresh salt per call and stores it inside the hash, so
    the same password hashes differently every time. Hashes must be checked
    with verify(), never compared with ==.
    """

    def __init__(self, rounds: int = 10):
        # 'deprecated="auto"' lets passlib flag hashes made with other schemes
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        """Hash a password using bcrypt"""
        # The salt and cost are embedded in the result, so verify() needs
        # nothing but the stored string
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Verify a password against a hash using constant-time comparison"""
        # Plain string comparison would leak, through timing, how much of a
        # guess matched
        return self._context.verify(plaintext, hashed)


class TokenIssuer:
    """Issues and checks signed, expiring JWT access tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 30):
        # Without a key every token could be forged; fail at construction,
        # which happens while the app starts
        if not secret_key:
            raise FatalConfigError("Token signing key is empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def issue(self, claims: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token with issue time and expiration"""
        # Copy claims to avoid mutating the caller's dict
        to_encode = claims.copy()

        # timezone.utc instead of utcnow() (deprecated in Python 3.12+)
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self._expire_minutes))
        # JWT standard claims; jose converts datetimes to epoch seconds
        to_encode.update({"iat": now, "exp": expire})

        # Algorithm must match in decode - changing it invalidates issued tokens
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """Decode a JWT token, verifying signature and expiration"""
        try:
            # Signature and expiration are both checked by jose
            return jwt.decode(token, self._secret_key,
                              algorithms=[self._algorithm])
        except JWTError as e:
            # Expired, tampered with, or signed with another key
            raise AuthenticationError("Could not validate credentials") from e
