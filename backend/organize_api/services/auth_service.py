import logging
from dataclasses import dataclass
from organize_api.core.errors import AuthenticationError, NotFoundError
from organize_api.core.security import PasswordHasher, TokenIssuer
from organize_api.models.user import User
from organize_api.schemas.user import LoginRequest, UserCreate
from organize_api.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    token: str


class AuthService:
    """Registration, login and token-to-user resolution"""

    def __init__(self, user_service: UserService, token_issuer: TokenIssuer, hasher: PasswordHasher):
        self.user_service = user_service
        self.token_issuer = token_issuer
        self.hasher = hasher

    def register(self, data: UserCreate) -> AuthResult:
        """
        Create a user and issue its first access token.

        The token is only signed once the user row is committed; a
        ConflictError from the store propagates before any token exists.
        """
        user = self.user_service.create(data)
        token = self.generate_token(user)
        logger.info("Registered user %s", user.id)
        return AuthResult(user=user, token=token)

    def login(self, credentials: LoginRequest) -> AuthResult:
        user = self.user_service.find_by_email(credentials.email)

        # Same message whether the email or the password is wrong
        if user is None or not self.hasher.verify(credentials.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Incorrect email or password")

        return AuthResult(user=user, token=self.generate_token(user))

    def current_user(self, token: str) -> User:
        """Resolve the user a token was issued to"""
        payload = self.token_issuer.decode(token)

        # Token stores the id as a string, the database uses an integer
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError("Could not validate credentials")

        try:
            return self.user_service.find_one(user_id)
        except NotFoundError:
            # User deleted after the token was issued
            raise AuthenticationError("Could not validate credentials")

    def generate_token(self, user: User) -> str:
        # JWT 'sub' must be a string
        return self.token_issuer.issue({"username": user.username, "sub": str(user.id)})
