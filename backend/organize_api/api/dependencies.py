from functools import lru_cache
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from strawberry.fastapi import BaseContext
from organize_api.core.config import settings
from organize_api.core.database import get_db
from organize_api.core.security import PasswordHasher, TokenIssuer
from organize_api.services.auth_service import AuthService
from organize_api.services.user_service import UserService
from organize_api.storage.user_store import UserStore

# Extracts the bearer token from the Authorization header when present;
# only the `me` query requires one, so a missing header is not an error here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="graphql", auto_error=False)


# Hasher and issuer hold no per-request state; lru_cache makes each one a
# process-wide singleton that tests can still replace via dependency_overrides
@lru_cache
def get_password_hasher() -> PasswordHasher:
    # Work factor from settings; every hash records its own cost, so
    # raising it later does not break existing hashes
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    # Raises FatalConfigError when SECRET_KEY is empty
    return TokenIssuer(
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


class GraphQLContext(BaseContext):
    """Per-request services handed to every resolver through info.context"""

    def __init__(self, user_service: UserService, auth_service: AuthService, token: str | None = None):
        super().__init__()
        self.user_service = user_service
        self.auth_service = auth_service
        self.token = token


async def get_context(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    token: str | None = Depends(oauth2_scheme),
) -> GraphQLContext:
    """
    Build the object graph for one GraphQL request.

    Each request gets its own session-bound store; the hasher and token
    issuer are stateless and shared by the whole process.
    """
    # Store is bound to this request's session; closing the session after the
    # response (get_db) ends its lifetime
    user_service = UserService(UserStore(db), hasher)
    auth_service = AuthService(user_service, token_issuer, hasher)
    # token is None when no Authorization header was sent
    return GraphQLContext(user_service, auth_service, token=token)
