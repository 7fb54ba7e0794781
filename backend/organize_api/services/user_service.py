import logging
from organize_api.core.security import PasswordHasher
from organize_api.models.user import User
from organize_api.schemas.user import UserCreate, UserUpdate
from organize_api.storage.user_store import UserStore

logger = logging.getLogger(__name__)


class UserService:
    """User CRUD on top of the store, hashing secrets before they are saved"""

    def __init__(self, store: UserStore, hasher: PasswordHasher):
        self.store = store
        self.hasher = hasher

    def create(self, data: UserCreate) -> User:
        # Never store plaintext passwords; the raw value goes no further than this
        fields = data.model_dump()
        fields["password_hash"] = self.hasher.hash(data.password_hash)
        user = self.store.create(fields)
        logger.info("Created user %s", user.id)
        return user

    def find_one(self, user_id: int) -> User:
        return self.store.find_by_id(user_id)

    def find_all(self) -> list[User]:
        return self.store.find_all()

    def update(self, user_id: int, data: UserUpdate) -> User:
        """Apply a partial update, then read the record back"""
        self.store.update(user_id, data.model_dump(exclude_unset=True))
        return self.find_one(user_id)

    def remove(self, user_id: int) -> None:
        self.store.delete(user_id)
        logger.info("Removed user %s", user_id)

    def is_username_available(self, username: str) -> bool:
        return self.store.find_by_username(username) is None

    def find_by_email(self, email: str) -> User | None:
        return self.store.find_by_email(email)
