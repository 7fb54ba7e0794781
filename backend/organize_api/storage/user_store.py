import logging
from typing import Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from organize_api.core.errors import ConflictError, NotFoundError
from organize_api.models.user import User

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("username", "email")
# Largest value the id column holds (PostgreSQL int4)
MAX_USER_ID = 2**31 - 1
UPDATABLE_FIELDS = {"username", "full_name", "email"}


class UserStore:
    """
    Persistence boundary for users.

    Every mutating call commits on success and rolls back on failure, so a
    call is either fully applied and visible to later reads, or not at all.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, fields: dict[str, Any]) -> User:
        """Insert a new user, refusing duplicate usernames or emails"""
        # Explicit check gives a message naming the field; the database
        # constraint below still catches concurrent inserts
        self._check_unique(fields)

        user = User(**fields)
        self.db.add(user)
        self._commit()
        # Refresh to load generated fields (id, timestamps)
        self.db.refresh(user)
        return user

    def find_by_id(self, user_id: int) -> User:
        # Ids outside the column range cannot exist; passing them to the
        # driver fails with an overflow instead of a clean miss
        if not 1 <= user_id <= MAX_USER_ID:
            raise NotFoundError(f"User with ID {user_id} not found.")
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found.")
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def find_all(self) -> list[User]:
        # Ordered by id so listings are stable between calls
        return self.db.query(User).order_by(User.id).all()

    def update(self, user_id: int, fields: dict[str, Any]) -> User:
        """Apply only the supplied fields; password_hash is never touched here"""
        user = self.find_by_id(user_id)

        # Drop fields the update path may not change (password_hash, id)
        # and fields the client did not send
        changes = {key: value for key, value in fields.items()
                   if key in UPDATABLE_FIELDS and value is not None}
        if not changes:
            # Nothing to write; the current record is the result
            return user

        self._check_unique(changes, exclude_id=user_id)
        for key, value in changes.items():
            setattr(user, key, value)
        self._commit()
        # Reload so the returned object carries updated_at from the database
        self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        # Hard delete; a missing id raises NotFoundError before anything runs
        user = self.find_by_id(user_id)
        self.db.delete(user)
        self._commit()

    def _check_unique(self, fields: dict[str, Any], exclude_id: int | None = None) -> None:
        for field in UNIQUE_FIELDS:
            value = fields.get(field)
            if value is None:
                continue
            # On update the record may keep its own value
            query = self.db.query(User.id).filter(getattr(User, field) == value)
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            if query.first() is not None:
                logger.info("Rejected duplicate %s", field)
                raise ConflictError(f"User with {field} '{value}' already exists.", field=field)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent write on a unique column
            self.db.rollback()
            raise ConflictError("User with this username or email already exists.") from e
        except Exception:
            # Leave the session usable and nothing half-applied
            self.db.rollback()
            raise
