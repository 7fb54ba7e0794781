from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from organize_api.core.database import Base


class User(Base):
    """
    User model, the only entity of the API.

    Passwords are stored as bcrypt hashes (never plaintext).
    """
    __tablename__ = "users"
    # Without AUTOINCREMENT SQLite hands out max(id) + 1, which reuses the id
    # of a deleted last row
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    # Email is unique and indexed for fast lookups during login
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
