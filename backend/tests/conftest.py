import os

# Settings are read when organize_api is first imported; point them at a
# throwaway in-memory database before that happens
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from organize_api.api.dependencies import get_password_hasher, get_token_issuer
from organize_api.core.database import Base, build_engine, get_db
from organize_api.core.security import PasswordHasher, TokenIssuer
from organize_api.main import app
from organize_api.services.auth_service import AuthService
from organize_api.services.user_service import UserService
from organize_api.storage.user_store import UserStore
import organize_api.models.user  # noqa: F401


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer():
    return TokenIssuer("test-secret-key", expire_minutes=5)


@pytest.fixture
def user_store(db):
    return UserStore(db)


@pytest.fixture
def user_service(user_store, hasher):
    return UserService(user_store, hasher)


@pytest.fixture
def auth_service(user_service, token_issuer, hasher):
    return AuthService(user_service, token_issuer, hasher)


@pytest.fixture
def client(session_factory, hasher, token_issuer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer
    # Entering the client runs the app lifespan
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def graphql(client):
    """Post a GraphQL operation and return the decoded response body."""
    def execute(query, variables=None, token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        response = client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=headers,
        )
        return response.json()
    return execute
