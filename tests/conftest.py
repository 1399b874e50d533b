import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipe_ai.app.api.deps import get_db_session, get_default_prompts
from recipe_ai.app.core.config import get_settings
from recipe_ai.app.db import models
from recipe_ai.app.db.base import Base
from recipe_ai.app.main import create_app
from recipe_ai.app.schemas.server_config import AIConfig, ServerConfigKey
from recipe_ai.app.services.ai.prompts.loader import PromptName, StaticDefaultPromptProvider
from recipe_ai.app.services.server_config_service import DatabaseConfigStore

DEFAULT_EXTRACTION_PROMPT = "Default recipe extraction prompt content"
DEFAULT_CONVERSION_PROMPT = "Default unit conversion prompt content"


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autocommit=False, autoflush=False, future=True)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def store(db_session):
    return DatabaseConfigStore(db_session)


@pytest.fixture
def default_prompts():
    return StaticDefaultPromptProvider(
        {
            PromptName.RECIPE_EXTRACTION: DEFAULT_EXTRACTION_PROMPT,
            PromptName.UNIT_CONVERSION: DEFAULT_CONVERSION_PROMPT,
        }
    )


@pytest.fixture
def put_config(db_session):
    def _put(key: ServerConfigKey, value, sensitive: bool = False) -> None:
        db_session.merge(
            models.ServerConfig(key=key.value, value=value.model_dump(mode="json"), is_sensitive=sensitive)
        )
        db_session.commit()

    return _put


@pytest.fixture
def ai_enabled(put_config):
    put_config(ServerConfigKey.AI_CONFIG, AIConfig(enabled=True), sensitive=True)


@pytest.fixture
def app(db_session, default_prompts):
    app = create_app()

    def override_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_default_prompts] = lambda: default_prompts
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_settings():
    return get_settings()


def make_token(user_id: str, email: str, settings) -> str:
    payload = {"sub": user_id, "email": email}
    return jwt.encode(payload, settings.auth_secret_key, algorithm=settings.auth_algorithm)


@pytest.fixture
def admin_token(db_session, auth_settings):
    db_session.add(models.User(user_id="admin-1", email="admin@example.com", is_server_admin=True))
    db_session.commit()
    return make_token("admin-1", "admin@example.com", auth_settings)


@pytest.fixture
def user_token(db_session, auth_settings):
    db_session.add(models.User(user_id="user-1", email="user1@example.com", is_server_admin=False))
    db_session.commit()
    return make_token("user-1", "user1@example.com", auth_settings)
