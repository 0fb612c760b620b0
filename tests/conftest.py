"""Общие фикстуры тестов.

Окружение выставляется до импорта приложения: настройки и движок БД
создаются на уровне модулей. База SQLite во временном каталоге
пересоздается перед каждым тестом.
"""
import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="doccollab-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_DIR, "uploads"))
os.environ.setdefault("PUBSUB_BACKEND", "memory")

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.db import Base, SessionLocal, engine
from app.core.security import create_access_token
from app.db import models  # noqa: F401
from app.db.repositories.document_repository import DocumentRepository
from app.domains.documents.schemas import DocumentCreate
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserCreate
from app.domains.identity.services import IdentityService
from app.infrastructure.messaging.pubsub import InMemoryPubSub, set_pubsub
from app.main import app


@pytest.fixture(autouse=True)
async def reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def pubsub():
    """Транспорт в памяти, подменяющий глобальный"""
    transport = InMemoryPubSub()
    set_pubsub(transport)
    yield transport
    set_pubsub(None)


@pytest.fixture
async def session():
    async with SessionLocal() as db_session:
        yield db_session


async def register(session, username: str) -> User:
    return await IdentityService(session).register_user(
        UserCreate(email=f"{username}@example.com", username=username, password="password123")
    )


@pytest.fixture
def make_user(session):
    """Регистрация дополнительного пользователя по имени"""
    async def _make(username: str) -> User:
        return await register(session, username)
    return _make


@pytest.fixture
async def owner(session) -> User:
    return await register(session, "alice")


@pytest.fixture
async def other_user(session) -> User:
    return await register(session, "bob")


@pytest.fixture
async def document(session, owner):
    """Документ владельца: T1 / C1"""
    return await DocumentService(session).create_document(
        DocumentCreate(title="T1", content="C1"), owner
    )


@pytest.fixture
def reload_document():
    """Чтение документа в новой сессии, минуя identity map фикстуры"""
    async def _reload(document_id: int):
        async with SessionLocal() as fresh:
            return await DocumentRepository(fresh).get_by_id(document_id, include_deleted=True)
    return _reload


def auth_headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner) -> dict:
    return auth_headers_for(owner)


@pytest.fixture
def other_headers(other_user) -> dict:
    return auth_headers_for(other_user)


@pytest.fixture
async def client(pubsub) -> AsyncClient:
    """Async HTTP клиент поверх ASGI приложения"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
