from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from resumehub.api.deps import get_db, get_file_storage, get_resume_parser
from resumehub.main import create_app
from resumehub.models import Base, User
from resumehub.services import user_service
from resumehub.storage.local import LocalFileStorage
from tests.helpers import SAMPLE_RESUME_LINES, make_docx_bytes, make_pdf_bytes
from tests.mocks.fake_parser import FakeResumeParser


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """A fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'resumehub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def fake_parser() -> FakeResumeParser:
    return FakeResumeParser()


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await user_service.create_user(db_session, "jane@example.com", "Jane", "Doe")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await user_service.create_user(db_session, "john@example.com", "John", "Roe")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await user_service.create_user(
        db_session, "admin@example.com", "Ada", "Admin", role="admin"
    )


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    storage: LocalFileStorage,
    fake_parser: FakeResumeParser,
) -> AsyncGenerator[AsyncClient]:
    app = create_app()

    # Yield the test session directly, no commit/rollback
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_resume_parser] = lambda: fake_parser

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", follow_redirects=True
    ) as ac:
        yield ac


@pytest.fixture(scope="session")
def sample_docx() -> bytes:
    return make_docx_bytes(SAMPLE_RESUME_LINES)


@pytest.fixture(scope="session")
def sample_pdf() -> bytes:
    return make_pdf_bytes(SAMPLE_RESUME_LINES)
