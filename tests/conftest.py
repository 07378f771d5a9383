"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REMINDERS_ENABLED"] = "false"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["SENTRY_DSN"] = ""
os.environ.setdefault("SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("LOG_FORMAT", "console")

from functools import partial  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.security import create_access_token, get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Job, User  # noqa: E402
from app.services.email import DeliveryInfo, EmailDeliveryError, EmailTransport  # noqa: E402

TEST_PASSWORD = "Secret123!"


class FakeTransport(EmailTransport):
    """In-memory transport that records messages and fails for chosen recipients."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.attempts = []
        self.sent = []

    @property
    def name(self) -> str:
        return "fake"

    async def send(self, message):
        self.attempts.append(message)
        if message.to in self.fail_for:
            raise EmailDeliveryError(f"mailbox unavailable: {message.to}")
        self.sent.append(message)
        return DeliveryInfo(
            message_id=f"<{len(self.sent)}@test>",
            accepted=[message.to],
            backend=self.name,
        )


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_transport():
    """Build a FakeTransport that fails for the given recipients."""
    return FakeTransport


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with get_db bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    app.state.reminder_scheduler = None


async def create_user(session_factory, email="ada@example.com", name="Ada", password=TEST_PASSWORD) -> User:
    async with session_factory() as session:
        user = User(name=name, email=email, password_hash=get_password_hash(password))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def create_job(session_factory, user: User, **fields) -> Job:
    values = {"company": "Acme", "role": "Backend Engineer"}
    values.update(fields)
    async with session_factory() as session:
        job = Job(user_id=user.id, **values)
        session.add(job)
        await session.commit()
        await session.refresh(job)
        return job


async def get_job(session_factory, job_id: int) -> Job:
    async with session_factory() as session:
        result = await session.execute(select(Job).where(Job.id == job_id))
        return result.scalar_one_or_none()


def auth_headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(session_factory):
    return partial(create_user, session_factory)


@pytest.fixture
def make_job(session_factory):
    return partial(create_job, session_factory)


@pytest.fixture
def fetch_job(session_factory):
    return partial(get_job, session_factory)


@pytest.fixture
def make_auth_headers():
    return auth_headers_for


@pytest.fixture
async def user(session_factory):
    return await create_user(session_factory)


@pytest.fixture
async def other_user(session_factory):
    return await create_user(session_factory, email="grace@example.com", name="Grace")


@pytest.fixture
def auth_headers(user):
    return auth_headers_for(user)
