# Set environment variables to indicate we're running tests
import os

os.environ["TESTING"] = "True"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("LOG_FILE", "logs/test.log")

import json
import logging
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import online_judge.data.schemas  # noqa: F401  registers the tables
from online_judge.business.services import (SnowflakeGenerator, UserService,
                                            VerificationService,
                                            get_verification_service)
from online_judge.data.repositories import (RedisClient, get_judge_client,
                                            get_mail_client, get_redis_client,
                                            get_session)
from online_judge.errors import DeliveryException
from online_judge.main import app

T0 = 1_700_000_000.0


class MockRedis:
    """In-memory stand-in for redis.asyncio.Redis."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.expiry: Dict[str, int] = {}

    async def set(self, name: str, value: str, ex: Optional[int] = None) -> None:
        self.data[name] = value
        if ex:
            self.expiry[name] = ex

    async def get(self, name: str) -> Any:
        return self.data.get(name)

    async def delete(self, name: str) -> int:
        if name in self.data:
            del self.data[name]
            self.expiry.pop(name, None)
            return 1
        return 0

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    def answer(self, key: str) -> str:
        return json.loads(self.data[key])["code"]


class MockMailClient:
    """Records verification codes instead of sending them."""

    def __init__(self):
        self.sent: List[tuple] = []
        self.fail = False

    async def send_verification_code(self, email: str, code: str) -> None:
        if self.fail:
            raise DeliveryException(detail="SMTP relay unavailable")
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return [code for to, code in self.sent if to == email][-1]


class FakeClock:
    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def engine():
    # Use an in-memory SQLite database for testing
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def test_db(engine):
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def redis_client(mock_redis):
    return RedisClient(redis=mock_redis)


@pytest.fixture
def mail_client():
    return MockMailClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def verification_service(redis_client, mail_client, clock):
    return VerificationService(redis_client, mail_client, clock=clock, single_use=False)


@pytest.fixture
def user_service(verification_service):
    return UserService(verification_service, SnowflakeGenerator(1))


@pytest.fixture
def judge_client():
    client = MagicMock()
    client.submit_code.side_effect = [f"token-{i}" for i in range(1, 100)]
    client.get_result.return_value = {
        "status": {"id": 3, "description": "Accepted"},
        "time": "0.01",
        "memory": 1024,
    }
    return client


@pytest_asyncio.fixture
async def registered_user(user_service, verification_service, mail_client, test_db):
    await verification_service.issue_email_code("alice@example.com")
    code = mail_client.last_code("alice@example.com")
    result = await user_service.register(
        test_db, "alice", "password123", "alice@example.com", code
    )
    assert result.ok
    return {"username": "alice", "password": "password123", "email": "alice@example.com"}


# Create test client
@pytest_asyncio.fixture
async def client(test_db, redis_client, mail_client, verification_service, judge_client):
    async def override_get_session():
        yield test_db

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    app.dependency_overrides[get_mail_client] = lambda: mail_client
    app.dependency_overrides[get_verification_service] = lambda: verification_service
    app.dependency_overrides[get_judge_client] = lambda: judge_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    # Remove the overrides after the test
    app.dependency_overrides.clear()


# Disable logging during tests
@pytest.fixture(autouse=True)
def disable_logging():
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)
