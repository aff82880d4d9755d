"""Shared test fixtures and configuration."""
import os
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtest")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-token")
os.environ.setdefault("TWILIO_PHONE_NUMBER", "+15550000000")
os.environ.setdefault("WEBHOOK_BASE_URL", "https://reminders.example.com")
os.environ.setdefault("CALL_STORE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from app.main import app
from app.core.dependencies import get_call_store, get_telephony_gateway
from app.db.models import Base
from app.services.call_flow.controller import CallFlowController
from app.services.call_flow.messages import ReminderMessages
from app.services.persistence.memory import InMemoryCallRecordStore
from app.services.persistence.sql import SqlCallRecordStore
from app.services.telephony.gateway import PlacedCall, TwilioGateway


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
WEBHOOK_BASE_URL = "https://reminders.example.com"
PATIENT_NUMBER = "+12345678900"


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def sql_store(test_db_engine):
    """SQL call record store on the test database."""
    session_factory = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlCallRecordStore(session_factory)


@pytest.fixture
def memory_store():
    """Empty in-memory call record store."""
    return InMemoryCallRecordStore()


@pytest.fixture
def messages():
    return ReminderMessages()


@pytest.fixture
def mock_gateway():
    """Twilio gateway with every network call mocked."""
    gateway = AsyncMock(spec=TwilioGateway)
    gateway.place_call.return_value = PlacedCall(sid="CA123", status="queued")
    gateway.send_message.return_value = "SM123"
    gateway.list_recordings.return_value = [
        "https://api.twilio.com/2010-04-01/Accounts/ACtest/Recordings/RE123"
    ]
    return gateway


@pytest.fixture
def controller(memory_store, mock_gateway, messages):
    """Call flow controller over the in-memory store and mocked gateway."""
    return CallFlowController(
        store=memory_store,
        gateway=mock_gateway,
        messages=messages,
        webhook_base_url=WEBHOOK_BASE_URL,
    )


@pytest.fixture
def test_client(memory_store, mock_gateway):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_call_store] = lambda: memory_store
    app.dependency_overrides[get_telephony_gateway] = lambda: mock_gateway

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
