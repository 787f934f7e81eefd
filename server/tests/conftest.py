"""Test configuration and fixtures."""

from io import BytesIO

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.core.config import settings
from backoffice.core.database import Base, get_db
from backoffice.core.dependencies import get_image_storage
from backoffice.models import *  # noqa: F403 - Import all models
from backoffice.models import Transaction, TransactionStatus, TravelPackage
from backoffice.services.image_storage import ImageStorage

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SAMPLE_INVOICE = "RelaxArc-0101230000000000000000000001"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def image_storage(tmp_path):
    """Image storage rooted in a per-test directory."""
    return ImageStorage(tmp_path / "public")


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, image_storage):
    """Create a test FastAPI application without lifespan or instrumentation."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from backoffice.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from backoffice.routers import health_router, metrics_router, transaction_router, travel_gallery_router

    app = FastAPI(title="RelaxArc Back-Office API (Test)", version="1.0.0-test")

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(transaction_router)
    app.include_router(travel_gallery_router)

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: image_storage

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_token(user_id: int, roles: list[str]) -> str:
    return jwt.encode(
        {"sub": str(user_id), "username": f"user{user_id}", "roles": roles},
        settings.bearer_token_secret,
        algorithm="HS256",
    )


@pytest.fixture
def staff_headers():
    """Bearer headers of a regular staff member (user 7)."""
    return {"Authorization": f"Bearer {make_token(7, ['STAFF'])}"}


@pytest.fixture
def admin_headers():
    """Bearer headers of an administrator (user 1)."""
    return {"Authorization": f"Bearer {make_token(1, ['ADMIN'])}"}


def make_image_bytes(image_format: str = "PNG", size=(64, 48)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color="teal").save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


async def create_package(session, title="Bali Island Escape", slug="bali-island-escape", status=1) -> TravelPackage:
    package = TravelPackage(title=title, slug=slug, location="Bali", status=status)
    session.add(package)
    await session.commit()
    return package


async def create_transaction(
    session,
    travel_package_id: int,
    invoice_number: str = SAMPLE_INVOICE,
    status: TransactionStatus = TransactionStatus.PENDING,
    total: int = 1500000,
    trashed: bool = False,
) -> Transaction:
    from datetime import datetime, timezone

    transaction = Transaction(
        invoice_number=invoice_number,
        travel_package_id=travel_package_id,
        total=total,
        status=status.value,
        deleted_at=datetime.now(timezone.utc) if trashed else None,
        deleted_by=1 if trashed else None,
    )
    session.add(transaction)
    await session.commit()
    return transaction


@pytest_asyncio.fixture
async def travel_package(test_session):
    """A published travel package."""
    return await create_package(test_session)


@pytest_asyncio.fixture
async def pending_transaction(test_session, travel_package):
    """An active PENDING transaction with the sample invoice number."""
    return await create_transaction(test_session, travel_package.id)


@pytest.fixture
def package_factory(test_session):
    """Async factory creating travel packages in the test database."""
    async def _create(**kwargs) -> TravelPackage:
        return await create_package(test_session, **kwargs)
    return _create


@pytest.fixture
def transaction_factory(test_session):
    """Async factory creating transactions in the test database."""
    async def _create(travel_package_id: int, **kwargs) -> Transaction:
        return await create_transaction(test_session, travel_package_id, **kwargs)
    return _create
