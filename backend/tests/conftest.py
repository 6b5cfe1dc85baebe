"""
Pytest fixtures for testing.
"""
import uuid
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import crewlink.database
from crewlink.database import Base
# Import ALL models so Base.metadata knows about all tables
from crewlink.models import (
    Application,
    ApplicationStatus,
    EmployerProfile,
    JobPosting,
    PostingStatus,
    User,
    UserRole,
)

# Now import app (after we can override database)
from crewlink.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # StaticPool keeps a single connection alive so every session
    # sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Replace the app's engine and sessionmaker so get_db() uses the test DB
    original_engine = crewlink.database.engine
    original_sessionmaker = crewlink.database.AsyncSessionLocal

    crewlink.database.engine = test_engine
    crewlink.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    session = async_session()

    try:
        yield session
    finally:
        await session.close()
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()

        crewlink.database.engine = original_engine
        crewlink.database.AsyncSessionLocal = original_sessionmaker


async def _client_for(user: User = None) -> AsyncClient:
    transport = ASGITransport(app=fastapi_app)
    client = AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True  # Follow 307 redirects for trailing slashes
    )
    if user is not None:
        client.cookies.set("auth_token", str(user.id))
    return client


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client against the test database."""
    async with await _client_for() as client:
        yield client


@pytest_asyncio.fixture
async def employer(db: AsyncSession) -> User:
    user = User(email="resort@example.com", full_name="Alpine Resort", role=UserRole.EMPLOYER)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def other_employer(db: AsyncSession) -> User:
    user = User(email="other-resort@example.com", full_name="Seaside Hotel", role=UserRole.EMPLOYER)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def jobseeker(db: AsyncSession) -> User:
    user = User(email="crew@example.com", full_name="Kim Crew", role=UserRole.JOBSEEKER)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def employer_client(db: AsyncSession, employer: User) -> AsyncGenerator[AsyncClient, None]:
    async with await _client_for(employer) as client:
        yield client


@pytest_asyncio.fixture
async def other_employer_client(db: AsyncSession, other_employer: User) -> AsyncGenerator[AsyncClient, None]:
    async with await _client_for(other_employer) as client:
        yield client


@pytest_asyncio.fixture
async def jobseeker_client(db: AsyncSession, jobseeker: User) -> AsyncGenerator[AsyncClient, None]:
    async with await _client_for(jobseeker) as client:
        yield client


@pytest_asyncio.fixture
async def posting(db: AsyncSession, employer: User) -> JobPosting:
    """An approved, visible posting owned by `employer`."""
    job = JobPosting(
        employer_id=employer.id,
        employer_name="Alpine Resort",
        title="Front Desk",
        description="Guest check-in for the winter season",
        location="강원도 평창군",
        salary_min=12000,
        salary_max=15000,
        salary_unit="hourly",
        status=PostingStatus.APPROVED.value,
        is_hidden=False,
        is_active=True,
        created_at=datetime.utcnow() - timedelta(days=1),
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


@pytest_asyncio.fixture
async def employer_profile(db: AsyncSession, employer: User) -> EmployerProfile:
    profile = EmployerProfile(
        employer_id=employer.id,
        name="Alpine Resort",
        region="강원도 평창군 대관령면",
        contact_email="hr@alpine.example",
        dormitory=True,
        dormitory_facilities=["와이파이", "세탁기"],
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def application(db: AsyncSession, posting: JobPosting, jobseeker: User) -> Application:
    """A pending application from `jobseeker` to `posting`."""
    app_record = Application(
        id=uuid.uuid4(),
        job_post_id=posting.id,
        jobseeker_id=jobseeker.id,
        jobseeker_name="Kim Crew",
        employer_id=posting.employer_id,
        job_title=posting.title,
        status=ApplicationStatus.PENDING.value,
        cover_letter="I worked two winters at a ski lodge.",
        skills=["reception", "english"],
    )
    db.add(app_record)
    await db.commit()
    await db.refresh(app_record)
    return app_record
