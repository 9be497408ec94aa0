import secrets
from datetime import datetime

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from jagjar.main import app
from jagjar.auth import get_current_user
from jagjar.db.database import Base, get_db
from jagjar.models.user import User
from jagjar.models.developer import Developer, ApiKey, Website
from jagjar.models.tracking import TimeTracking
import jagjar.models  # noqa: F401


# Test database URL
TEST_DATABASE_URL = 'sqlite+aiosqlite:///:memory:'


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={'check_same_thread': False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Async HTTP client for testing."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Make the given user the session owner for subsequent requests."""

    def _login(user: User):
        async def override_current_user():
            return user

        app.dependency_overrides[get_current_user] = override_current_user

    return _login


class Factory:
    """Builds users, developers, websites and tracked sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def user(self, subscribed: bool = False, admin: bool = False, username: str | None = None) -> User:
        username = username or f'user{self._next()}'
        user = User(
            username=username,
            email=f'{username}@example.test',
            is_subscribed=subscribed,
            subscription_type='premium' if subscribed else 'free',
            is_admin=admin,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def developer(self, company: str | None = None) -> Developer:
        user = await self.user()
        developer = Developer(user_id=user.id, company_name=company)
        self.db.add(developer)
        await self.db.flush()
        return developer

    async def website(self, developer: Developer, name: str | None = None) -> Website:
        api_key = ApiKey(
            developer_id=developer.id,
            key=secrets.token_hex(16),
            name='default',
        )
        self.db.add(api_key)
        await self.db.flush()

        name = name or f'site{self._next()}'
        website = Website(api_key_id=api_key.id, url=f'https://{name}.test', name=name)
        self.db.add(website)
        await self.db.flush()
        return website

    async def track(self, user: User, website: Website, seconds: int, when: datetime) -> TimeTracking:
        record = TimeTracking(user_id=user.id, website_id=website.id, duration=seconds, date=when)
        self.db.add(record)
        await self.db.flush()
        return record


@pytest.fixture
def factory(db_session):
    return Factory(db_session)


@pytest.fixture
async def two_developer_month(factory, db_session):
    """Developer A: 1800s premium time, developer B: 3600s, 2 subscribers, May 2024."""
    alice = await factory.user(subscribed=True)
    bob = await factory.user(subscribed=True)
    free_reader = await factory.user(subscribed=False)

    dev_a = await factory.developer(company='Acme')
    dev_b = await factory.developer(company='Globex')
    site_a = await factory.website(dev_a, name='acme')
    site_b = await factory.website(dev_b, name='globex')

    await factory.track(alice, site_a, 900, datetime(2024, 5, 3, 10))
    await factory.track(bob, site_a, 900, datetime(2024, 5, 20, 18))
    await factory.track(alice, site_b, 3600, datetime(2024, 5, 11, 9))
    # Ignored: free reader, and sessions outside May
    await factory.track(free_reader, site_a, 5000, datetime(2024, 5, 4))
    await factory.track(alice, site_b, 7000, datetime(2024, 4, 30, 23, 59))
    await factory.track(bob, site_a, 7000, datetime(2024, 6, 1))

    await db_session.commit()
    return {
        'dev_a': dev_a,
        'dev_b': dev_b,
        'site_a': site_a,
        'site_b': site_b,
    }
