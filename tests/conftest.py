"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# --- Default environment for the whole test session
os.environ.setdefault("EVENTFLOW_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "true")

from eventflow.main import app  # noqa: E402
from eventflow.db import get_db  # noqa: E402
from eventflow.models import ApiKey, Base, User, UserRole, Venue  # noqa: E402
from eventflow.schemas.event import EventCreate  # noqa: E402
from eventflow.services import events as events_service  # noqa: E402
from eventflow.services.state_machine import Actor  # noqa: E402
from eventflow.utils.apikey import hash_key  # noqa: E402

DEPARTMENT = "Computer Science"


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Iterator[Session]:
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _factory(
        role: UserRole = UserRole.COORDINATOR,
        *,
        department: str | None = DEPARTMENT,
        is_active: bool = True,
    ) -> User:
        suffix = uuid4().hex[:8]
        user = User(
            username=f"{role.value}-{suffix}",
            email=f"{role.value}-{suffix}@example.edu",
            full_name=f"{role.value.title()} {suffix}",
            role=role,
            department=department,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


@pytest.fixture
def make_actor(make_user: Callable[..., User]) -> Callable[..., Actor]:
    def _factory(role: UserRole = UserRole.COORDINATOR, **kwargs) -> Actor:
        user = make_user(role, **kwargs)
        return Actor(actor_id=user.id, role=user.role)

    return _factory


@pytest.fixture
def coordinator(make_actor: Callable[..., Actor]) -> Actor:
    return make_actor(UserRole.COORDINATOR)


@pytest.fixture
def hod(make_actor: Callable[..., Actor]) -> Actor:
    return make_actor(UserRole.HOD)


@pytest.fixture
def dean(make_actor: Callable[..., Actor]) -> Actor:
    return make_actor(UserRole.DEAN, department=None)


@pytest.fixture
def principal(make_actor: Callable[..., Actor]) -> Actor:
    return make_actor(UserRole.PRINCIPAL, department=None)


@pytest.fixture
def make_venue(db_session: Session) -> Callable[..., Venue]:
    def _factory(name: str | None = None, *, capacity: int | None = 100, is_active: bool = True) -> Venue:
        venue = Venue(
            name=name or f"Hall {uuid4().hex[:6]}",
            capacity=capacity,
            location="Main campus",
            is_active=is_active,
        )
        db_session.add(venue)
        db_session.commit()
        db_session.refresh(venue)
        return venue

    return _factory


@pytest.fixture
def venue(make_venue: Callable[..., Venue]) -> Venue:
    return make_venue("Main Auditorium")


@pytest.fixture
def event_data() -> Callable[..., dict]:
    """JSON-ready proposal body; dates sit far in the future by default."""

    def _build(**overrides) -> dict:
        data = {
            "title": "Tech Symposium",
            "description": "Annual department symposium",
            "department": DEPARTMENT,
            "expected_audience": 80,
            "venue_id": None,
            "other_venue": None,
            "start_date": "2030-03-10",
            "end_date": None,
            "start_time": "10:00:00",
            "end_time": "12:00:00",
        }
        data.update(overrides)
        return data

    return _build


@pytest.fixture
def submit_event(db_session: Session, event_data: Callable[..., dict]) -> Callable[..., object]:
    """Create an event through the service layer."""

    def _submit(actor: Actor, **overrides):
        payload = EventCreate(**event_data(**overrides))
        return events_service.create_event(db_session, payload, actor=actor)

    return _submit


@pytest.fixture
def make_headers(db_session: Session) -> Callable[[User], dict[str, str]]:
    def _factory(user: User) -> dict[str, str]:
        token = f"evf_test.{uuid4().hex}"
        api_key = ApiKey(
            name=f"test-{uuid4().hex}",
            prefix="evf_test",
            key_hash=hash_key(token),
            user_id=user.id,
            is_active=True,
        )
        db_session.add(api_key)
        db_session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _factory


@pytest.fixture
def api_user(make_user: Callable[..., User], make_headers) -> Callable[..., tuple[User, dict[str, str]]]:
    def _factory(role: UserRole = UserRole.COORDINATOR, **kwargs) -> tuple[User, dict[str, str]]:
        user = make_user(role, **kwargs)
        return user, make_headers(user)

    return _factory
