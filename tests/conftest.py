"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.checklist.access import Actor, actor_from_profile
from app.core.database import get_session
from app.main import app
from app.models import Restaurant, RestaurantConfig, Role, UserProfile

OPEN_TEMPLATE = [
    {"title": "Count drawer", "priority": True},
    {"title": "Unlock doors", "priority": False},
]


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="restaurant")
def restaurant_fixture(session: Session) -> Restaurant:
    """A restaurant with an OPEN template of two duties and no MID/CLOSE duties."""
    restaurant = Restaurant(id="tulia", name="Tulia", timezone="America/Toronto")
    session.add(restaurant)
    session.flush()
    session.add(RestaurantConfig(restaurant_id="tulia", duty_templates={"open": OPEN_TEMPLATE}))
    session.commit()
    session.refresh(restaurant)
    return restaurant


@pytest.fixture(name="other_restaurant")
def other_restaurant_fixture(session: Session) -> Restaurant:
    """A second restaurant the manager is not permitted for."""
    restaurant = Restaurant(id="beacon", name="Beacon")
    session.add(restaurant)
    session.commit()
    session.refresh(restaurant)
    return restaurant


@pytest.fixture(name="admin_profile")
def admin_profile_fixture(session: Session) -> UserProfile:
    profile = UserProfile(id="admin-1", display_name="Alex Admin", role=Role.ADMIN)
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture(name="manager_profile")
def manager_profile_fixture(session: Session) -> UserProfile:
    profile = UserProfile(
        id="mgr-1",
        display_name="Morgan Manager",
        role=Role.MANAGER,
        restaurants={"tulia": True, "beacon": False},
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture(name="admin")
def admin_fixture(admin_profile: UserProfile) -> Actor:
    return actor_from_profile(admin_profile)


@pytest.fixture(name="manager")
def manager_fixture(manager_profile: UserProfile) -> Actor:
    return actor_from_profile(manager_profile)


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(admin_profile: UserProfile) -> dict:
    return {"X-Identity-Id": admin_profile.id}


@pytest.fixture(name="manager_headers")
def manager_headers_fixture(manager_profile: UserProfile) -> dict:
    return {"X-Identity-Id": manager_profile.id}
