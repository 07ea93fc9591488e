import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_ESTIMATE_DELAY_MS", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from greenquote import models  # noqa: F401  (registers tables on Base)
from greenquote.db import Base, get_db
from greenquote.dependencies import get_address_resolver
from greenquote.engine.geo import NullCanvas
from greenquote.main import app

from .helpers import FakeResolver, PlanarAreaCalculator, make_place


@pytest.fixture
def planar():
    return PlanarAreaCalculator()


@pytest.fixture
def canvas():
    return NullCanvas()


@pytest.fixture
def place():
    return make_place()


# --- DB: one in-memory database per test, shared by every session ---
@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def client(db_session, resolver):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_address_resolver] = lambda: resolver
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
