# tests/conftest.py
from __future__ import annotations

import uuid
from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rate_my_decision.core.settings import Settings
from rate_my_decision.db.session import Base, configure_sqlite
from rate_my_decision.db.session import get_db as app_get_session
from rate_my_decision.main import create_app
from rate_my_decision.models import Decision, DecisionResponse
from rate_my_decision.services.slugs import create_decision

TEST_DB_URL = "sqlite://"
TEST_ORIGIN = "http://localhost:3000"


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    values: dict[str, Any] = {
        "cors_allowed_origins": TEST_ORIGIN,
        "trust_proxy_headers": False,
        "write_api_keys": "",
        "ip_rate_limit_per_minute": 120,
        "viewer_rate_limit_per_minute": 60,
        "rate_limit_window_seconds": 60.0,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = configure_sqlite(
        create_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions share one in-memory connection, so close each before the next request."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def test_settings() -> Settings:
    return make_settings()


def build_test_app(settings: Settings, session_factory: sessionmaker[Session]) -> FastAPI:
    application = create_app(settings)

    def _get_session_override() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[app_get_session] = _get_session_override
    return application


@pytest.fixture()
def app(test_settings: Settings, session_factory: sessionmaker[Session]) -> Iterator[FastAPI]:
    application = build_test_app(test_settings, session_factory)
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def client_factory(
    session_factory: sessionmaker[Session],
) -> Iterator[Callable[..., TestClient]]:
    """Build clients for apps with non-default settings (keys, limits, CORS)."""
    clients: list[TestClient] = []

    def _make(**overrides: Any) -> TestClient:
        test_client = TestClient(
            build_test_app(make_settings(**overrides), session_factory),
            base_url="http://test",
        )
        clients.append(test_client)
        return test_client

    try:
        yield _make
    finally:
        for test_client in clients:
            test_client.close()


@pytest.fixture()
def make_decision(session_factory: sessionmaker[Session]) -> Callable[..., Decision]:
    """Persist a decision directly through the service layer."""

    def _make(
        title: str = "Quit my job to open a bakery",
        description: str | None = None,
        closes_at: datetime | None = None,
    ) -> Decision:
        with session_factory() as db:
            return create_decision(db, title=title, description=description, closes_at=closes_at)

    return _make


@pytest.fixture()
def decision(make_decision: Callable[..., Decision]) -> Decision:
    return make_decision()


@pytest.fixture()
def make_response(session_factory: sessionmaker[Session]) -> Callable[..., DecisionResponse]:
    def _make(
        decision: Decision,
        *,
        viewer_id: uuid.UUID | None = None,
        rating: int = 4,
        suggestion: int = 3,
        emoji: str = "😄",
        comment: str | None = None,
    ) -> DecisionResponse:
        with session_factory() as db:
            response = DecisionResponse(
                decision_id=decision.id,
                viewer_id=viewer_id or uuid.uuid4(),
                rating=rating,
                suggestion=suggestion,
                emoji=emoji,
                comment=comment,
            )
            db.add(response)
            db.commit()
            return response

    return _make


@pytest.fixture()
def viewer_id() -> str:
    return str(uuid.uuid4())
