# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import date, timedelta
from typing import Any
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ictdesk.db.session import Base, build_engine
from ictdesk.db.session import get_db as app_get_session
from ictdesk.db.time import local_today
from ictdesk.main import app as fastapi_app
from ictdesk.models import Batch, BatchDevice
from ictdesk.models.batch import BATCH_STATUS_PENDING

TEST_DB_URL = "sqlite://"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI, session_factory: sessionmaker[Session]
) -> Iterator[None]:
    # One session per request, as in production.
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def today() -> date:
    return local_today()


@pytest.fixture()
def yesterday(today: date) -> date:
    return today - timedelta(days=1)


@pytest.fixture()
def tomorrow(today: date) -> date:
    return today + timedelta(days=1)


def next_serial(prefix: str = "SN") -> str:
    """Return a serial number no other test helper has handed out."""
    return f"{prefix}-{uuid4().hex[:12].upper()}"


@pytest.fixture()
def make_batch(db_session: Session, tomorrow: date) -> Callable[..., Batch]:
    """Persist a batch with devices directly, bypassing the registrar."""

    def _make(
        *serials: str,
        status: str = BATCH_STATUS_PENDING,
        school_code: str = "300001",
        batch_number: str = "20250101-0001",
        send_date: date | None = None,
    ) -> Batch:
        batch = Batch(
            batch_number=batch_number,
            school_code=school_code,
            school_name="Test Elementary School",
            send_date=send_date or tomorrow,
            status=status,
            devices=[
                BatchDevice(device_type="Laptop", device_number=serial)
                for serial in (serials or (next_serial(),))
            ],
        )
        db_session.add(batch)
        db_session.commit()
        db_session.refresh(batch)
        return batch

    return _make


def account_request_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "selectedType": "Teaching",
        "surname": "Dela Cruz",
        "firstName": "Juan",
        "middleName": "Santos",
        "designation": "Teacher I",
        "school": "Test Elementary School",
        "schoolID": "300001",
        "personalGmail": "juan.delacruz@gmail.com",
    }
    payload.update(overrides)
    return payload


def reset_request_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "selectedType": "Teaching",
        "surname": "Reyes",
        "firstName": "Maria",
        "middleName": "",
        "school": "Test National High School",
        "schoolID": "300002",
        "employeeNumber": "4412345",
        "personalEmail": "maria.reyes@gmail.com",
        "deped_email": "maria.reyes@deped.gov.ph",
    }
    payload.update(overrides)
    return payload
