from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

DATABASE_URL = "sqlite+pysqlite:///./test_suite.db"

os.environ.setdefault("DATABASE_URL", DATABASE_URL)
os.environ.setdefault("ENABLE_TRACING", "false")

from chargeview.api.deps import get_db_session, get_session_factory
from chargeview.main import app
from chargeview.models import Base, ChargeBox, Connector, ConnectorMeterValue, OcppTag, Transaction

FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class ChargingDataFactory:
    """Creates charge boxes, sessions and samples directly in the test database."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._connectors: dict[tuple[str, int], Connector] = {}
        self._tags: set[str] = set()

    def connector(self, charge_box_id: str = "CB01", connector_id: int = 1) -> Connector:
        key = (charge_box_id, connector_id)
        if key in self._connectors:
            return self._connectors[key]
        if not any(existing == charge_box_id for existing, _ in self._connectors):
            self._session.add(ChargeBox(charge_box_id=charge_box_id))
        connector = Connector(charge_box_id=charge_box_id, connector_id=connector_id)
        self._session.add(connector)
        self._session.flush()
        self._connectors[key] = connector
        return connector

    def tag(self, id_tag: str) -> None:
        if id_tag in self._tags:
            return
        self._session.add(OcppTag(id_tag=id_tag))
        self._session.flush()
        self._tags.add(id_tag)

    def transaction(
        self,
        *,
        start: datetime,
        stop: datetime | None = None,
        charge_box_id: str = "CB01",
        connector_id: int = 1,
        id_tag: str = "TAG-1",
        transaction_pk: int | None = None,
        start_value: str = "0",
        stop_value: str | None = None,
    ) -> Transaction:
        connector = self.connector(charge_box_id, connector_id)
        self.tag(id_tag)
        if stop is not None and stop_value is None:
            stop_value = "1000"
        transaction = Transaction(
            transaction_pk=transaction_pk,
            connector_pk=connector.connector_pk,
            id_tag=id_tag,
            start_timestamp=start,
            start_value=start_value,
            stop_timestamp=stop,
            stop_value=stop_value,
        )
        self._session.add(transaction)
        self._session.commit()
        return transaction

    def meter_value(
        self,
        *,
        at: datetime,
        value: str,
        transaction: Transaction | None = None,
        charge_box_id: str = "CB01",
        connector_id: int = 1,
        reading_context: str | None = "Sample.Periodic",
        format: str | None = "Raw",
        measurand: str | None = "Energy.Active.Import.Register",
        location: str | None = "Outlet",
        unit: str | None = "Wh",
    ) -> ConnectorMeterValue:
        connector = self.connector(charge_box_id, connector_id)
        sample = ConnectorMeterValue(
            connector_pk=connector.connector_pk,
            transaction_pk=transaction.transaction_pk if transaction is not None else None,
            value_timestamp=at,
            value=value,
            reading_context=reading_context,
            format=format,
            measurand=measurand,
            location=location,
            unit=unit,
        )
        self._session.add(sample)
        self._session.commit()
        return sample


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def factory(db_session: Session) -> ChargingDataFactory:
    return ChargingDataFactory(db_session)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def clock(now: datetime) -> Callable[[], datetime]:
    return lambda: now


@pytest.fixture()
def db_engine() -> Engine:
    return engine


@pytest.fixture()
def client(db_session: Session) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db_session, None)
    app.dependency_overrides.pop(get_session_factory, None)
