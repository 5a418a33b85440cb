"""Seed script for a demo charge box with finished and active sessions."""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from chargeview.core.logging import configure_logging
from chargeview.db.session import engine, session_scope
from chargeview.models import Base, ChargeBox, Connector, ConnectorMeterValue, OcppTag, Transaction

logger = logging.getLogger(__name__)

DEMO_CHARGE_BOX_ID = "CB-DEMO-01"
DEMO_ID_TAG = "DEMO-TAG-0001"


def _sample(connector: Connector, *, at: datetime, value: str, transaction: Transaction | None) -> ConnectorMeterValue:
    return ConnectorMeterValue(
        connector_pk=connector.connector_pk,
        transaction_pk=transaction.transaction_pk if transaction is not None else None,
        value_timestamp=at,
        value=value,
        reading_context="Sample.Periodic",
        format="Raw",
        measurand="Energy.Active.Import.Register",
        location="Outlet",
        unit="Wh",
    )


def seed(session: Session) -> None:
    """Seed one station with two connectors, a finished and an active session."""

    existing = session.scalar(select(ChargeBox).where(ChargeBox.charge_box_id == DEMO_CHARGE_BOX_ID))
    if existing is not None:
        logger.info("Charge box %s already exists", DEMO_CHARGE_BOX_ID)
        return

    session.add(ChargeBox(charge_box_id=DEMO_CHARGE_BOX_ID, description="Demo station"))
    session.add(OcppTag(id_tag=DEMO_ID_TAG, note="Demo card"))
    connectors = [Connector(charge_box_id=DEMO_CHARGE_BOX_ID, connector_id=number) for number in (1, 2)]
    session.add_all(connectors)
    session.flush()

    now = datetime.now(UTC).replace(microsecond=0)
    finished_start = now - timedelta(days=1, hours=2)
    finished = Transaction(
        connector_pk=connectors[0].connector_pk,
        id_tag=DEMO_ID_TAG,
        start_timestamp=finished_start,
        start_value="1000",
        stop_timestamp=finished_start + timedelta(hours=1),
        stop_value="8400",
    )
    active = Transaction(
        connector_pk=connectors[1].connector_pk,
        id_tag=DEMO_ID_TAG,
        start_timestamp=now - timedelta(minutes=45),
        start_value="500",
    )
    session.add_all([finished, active])
    session.flush()

    session.add_all(
        [
            _sample(connectors[0], at=finished_start + timedelta(minutes=15), value="3200", transaction=finished),
            # untagged samples are picked up through the session window
            _sample(connectors[0], at=finished_start + timedelta(minutes=30), value="5600", transaction=None),
            _sample(connectors[0], at=finished_start + timedelta(minutes=45), value="8400", transaction=finished),
            _sample(connectors[0], at=finished_start + timedelta(minutes=60), value="8400", transaction=finished),
            _sample(connectors[1], at=now - timedelta(minutes=30), value="1900", transaction=active),
            _sample(connectors[1], at=now - timedelta(minutes=15), value="3300", transaction=None),
        ]
    )
    logger.info(
        "Seeded charge box %s with transactions %s and %s",
        DEMO_CHARGE_BOX_ID,
        finished.transaction_pk,
        active.transaction_pk,
    )


def main() -> None:
    configure_logging()
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        seed(session)


if __name__ == "__main__":
    main()
