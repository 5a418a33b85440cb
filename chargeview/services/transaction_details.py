"""Reconciliation of a transaction with the meter values recorded during it.

Stations do not reliably tag their samples with the transaction they belong
to, so candidates come from two places:

* samples tagged with the transaction id, whatever their timestamp;
* samples of the transaction's connector inside the session's time window.

Both are fetched in a single ``UNION`` (identical rows collapse) and grouped by
reading so that a value repeated at fixed intervals, for example a full battery
still plugged in, is reported once with the time it was first seen.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, select, union
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from chargeview.core.config import Settings
from chargeview.models import Connector, ConnectorMeterValue
from chargeview.obs import query_span, record_detail_lookup
from chargeview.schemas.transaction import QueryPeriodType, QueryType, TransactionQueryForm
from chargeview.services.transaction_filters import TransactionQueryError
from chargeview.services.transactions import TransactionQueryService, TransactionRecord
from chargeview.utils.time import as_utc

logger = logging.getLogger(__name__)

SAMPLE_KEY_FIELDS = ("value", "reading_context", "format", "measurand", "location", "unit")

_RAW_METER_VALUE_COLUMNS = (
    ConnectorMeterValue.connector_pk,
    ConnectorMeterValue.transaction_pk,
    ConnectorMeterValue.value_timestamp,
    ConnectorMeterValue.value,
    ConnectorMeterValue.reading_context,
    ConnectorMeterValue.format,
    ConnectorMeterValue.measurand,
    ConnectorMeterValue.location,
    ConnectorMeterValue.unit,
)


class TransactionNotFoundError(TransactionQueryError):
    """Raised when no transaction exists for the requested id."""

    def __init__(self, transaction_pk: int) -> None:
        super().__init__(f"There is no transaction with id '{transaction_pk}'")
        self.transaction_pk = transaction_pk


@dataclass(slots=True, frozen=True)
class MeterValueRecord:
    """A distinct reading and the earliest time it was sampled."""

    value_timestamp: datetime
    value: str | None
    reading_context: str | None
    format: str | None
    measurand: str | None
    location: str | None
    unit: str | None

    @property
    def sample_key(self) -> tuple[str | None, ...]:
        return tuple(getattr(self, name) for name in SAMPLE_KEY_FIELDS)


@dataclass(slots=True, frozen=True)
class TransactionDetails:
    """A transaction and its reconciled meter values in chronological order."""

    transaction: TransactionRecord
    values: tuple[MeterValueRecord, ...]


def _session_window(transaction: TransactionRecord) -> ColumnElement[bool]:
    if transaction.is_active:
        return ConnectorMeterValue.value_timestamp >= transaction.start_timestamp
    return ConnectorMeterValue.value_timestamp.between(
        transaction.start_timestamp, transaction.stop_timestamp
    )


def build_meter_value_statement(transaction: TransactionRecord) -> Select[Any]:
    """Build the single statement returning the reconciled meter values of ``transaction``."""

    tagged = select(*_RAW_METER_VALUE_COLUMNS).where(
        ConnectorMeterValue.transaction_pk == transaction.id
    )

    connector_pk = (
        select(Connector.connector_pk)
        .where(
            Connector.charge_box_id == transaction.charge_box_id,
            Connector.connector_id == transaction.connector_id,
        )
        .scalar_subquery()
    )
    windowed = select(*_RAW_METER_VALUE_COLUMNS).where(
        ConnectorMeterValue.connector_pk == connector_pk,
        _session_window(transaction),
    )

    candidates = union(tagged, windowed).subquery("candidates")

    first_seen = func.min(candidates.c.value_timestamp).label("first_timestamp")
    sample_key = [candidates.c[name] for name in SAMPLE_KEY_FIELDS]
    return select(first_seen, *sample_key).group_by(*sample_key).order_by(first_seen)


class TransactionDetailsService:
    """Builds :class:`TransactionDetails` with one query per table family."""

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session = session
        self._queries = TransactionQueryService(session, settings=settings, clock=clock)

    def get_details(self, transaction_pk: int) -> TransactionDetails:
        """Return the transaction and its meter values or raise ``TransactionNotFoundError``."""

        form = TransactionQueryForm(
            transaction_pk=transaction_pk,
            type=QueryType.ALL,
            period_type=QueryPeriodType.ALL,
        )

        with query_span("transactions.details", transaction_pk=transaction_pk):
            transaction = self._queries.get_transaction(form)
            if transaction is None:
                record_detail_lookup("not_found")
                raise TransactionNotFoundError(transaction_pk)

            rows = self._session.execute(build_meter_value_statement(transaction)).all()

        values = tuple(
            MeterValueRecord(
                value_timestamp=as_utc(row.first_timestamp),
                value=row.value,
                reading_context=row.reading_context,
                format=row.format,
                measurand=row.measurand,
                location=row.location,
                unit=row.unit,
            )
            for row in rows
        )
        record_detail_lookup("found", len(values))
        logger.debug(
            "reconciled transaction meter values",
            extra={"transaction_pk": transaction_pk, "values": len(values)},
        )
        return TransactionDetails(transaction=transaction, values=values)


__all__ = [
    "MeterValueRecord",
    "SAMPLE_KEY_FIELDS",
    "TransactionDetails",
    "TransactionDetailsService",
    "TransactionNotFoundError",
    "build_meter_value_statement",
]
