"""Transaction queries for listing, CSV export and active-session lookups."""
from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, TextIO

from sqlalchemy import Row, Select, and_, select
from sqlalchemy.orm import Session

from chargeview.core.config import Settings, get_settings
from chargeview.models import ChargeBox, Connector, OcppTag, Transaction
from chargeview.obs import CSV_EXPORT_ROWS, query_span
from chargeview.schemas.transaction import TransactionQueryForm
from chargeview.services.transaction_filters import apply_transaction_filters
from chargeview.utils.time import as_utc, humanize, utc_now, utc_today

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "transaction_pk",
    "charge_box_id",
    "connector_id",
    "id_tag",
    "start_timestamp",
    "start_value",
    "stop_timestamp",
    "stop_value",
)


@dataclass(slots=True, frozen=True)
class TransactionRecord:
    """Transaction row with display strings rendered next to the raw instants."""

    id: int
    charge_box_id: str
    connector_id: int
    ocpp_id_tag: str
    start_timestamp: datetime
    start_timestamp_display: str
    start_value: str
    stop_timestamp: datetime | None
    stop_timestamp_display: str
    stop_value: str | None
    charge_box_pk: int
    ocpp_tag_pk: int

    @property
    def is_active(self) -> bool:
        return self.stop_timestamp is None


def _csv_field(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return value


def _drain(buffer: io.StringIO) -> str:
    chunk = buffer.getvalue()
    buffer.seek(0)
    buffer.truncate(0)
    return chunk


class TransactionQueryService:
    """Runs filtered transaction queries against the charging backend tables."""

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._clock = clock or utc_now

    def _today(self) -> date:
        return utc_today(self._clock())

    def _record_statement(self, form: TransactionQueryForm) -> Select[Any]:
        statement = (
            select(
                Transaction.transaction_pk,
                Connector.charge_box_id,
                Connector.connector_id,
                Transaction.id_tag,
                Transaction.start_timestamp,
                Transaction.start_value,
                Transaction.stop_timestamp,
                Transaction.stop_value,
                ChargeBox.charge_box_pk,
                OcppTag.ocpp_tag_pk,
            )
            .select_from(Transaction)
            .join(Connector, Transaction.connector_pk == Connector.connector_pk)
            .join(ChargeBox, ChargeBox.charge_box_id == Connector.charge_box_id)
            .join(OcppTag, OcppTag.id_tag == Transaction.id_tag)
        )
        return apply_transaction_filters(statement, form, today=self._today())

    def _export_statement(self, form: TransactionQueryForm) -> Select[Any]:
        statement = (
            select(
                Transaction.transaction_pk,
                Connector.charge_box_id,
                Connector.connector_id,
                Transaction.id_tag,
                Transaction.start_timestamp,
                Transaction.start_value,
                Transaction.stop_timestamp,
                Transaction.stop_value,
            )
            .select_from(Transaction)
            .join(Connector, Transaction.connector_pk == Connector.connector_pk)
        )
        return apply_transaction_filters(statement, form, today=self._today())

    def _to_record(self, row: Row[Any]) -> TransactionRecord:
        now = self._clock()
        tz = self._settings.display_timezone
        start = as_utc(row.start_timestamp)
        stop = as_utc(row.stop_timestamp) if row.stop_timestamp is not None else None
        return TransactionRecord(
            id=row.transaction_pk,
            charge_box_id=row.charge_box_id,
            connector_id=row.connector_id,
            ocpp_id_tag=row.id_tag,
            start_timestamp=start,
            start_timestamp_display=humanize(start, now=now, tz=tz),
            start_value=row.start_value,
            stop_timestamp=stop,
            stop_timestamp_display=humanize(stop, now=now, tz=tz),
            stop_value=row.stop_value,
            charge_box_pk=row.charge_box_pk,
            ocpp_tag_pk=row.ocpp_tag_pk,
        )

    def get_transactions(self, form: TransactionQueryForm) -> list[TransactionRecord]:
        """Return matching transactions, newest first."""

        statement = self._record_statement(form)
        with query_span(
            "transactions.list",
            period_type=form.period_type.value,
            query_type=form.type.value,
        ):
            rows = self._session.execute(statement).all()
        return [self._to_record(row) for row in rows]

    def get_transaction(self, form: TransactionQueryForm) -> TransactionRecord | None:
        """Return the single transaction selected by ``form``, if any.

        Meant for forms that pin a transaction id; more than one match raises
        ``sqlalchemy.exc.MultipleResultsFound``.
        """

        row = self._session.execute(self._record_statement(form)).one_or_none()
        if row is None:
            return None
        return self._to_record(row)

    def _batched_export_statement(self, form: TransactionQueryForm) -> Select[Any]:
        return self._export_statement(form).execution_options(
            yield_per=self._settings.csv_export_batch_size
        )

    def _export_partitions(self, statement: Select[Any]) -> Iterator[Sequence[Row[Any]]]:
        result = self._session.execute(statement)
        try:
            yield from result.partitions()
        finally:
            result.close()

    def write_transactions_csv(self, form: TransactionQueryForm, sink: TextIO) -> int:
        """Write matching transactions to ``sink`` as CSV, returning the data row count."""

        statement = self._batched_export_statement(form)
        writer = csv.writer(sink)
        writer.writerow(CSV_COLUMNS)
        written = 0
        with query_span("transactions.export_csv", period_type=form.period_type.value):
            for partition in self._export_partitions(statement):
                for row in partition:
                    writer.writerow([_csv_field(value) for value in row])
                written += len(partition)
        CSV_EXPORT_ROWS.inc(written)
        logger.info("exported transactions csv", extra={"rows": written})
        return written

    def iter_transactions_csv(self, form: TransactionQueryForm) -> Iterator[str]:
        """Yield the CSV export chunk by chunk, one chunk per fetched batch.

        The span is not made current: the consumer may resume the generator
        from another thread or context.
        """

        statement = self._batched_export_statement(form)
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        written = 0
        with query_span(
            "transactions.export_csv",
            activate=False,
            period_type=form.period_type.value,
            streamed=True,
        ):
            writer.writerow(CSV_COLUMNS)
            yield _drain(buffer)

            for partition in self._export_partitions(statement):
                for row in partition:
                    writer.writerow([_csv_field(value) for value in row])
                written += len(partition)
                yield _drain(buffer)
        CSV_EXPORT_ROWS.inc(written)
        logger.info("streamed transactions csv", extra={"rows": written})

    def get_active_transaction_ids(self, charge_box_id: str) -> list[int]:
        """Return ids of the sessions still open on ``charge_box_id``, newest first."""

        statement = (
            select(Transaction.transaction_pk)
            .join(
                Connector,
                and_(
                    Transaction.connector_pk == Connector.connector_pk,
                    Connector.charge_box_id == charge_box_id,
                ),
            )
            .where(Transaction.stop_timestamp.is_(None))
            .order_by(Transaction.transaction_pk.desc())
        )
        with query_span("transactions.active_ids", charge_box_id=charge_box_id):
            return list(self._session.scalars(statement))


__all__ = ["CSV_COLUMNS", "TransactionQueryService", "TransactionRecord"]
