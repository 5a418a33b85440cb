"""Pydantic schemas for transaction queries and responses."""
from __future__ import annotations

import enum
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QueryType(str, enum.Enum):
    ALL = "ALL"
    ACTIVE = "ACTIVE"


class QueryPeriodType(str, enum.Enum):
    ALL = "ALL"
    TODAY = "TODAY"
    LAST_10 = "LAST_10"
    LAST_30 = "LAST_30"
    LAST_90 = "LAST_90"
    FROM_TO = "FROM_TO"

    @property
    def interval_days(self) -> int | None:
        """Length of the look-back window for the ``LAST_*`` periods."""
        return _PERIOD_INTERVALS.get(self)


_PERIOD_INTERVALS = {
    QueryPeriodType.LAST_10: 10,
    QueryPeriodType.LAST_30: 30,
    QueryPeriodType.LAST_90: 90,
}


class TransactionQueryForm(BaseModel):
    """Filter criteria for transaction searches.

    ``from_`` and ``to`` are only consulted for ``FROM_TO`` periods. Naive
    datetimes are taken to be UTC.
    """

    model_config = ConfigDict(populate_by_name=True)

    transaction_pk: int | None = Field(default=None)
    charge_box_id: str | None = Field(default=None, max_length=255)
    ocpp_id_tag: str | None = Field(default=None, max_length=255)
    type: QueryType = Field(default=QueryType.ALL)
    period_type: QueryPeriodType = Field(default=QueryPeriodType.ALL)
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = Field(default=None)

    @field_validator("charge_box_id", "ocpp_id_tag")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("from_", "to")
    @classmethod
    def _normalize_to_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @model_validator(mode="after")
    def _check_period_range(self) -> "TransactionQueryForm":
        if self.period_type is QueryPeriodType.FROM_TO:
            if self.from_ is None or self.to is None:
                raise ValueError("Both 'from' and 'to' are required for the FROM_TO period")
            if self.from_ > self.to:
                raise ValueError("'from' must not be after 'to'")
        return self

    @property
    def is_transaction_pk_set(self) -> bool:
        return self.transaction_pk is not None

    @property
    def is_charge_box_id_set(self) -> bool:
        return self.charge_box_id is not None

    @property
    def is_ocpp_id_tag_set(self) -> bool:
        return self.ocpp_id_tag is not None


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class MeterValueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    value_timestamp: datetime
    value: str | None
    reading_context: str | None
    format: str | None
    measurand: str | None
    location: str | None
    unit: str | None


class TransactionDetailsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction: TransactionRead
    values: list[MeterValueRead]


__all__ = [
    "MeterValueRead",
    "QueryPeriodType",
    "QueryType",
    "TransactionDetailsRead",
    "TransactionQueryForm",
    "TransactionRead",
]
