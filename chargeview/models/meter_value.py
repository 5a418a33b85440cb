"""Connector meter value ORM model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chargeview.models.base import Base


class ConnectorMeterValue(Base):
    """Timestamped sample reported for a connector.

    ``transaction_pk`` is only set when the station tagged the sample with its
    transaction. The surrogate ``id`` never takes part in comparisons between
    samples.
    """

    __tablename__ = "connector_meter_value"
    __table_args__ = (
        Index("ix_connector_meter_value_connector_pk_value_timestamp", "connector_pk", "value_timestamp"),
        Index("ix_connector_meter_value_transaction_pk", "transaction_pk"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    connector_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey("connector.connector_pk", ondelete="CASCADE"), nullable=False
    )
    transaction_pk: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transaction.transaction_pk", ondelete="SET NULL")
    )
    value_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    value: Mapped[str | None] = mapped_column(String(255))
    reading_context: Mapped[str | None] = mapped_column(String(255))
    format: Mapped[str | None] = mapped_column(String(255))
    measurand: Mapped[str | None] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255))
    unit: Mapped[str | None] = mapped_column(String(255))

    transaction = relationship("Transaction", back_populates="meter_values")


__all__ = ["ConnectorMeterValue"]
