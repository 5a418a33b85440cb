"""Charging transaction ORM model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chargeview.models.base import Base


class Transaction(Base):
    """One charging session on a connector.

    A session is active while ``stop_timestamp`` is null. The stop fields are
    written together when the station reports the end of the session.
    """

    __tablename__ = "transaction"
    __table_args__ = (
        CheckConstraint(
            "(stop_timestamp IS NULL AND stop_value IS NULL)"
            " OR (stop_timestamp IS NOT NULL AND stop_value IS NOT NULL)",
            name="stop_fields_paired",
        ),
        Index("ix_transaction_connector_pk", "connector_pk"),
        Index("ix_transaction_id_tag", "id_tag"),
    )

    transaction_pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    connector_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey("connector.connector_pk", ondelete="CASCADE"), nullable=False
    )
    id_tag: Mapped[str] = mapped_column(
        String(255), ForeignKey("ocpp_tag.id_tag", ondelete="CASCADE"), nullable=False
    )
    start_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_value: Mapped[str] = mapped_column(String(255), nullable=False)
    stop_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    stop_value: Mapped[str | None] = mapped_column(String(255))

    connector = relationship("Connector", back_populates="transactions")
    meter_values = relationship("ConnectorMeterValue", back_populates="transaction")

    @property
    def is_active(self) -> bool:
        return self.stop_timestamp is None


__all__ = ["Transaction"]
