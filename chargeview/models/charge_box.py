"""Charge box and connector ORM models."""
from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chargeview.models.base import Base


class ChargeBox(Base):
    """Charging station known to the backend."""

    __tablename__ = "charge_box"

    charge_box_pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    charge_box_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))

    connectors = relationship("Connector", back_populates="charge_box")


class Connector(Base):
    """Numbered outlet of a charge box; connector numbers are unique per station."""

    __tablename__ = "connector"
    __table_args__ = (
        UniqueConstraint("charge_box_id", "connector_id", name="uq_connector_charge_box_connector"),
    )

    connector_pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    charge_box_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("charge_box.charge_box_id", ondelete="CASCADE"), nullable=False
    )
    connector_id: Mapped[int] = mapped_column(Integer, nullable=False)

    charge_box = relationship("ChargeBox", back_populates="connectors")
    transactions = relationship("Transaction", back_populates="connector")


__all__ = ["ChargeBox", "Connector"]
