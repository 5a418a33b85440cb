"""Authorization tag ORM model."""
from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chargeview.models.base import Base


class OcppTag(Base):
    """RFID or token identifier presented at a station to authorize a session."""

    __tablename__ = "ocpp_tag"

    ocpp_tag_pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_tag: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    note: Mapped[str | None] = mapped_column(String(255))


__all__ = ["OcppTag"]
