"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime

from fastapi import HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from chargeview.db.session import SessionLocal
from chargeview.schemas.transaction import QueryPeriodType, QueryType, TransactionQueryForm


def get_db_session() -> Iterator[Session]:
    """Yield a database session for FastAPI dependencies."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_session_factory() -> Callable[[], Session]:
    """Return the session factory for responses that outlive the request scope."""

    return SessionLocal


def get_transaction_query_form(
    transaction_pk: int | None = Query(default=None),
    charge_box_id: str | None = Query(default=None),
    ocpp_id_tag: str | None = Query(default=None),
    type: QueryType = Query(default=QueryType.ALL),
    period_type: QueryPeriodType = Query(default=QueryPeriodType.ALL),
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = Query(default=None),
) -> TransactionQueryForm:
    try:
        return TransactionQueryForm(
            transaction_pk=transaction_pk,
            charge_box_id=charge_box_id,
            ocpp_id_tag=ocpp_id_tag,
            type=type,
            period_type=period_type,
            from_=from_,
            to=to,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error["msg"] for error in exc.errors()],
        ) from exc


__all__ = ["get_db_session", "get_session_factory", "get_transaction_query_form"]
