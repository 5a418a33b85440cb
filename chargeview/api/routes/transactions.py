"""Transaction reporting API routes."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from chargeview.api.deps import get_db_session, get_session_factory, get_transaction_query_form
from chargeview.schemas.transaction import (
    TransactionDetailsRead,
    TransactionQueryForm,
    TransactionRead,
)
from chargeview.services.transaction_details import (
    TransactionDetailsService,
    TransactionNotFoundError,
)
from chargeview.services.transaction_filters import UnknownPeriodTypeError
from chargeview.services.transactions import TransactionQueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions")


def _invalid_configuration(exc: UnknownPeriodTypeError) -> HTTPException:
    logger.error("transaction query rejected", extra={"error": str(exc)})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Invalid query configuration",
    )


@router.get("", response_model=list[TransactionRead])
def list_transactions(
    form: TransactionQueryForm = Depends(get_transaction_query_form),
    session: Session = Depends(get_db_session),
) -> list[TransactionRead]:
    service = TransactionQueryService(session)
    try:
        records = service.get_transactions(form)
    except UnknownPeriodTypeError as exc:
        raise _invalid_configuration(exc) from exc
    return [TransactionRead.model_validate(record) for record in records]


@router.get("/export", response_class=StreamingResponse)
def export_transactions_csv(
    form: TransactionQueryForm = Depends(get_transaction_query_form),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> StreamingResponse:
    def body() -> Iterator[str]:
        session = session_factory()
        try:
            yield from TransactionQueryService(session).iter_transactions_csv(form)
        finally:
            session.close()

    return StreamingResponse(
        body(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


@router.get("/{transaction_pk}", response_model=TransactionDetailsRead)
def get_transaction_details(
    transaction_pk: int,
    session: Session = Depends(get_db_session),
) -> TransactionDetailsRead:
    service = TransactionDetailsService(session)
    try:
        details = service.get_details(transaction_pk)
    except TransactionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TransactionDetailsRead.model_validate(details)


__all__ = ["export_transactions_csv", "get_transaction_details", "list_transactions", "router"]
