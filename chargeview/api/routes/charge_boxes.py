"""Charge box scoped reporting routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chargeview.api.deps import get_db_session
from chargeview.services.transactions import TransactionQueryService

router = APIRouter(prefix="/charge-boxes")


@router.get("/{charge_box_id}/active-transactions", response_model=list[int])
def list_active_transaction_ids(
    charge_box_id: str,
    session: Session = Depends(get_db_session),
) -> list[int]:
    return TransactionQueryService(session).get_active_transaction_ids(charge_box_id)


__all__ = ["list_active_transaction_ids", "router"]
