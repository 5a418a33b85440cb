"""Filter conditions shared by every transaction query."""
from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Date, Select, and_, func
from sqlalchemy.sql.elements import ColumnElement

from chargeview.models import Connector, Transaction
from chargeview.schemas.transaction import QueryPeriodType, QueryType, TransactionQueryForm
from chargeview.utils.time import days_before


class TransactionQueryError(RuntimeError):
    """Base exception for transaction query errors."""


class UnknownPeriodTypeError(TransactionQueryError):
    """Raised when a query form carries a period type the filters do not handle."""


DEFAULT_ORDERING = (Transaction.transaction_pk.desc(),)


def _start_date() -> ColumnElement[date]:
    return func.date(Transaction.start_timestamp, type_=Date)


def _period_conditions(form: TransactionQueryForm, *, today: date) -> list[ColumnElement[bool]]:
    period = form.period_type

    if period is QueryPeriodType.ALL:
        return []

    if period is QueryPeriodType.TODAY:
        return [_start_date() == today]

    if period in (QueryPeriodType.LAST_10, QueryPeriodType.LAST_30, QueryPeriodType.LAST_90):
        return [_start_date().between(days_before(today, period.interval_days), today)]

    if period is QueryPeriodType.FROM_TO:
        return [Transaction.start_timestamp.between(form.from_, form.to)]

    raise UnknownPeriodTypeError(f"Unknown period type '{period}'")


def build_transaction_conditions(
    form: TransactionQueryForm, *, today: date
) -> list[ColumnElement[bool]]:
    """Translate ``form`` into predicates over a transaction joined with its connector."""

    conditions: list[ColumnElement[bool]] = []

    if form.is_transaction_pk_set:
        conditions.append(Transaction.transaction_pk == form.transaction_pk)

    if form.is_charge_box_id_set:
        conditions.append(Connector.charge_box_id == form.charge_box_id)

    if form.is_ocpp_id_tag_set:
        conditions.append(Transaction.id_tag == form.ocpp_id_tag)

    if form.type is QueryType.ACTIVE:
        conditions.append(Transaction.stop_timestamp.is_(None))

    conditions.extend(_period_conditions(form, today=today))
    return conditions


def apply_transaction_filters(
    statement: Select[Any], form: TransactionQueryForm, *, today: date
) -> Select[Any]:
    """Add the form's conditions and the default newest-first ordering to ``statement``."""

    conditions = build_transaction_conditions(form, today=today)
    if conditions:
        statement = statement.where(and_(*conditions))
    return statement.order_by(*DEFAULT_ORDERING)


__all__ = [
    "DEFAULT_ORDERING",
    "TransactionQueryError",
    "UnknownPeriodTypeError",
    "apply_transaction_filters",
    "build_transaction_conditions",
]
