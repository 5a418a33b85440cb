"""Pydantic schemas package."""

from .transaction import (
    MeterValueRead,
    QueryPeriodType,
    QueryType,
    TransactionDetailsRead,
    TransactionQueryForm,
    TransactionRead,
)

__all__ = [
    "MeterValueRead",
    "QueryPeriodType",
    "QueryType",
    "TransactionDetailsRead",
    "TransactionQueryForm",
    "TransactionRead",
]
