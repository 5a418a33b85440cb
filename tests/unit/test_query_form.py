from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from chargeview.schemas.transaction import QueryPeriodType, QueryType, TransactionQueryForm


def test_defaults_select_everything() -> None:
    form = TransactionQueryForm()

    assert form.type is QueryType.ALL
    assert form.period_type is QueryPeriodType.ALL
    assert not form.is_transaction_pk_set
    assert not form.is_charge_box_id_set
    assert not form.is_ocpp_id_tag_set


def test_blank_text_filters_count_as_unset() -> None:
    form = TransactionQueryForm(charge_box_id="  ", ocpp_id_tag="")

    assert form.charge_box_id is None
    assert form.ocpp_id_tag is None


def test_from_to_requires_both_bounds() -> None:
    with pytest.raises(ValidationError, match="required for the FROM_TO period"):
        TransactionQueryForm(period_type=QueryPeriodType.FROM_TO, from_=datetime(2026, 1, 1))


def test_from_must_not_be_after_to() -> None:
    with pytest.raises(ValidationError, match="must not be after"):
        TransactionQueryForm(
            period_type=QueryPeriodType.FROM_TO,
            from_=datetime(2026, 1, 2, tzinfo=UTC),
            to=datetime(2026, 1, 1, tzinfo=UTC),
        )


def test_bounds_are_normalized_to_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    form = TransactionQueryForm(
        period_type=QueryPeriodType.FROM_TO,
        from_=datetime(2026, 1, 1, 10, 0),
        to=datetime(2026, 1, 1, 14, 0, tzinfo=plus_two),
    )

    assert form.from_ == datetime(2026, 1, 1, 10, 0, tzinfo=UTC)
    assert form.to == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    assert form.to.tzinfo is UTC


def test_from_accepts_its_public_alias() -> None:
    form = TransactionQueryForm.model_validate(
        {"period_type": "FROM_TO", "from": "2026-01-01T00:00:00Z", "to": "2026-01-02T00:00:00Z"}
    )

    assert form.from_ == datetime(2026, 1, 1, tzinfo=UTC)


def test_bounds_are_ignored_outside_from_to() -> None:
    form = TransactionQueryForm(period_type=QueryPeriodType.TODAY, from_=datetime(2026, 1, 1))

    assert form.period_type is QueryPeriodType.TODAY


@pytest.mark.parametrize(
    ("period", "days"),
    [
        (QueryPeriodType.LAST_10, 10),
        (QueryPeriodType.LAST_30, 30),
        (QueryPeriodType.LAST_90, 90),
        (QueryPeriodType.TODAY, None),
    ],
)
def test_period_interval_days(period: QueryPeriodType, days: int | None) -> None:
    assert period.interval_days == days
