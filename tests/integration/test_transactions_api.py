from __future__ import annotations

import csv
import io
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from chargeview.api.deps import get_transaction_query_form
from chargeview.main import app
from chargeview.schemas.transaction import TransactionQueryForm
from chargeview.services.transactions import CSV_COLUMNS

T0 = datetime(2026, 10, 16, 8, 0, tzinfo=UTC)


def test_list_transactions_newest_first(client: TestClient, factory) -> None:
    finished = factory.transaction(start=T0, stop=T0 + timedelta(hours=1), id_tag="TAG-API")
    active = factory.transaction(start=T0 + timedelta(hours=2), connector_id=2, id_tag="TAG-API")

    response = client.get("/api/transactions")

    assert response.status_code == 200
    payload = response.json()
    assert [item["id"] for item in payload] == [active.transaction_pk, finished.transaction_pk]
    first = payload[0]
    assert first["charge_box_id"] == "CB01"
    assert first["connector_id"] == 2
    assert first["ocpp_id_tag"] == "TAG-API"
    assert first["stop_timestamp"] is None
    assert first["stop_timestamp_display"] == ""
    assert first["start_timestamp_display"]
    assert payload[1]["stop_value"] == "1000"


def test_list_transactions_applies_query_parameters(client: TestClient, factory) -> None:
    factory.transaction(start=T0, stop=T0 + timedelta(hours=1), charge_box_id="CB01")
    wanted = factory.transaction(start=T0 + timedelta(hours=1), charge_box_id="CB02")
    factory.transaction(start=T0 + timedelta(days=3), charge_box_id="CB02")

    response = client.get(
        "/api/transactions",
        params={
            "charge_box_id": "CB02",
            "type": "ACTIVE",
            "period_type": "FROM_TO",
            "from": "2026-10-16T00:00:00Z",
            "to": "2026-10-17T00:00:00Z",
        },
    )

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [wanted.transaction_pk]


def test_list_transactions_rejects_incomplete_range(client: TestClient) -> None:
    response = client.get(
        "/api/transactions", params={"period_type": "FROM_TO", "from": "2026-10-16T00:00:00Z"}
    )

    assert response.status_code == 422
    assert any("FROM_TO" in message for message in response.json()["detail"])


def test_list_transactions_rejects_unknown_period(client: TestClient) -> None:
    response = client.get("/api/transactions", params={"period_type": "LAST_WEEK"})

    assert response.status_code == 422


def test_unhandled_period_type_is_an_invalid_configuration(client: TestClient, factory) -> None:
    factory.transaction(start=T0)
    unhandled = TransactionQueryForm.model_construct(period_type="LAST_WEEK")
    app.dependency_overrides[get_transaction_query_form] = lambda: unhandled
    try:
        response = client.get("/api/transactions")
    finally:
        app.dependency_overrides.pop(get_transaction_query_form, None)

    assert response.status_code == 500
    assert response.json() == {"detail": "Invalid query configuration"}


def test_export_streams_csv(client: TestClient, factory) -> None:
    transaction = factory.transaction(start=T0, stop=T0 + timedelta(hours=1), stop_value="900")
    factory.transaction(start=T0, charge_box_id="CB02")

    response = client.get("/api/transactions/export", params={"charge_box_id": "CB01"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="transactions.csv"'
    rows = list(csv.reader(io.StringIO(response.text)))
    assert tuple(rows[0]) == CSV_COLUMNS
    assert rows[1:] == [
        [
            str(transaction.transaction_pk),
            "CB01",
            "1",
            "TAG-1",
            T0.isoformat(),
            "0",
            (T0 + timedelta(hours=1)).isoformat(),
            "900",
        ]
    ]


def test_transaction_details(client: TestClient, factory) -> None:
    transaction = factory.transaction(start=T0, stop=T0 + timedelta(hours=1), transaction_pk=42)
    factory.meter_value(at=T0 + timedelta(minutes=10), value="100", transaction=transaction)
    factory.meter_value(at=T0 + timedelta(minutes=25), value="100")
    factory.meter_value(at=T0 + timedelta(minutes=50), value="150", transaction=transaction)

    response = client.get("/api/transactions/42")

    assert response.status_code == 200
    payload = response.json()
    assert payload["transaction"]["id"] == 42
    assert [item["value"] for item in payload["values"]] == ["100", "150"]
    assert payload["values"][0]["measurand"] == "Energy.Active.Import.Register"
    assert payload["values"][0]["unit"] == "Wh"


def test_transaction_details_not_found(client: TestClient, factory) -> None:
    factory.transaction(start=T0)

    response = client.get("/api/transactions/777")

    assert response.status_code == 404
    assert response.json()["detail"] == "There is no transaction with id '777'"


def test_active_transaction_ids(client: TestClient, factory) -> None:
    first = factory.transaction(start=T0, charge_box_id="CB05", connector_id=1)
    second = factory.transaction(start=T0, charge_box_id="CB05", connector_id=2)
    factory.transaction(start=T0, stop=T0 + timedelta(hours=1), charge_box_id="CB05")
    factory.transaction(start=T0, charge_box_id="CB06")

    response = client.get("/api/charge-boxes/CB05/active-transactions")
    empty = client.get("/api/charge-boxes/CB-UNKNOWN/active-transactions")

    assert response.status_code == 200
    assert response.json() == [second.transaction_pk, first.transaction_pk]
    assert empty.status_code == 200
    assert empty.json() == []


def test_health_endpoints(client: TestClient) -> None:
    health = client.get("/api/healthz")
    ready = client.get("/api/readyz")

    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"


def test_metrics_label_requests_by_route_template(client: TestClient) -> None:
    client.get("/api/healthz")
    client.get("/api/transactions/31337")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'path="/api/healthz"' in response.text
    assert 'path="/api/transactions/{transaction_pk}"' in response.text
