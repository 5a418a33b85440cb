"""Charge box, connector, tag, transaction and meter value tables."""
from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from alembic import op

revision = "20261017_01"
down_revision = None
branch_labels = None
depends_on: Iterable[str] | None = None


def upgrade() -> None:  # noqa: D401
    """Create the reporting schema."""

    op.create_table(
        "charge_box",
        sa.Column("charge_box_pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("charge_box_id", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.PrimaryKeyConstraint("charge_box_pk", name="pk_charge_box"),
        sa.UniqueConstraint("charge_box_id", name="uq_charge_box_charge_box_id"),
    )

    op.create_table(
        "ocpp_tag",
        sa.Column("ocpp_tag_pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id_tag", sa.String(length=255), nullable=False),
        sa.Column("note", sa.String(length=255)),
        sa.PrimaryKeyConstraint("ocpp_tag_pk", name="pk_ocpp_tag"),
        sa.UniqueConstraint("id_tag", name="uq_ocpp_tag_id_tag"),
    )

    op.create_table(
        "connector",
        sa.Column("connector_pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("charge_box_id", sa.String(length=255), nullable=False),
        sa.Column("connector_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("connector_pk", name="pk_connector"),
        sa.ForeignKeyConstraint(
            ["charge_box_id"],
            ["charge_box.charge_box_id"],
            name="fk_connector_charge_box_id_charge_box",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "charge_box_id", "connector_id", name="uq_connector_charge_box_connector"
        ),
    )

    op.create_table(
        "transaction",
        sa.Column("transaction_pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("connector_pk", sa.Integer(), nullable=False),
        sa.Column("id_tag", sa.String(length=255), nullable=False),
        sa.Column("start_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_value", sa.String(length=255), nullable=False),
        sa.Column("stop_timestamp", sa.DateTime(timezone=True)),
        sa.Column("stop_value", sa.String(length=255)),
        sa.PrimaryKeyConstraint("transaction_pk", name="pk_transaction"),
        sa.ForeignKeyConstraint(
            ["connector_pk"],
            ["connector.connector_pk"],
            name="fk_transaction_connector_pk_connector",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["id_tag"],
            ["ocpp_tag.id_tag"],
            name="fk_transaction_id_tag_ocpp_tag",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "(stop_timestamp IS NULL AND stop_value IS NULL)"
            " OR (stop_timestamp IS NOT NULL AND stop_value IS NOT NULL)",
            name="ck_transaction_stop_fields_paired",
        ),
    )
    op.create_index("ix_transaction_connector_pk", "transaction", ["connector_pk"])
    op.create_index("ix_transaction_id_tag", "transaction", ["id_tag"])

    op.create_table(
        "connector_meter_value",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("connector_pk", sa.Integer(), nullable=False),
        sa.Column("transaction_pk", sa.Integer()),
        sa.Column("value_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("value", sa.String(length=255)),
        sa.Column("reading_context", sa.String(length=255)),
        sa.Column("format", sa.String(length=255)),
        sa.Column("measurand", sa.String(length=255)),
        sa.Column("location", sa.String(length=255)),
        sa.Column("unit", sa.String(length=255)),
        sa.PrimaryKeyConstraint("id", name="pk_connector_meter_value"),
        sa.ForeignKeyConstraint(
            ["connector_pk"],
            ["connector.connector_pk"],
            name="fk_connector_meter_value_connector_pk_connector",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["transaction_pk"],
            ["transaction.transaction_pk"],
            name="fk_connector_meter_value_transaction_pk_transaction",
            ondelete="SET NULL",
        ),
    )
    op.create_index(
        "ix_connector_meter_value_connector_pk_value_timestamp",
        "connector_meter_value",
        ["connector_pk", "value_timestamp"],
    )
    op.create_index(
        "ix_connector_meter_value_transaction_pk",
        "connector_meter_value",
        ["transaction_pk"],
    )


def downgrade() -> None:  # noqa: D401
    """Drop the reporting schema."""

    op.drop_index("ix_connector_meter_value_transaction_pk", table_name="connector_meter_value")
    op.drop_index(
        "ix_connector_meter_value_connector_pk_value_timestamp", table_name="connector_meter_value"
    )
    op.drop_table("connector_meter_value")

    op.drop_index("ix_transaction_id_tag", table_name="transaction")
    op.drop_index("ix_transaction_connector_pk", table_name="transaction")
    op.drop_table("transaction")

    op.drop_table("connector")
    op.drop_table("ocpp_tag")
    op.drop_table("charge_box")
