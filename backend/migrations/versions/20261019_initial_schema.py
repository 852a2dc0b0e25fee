"""Initial schema: organizations, stations, menu, play sessions, segments, tab, customers

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("discount_threshold_seconds", sa.Integer(), nullable=False, server_default=sa.text("72000")),
        sa.Column("discount_rate_bps", sa.Integer(), nullable=False, server_default=sa.text("2000")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("organizations", schema=None) as batch_op:
        batch_op.create_index("ix_organizations_code", ["code"], unique=True)
        batch_op.create_index("ix_organizations_is_active", ["is_active"], unique=False)

    op.create_table(
        "stations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("station_type", sa.String(32), nullable=False),
        sa.Column("rate_solo_hourly_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rate_group_hourly_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "name", name="uq_stations_org_name"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("stations", schema=None) as batch_op:
        batch_op.create_index("ix_stations_org_id", ["org_id"], unique=False)
        batch_op.create_index("ix_stations_org_sort", ["org_id", "sort_order"], unique=False)

    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("stock_qty", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("menu_items", schema=None) as batch_op:
        batch_op.create_index("ix_menu_items_org_id", ["org_id"], unique=False)
        batch_op.create_index("ix_menu_items_org_active", ["org_id", "is_active"], unique=False)

    op.create_table(
        "play_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("station_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_paused_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pricing_tier", sa.String(16), nullable=False, server_default="solo"),
        sa.Column("rate_hourly_snapshot_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_amount_cents", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["station_id"], ["stations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("play_sessions", schema=None) as batch_op:
        batch_op.create_index("ix_play_sessions_org_id", ["org_id"], unique=False)
        batch_op.create_index("ix_play_sessions_station_id", ["station_id"], unique=False)
        batch_op.create_index("ix_play_sessions_org_status", ["org_id", "status"], unique=False)

    # At most one non-closed session per station
    op.create_index(
        "uq_play_sessions_station_open",
        "play_sessions",
        ["station_id"],
        unique=True,
        sqlite_where=sa.text("status != 'closed'"),
        postgresql_where=sa.text("status != 'closed'"),
    )

    op.create_table(
        "session_time_segments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("station_id", sa.Integer(), nullable=False),
        sa.Column("station_name_snapshot", sa.String(120), nullable=False),
        sa.Column("station_type_snapshot", sa.String(32), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paused_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("effective_seconds", sa.Integer(), nullable=False),
        sa.Column("pricing_tier", sa.String(16), nullable=False),
        sa.Column("rate_solo_hourly_cents", sa.Integer(), nullable=False),
        sa.Column("rate_group_hourly_cents", sa.Integer(), nullable=False),
        sa.Column("rate_hourly_applied_cents", sa.Integer(), nullable=False),
        sa.Column("time_amount_cents", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["session_id"], ["play_sessions.id"]),
        sa.ForeignKeyConstraint(["station_id"], ["stations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "sequence", name="uq_session_segments_sequence"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("session_time_segments", schema=None) as batch_op:
        batch_op.create_index("ix_session_time_segments_session_id", ["session_id"], unique=False)
        batch_op.create_index("ix_session_time_segments_station_id", ["station_id"], unique=False)

    op.create_table(
        "session_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("menu_item_id", sa.Integer(), nullable=True),
        sa.Column("name_snapshot", sa.String(255), nullable=False),
        sa.Column("price_cents_snapshot", sa.Integer(), nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["session_id"], ["play_sessions.id"]),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("session_items", schema=None) as batch_op:
        batch_op.create_index("ix_session_items_session_id", ["session_id"], unique=False)
        batch_op.create_index("ix_session_items_menu_item_id", ["menu_item_id"], unique=False)
        batch_op.create_index("ix_session_items_session_menu", ["session_id", "menu_item_id"], unique=False)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("total_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_discount_available", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "phone_number", name="uq_customers_org_phone"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("customers", schema=None) as batch_op:
        batch_op.create_index("ix_customers_org_id", ["org_id"], unique=False)


def downgrade():
    op.drop_table("customers")
    op.drop_table("session_items")
    op.drop_table("session_time_segments")
    op.drop_index("uq_play_sessions_station_open", table_name="play_sessions")
    op.drop_table("play_sessions")
    op.drop_table("menu_items")
    op.drop_table("stations")
    op.drop_table("organizations")
