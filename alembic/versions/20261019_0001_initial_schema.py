"""Initial schema: users, api keys, venues, events, history, notifications."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("coordinator", "hod", "dean", "principal", "admin")
EVENT_STATUSES = (
    "pending_hod",
    "returned_to_coordinator",
    "resubmitted",
    "pending_dean",
    "returned_to_hod",
    "pending_principal",
    "returned_to_dean",
    "approved",
    "rejected",
    "cancelled",
)
EVENT_ACTIONS = ("create", "approve", "reject", "return", "resubmit", "cancel", "revoke")


def _role_enum() -> sa.Enum:
    return sa.Enum(*USER_ROLES, name="user_role", native_enum=False)


def _status_enum() -> sa.Enum:
    return sa.Enum(*EVENT_STATUSES, name="event_status", native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=100), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("role", _role_enum(), nullable=False),
        sa.Column("department", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("prefix", sa.String(length=32), nullable=False),
        sa.Column("key_hash", sa.String(length=128), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_api_keys_prefix", "api_keys", ["prefix"])
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_booked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_venue_positive_capacity"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("department", sa.String(length=120), nullable=True),
        sa.Column("expected_audience", sa.Integer(), nullable=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=True),
        sa.Column("other_venue", sa.String(length=255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("submitted_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", _status_enum(), nullable=False),
        sa.Column("hod_approval_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dean_approval_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("principal_approval_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name="ck_event_time_window"),
        sa.CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_event_date_range"),
        sa.CheckConstraint(
            "(venue_id IS NOT NULL AND other_venue IS NULL) "
            "OR (venue_id IS NULL AND other_venue IS NOT NULL)",
            name="ck_event_single_venue_ref",
        ),
    )
    op.create_index("ix_events_status", "events", ["status"])
    op.create_index("ix_events_venue_dates", "events", ["venue_id", "start_date", "end_date"])
    op.create_index("ix_events_submitted_by", "events", ["submitted_by"])

    op.create_table(
        "event_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("old_status", _status_enum(), nullable=True),
        sa.Column("new_status", _status_enum(), nullable=False),
        sa.Column(
            "action",
            sa.Enum(*EVENT_ACTIONS, name="event_action", native_enum=False),
            nullable=False,
        ),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("actor_role", _role_enum(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("summary", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_event_history_event_id", "event_history", ["event_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=True),
        sa.Column("message", sa.String(length=500), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_user_unread", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_unread", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_event_history_event_id", table_name="event_history")
    op.drop_table("event_history")
    op.drop_index("ix_events_submitted_by", table_name="events")
    op.drop_index("ix_events_venue_dates", table_name="events")
    op.drop_index("ix_events_status", table_name="events")
    op.drop_table("events")
    op.drop_table("venues")
    op.drop_table("audit_logs")
    op.drop_index("ix_api_keys_user_id", table_name="api_keys")
    op.drop_index("ix_api_keys_prefix", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
