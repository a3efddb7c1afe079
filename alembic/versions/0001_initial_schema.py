"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for the RSVP Event Manager:
users, roles, user_roles, events, event_venues, guests, event_guests,
guest_groups, guest_group_members, rsvps, rsvp_plus_ones,
notification_templates, notifications, notification_recipients,
audit_logs, app_settings.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CHANNELS = ("email", "sms", "whatsapp", "push")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # --- users / roles ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_password_token", sa.String(64), nullable=True, index=True),
        sa.Column("reset_password_expire", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "name",
            sa.Enum("admin", "event_manager", "event_host", "guest", "hospitality", "vendor", name="rolename"),
            nullable=False,
            unique=True,
        ),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("permissions", sa.JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("type", sa.Enum("wedding", "corporate", "birthday", "other", name="eventtype"), nullable=False, index=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column(
            "status",
            sa.Enum("draft", "published", "cancelled", "completed", name="eventstatus"),
            nullable=False,
            server_default="draft",
            index=True,
        ),
        sa.Column("is_recurring", sa.Boolean, nullable=False, server_default="0"),
        sa.Column(
            "recurrence_pattern",
            sa.Enum("daily", "weekly", "monthly", "yearly", name="recurrencepattern"),
            nullable=True,
        ),
        sa.Column("max_attendees", sa.Integer, nullable=True),
        sa.Column("is_private", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("cover_image", sa.String(500), nullable=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "event_venues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address_line1", sa.String(255), nullable=True),
        sa.Column("address_line2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("is_primary", sa.Boolean, nullable=False, server_default="0", index=True),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("contact_name", sa.String(150), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        *_timestamps(),
    )

    # --- guests ---
    op.create_table(
        "guests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, index=True),
        sa.Column("phone", sa.String(50), nullable=True, index=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column(
            "gender",
            sa.Enum("male", "female", "other", "prefer_not_to_say", name="gender"),
            nullable=True,
        ),
        sa.Column("is_vip", sa.Boolean, nullable=False, server_default="0", index=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("tags", sa.Text, nullable=False, server_default="[]"),
        sa.Column("custom_fields", sa.Text, nullable=False, server_default="{}"),
        *_timestamps(),
    )
    op.create_table(
        "event_guests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("guest_id", sa.String(36), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("invitation_sent", sa.Boolean, nullable=False, server_default="0", index=True),
        sa.Column("invitation_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "invitation_method",
            sa.Enum("email", "sms", "whatsapp", "postal", "other", name="invitationmethod"),
            nullable=True,
        ),
        sa.Column("is_confirmed", sa.Boolean, nullable=False, server_default="0", index=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("table_number", sa.String(20), nullable=True),
        sa.Column("seat_number", sa.String(20), nullable=True),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "guest_id", name="uq_event_guests_event_guest"),
    )
    op.create_table(
        "guest_groups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String(150), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_table(
        "guest_group_members",
        sa.Column("group_id", sa.String(36), sa.ForeignKey("guest_groups.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("guest_id", sa.String(36), sa.ForeignKey("guests.id", ondelete="CASCADE"), primary_key=True),
    )

    # --- rsvps ---
    op.create_table(
        "rsvps",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("guest_id", sa.String(36), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(64), nullable=False, unique=True),
        sa.Column(
            "status",
            sa.Enum("pending", "attending", "not_attending", "maybe", name="rsvpstatus"),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("response_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("number_of_guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("dietary_restrictions", sa.Text, nullable=True),
        sa.Column("special_requirements", sa.Text, nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "guest_id", name="uq_rsvps_event_guest"),
        sa.CheckConstraint("number_of_guests >= 1", name="ck_rsvps_number_of_guests"),
    )
    op.create_table(
        "rsvp_plus_ones",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("rsvp_id", sa.String(36), sa.ForeignKey("rsvps.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("dietary_restrictions", sa.Text, nullable=True),
        sa.Column("special_requirements", sa.Text, nullable=True),
        sa.Column("is_attending", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )

    # --- notifications ---
    op.create_table(
        "notification_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False, unique=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("type", sa.Enum(*CHANNELS, name="channel"), nullable=False, index=True),
        sa.Column("variables", sa.JSON, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="1", index=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True),
        sa.Column(
            "template_id",
            sa.String(36),
            sa.ForeignKey("notification_templates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("channel", sa.Enum(*CHANNELS, name="channel"), nullable=False, server_default="email"),
        sa.Column(
            "status",
            sa.Enum("draft", "scheduled", "sending", "sent", "failed", name="notificationstatus"),
            nullable=False,
            server_default="draft",
            index=True,
        ),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "notification_recipients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "notification_id",
            sa.String(36),
            sa.ForeignKey("notifications.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("guest_id", sa.String(36), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("channel", sa.Enum(*CHANNELS, name="channel"), nullable=False, index=True),
        sa.Column("recipient_address", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "sending", "sent", "delivered", "read", "failed", name="deliverystatus"),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("notification_id", "guest_id", name="uq_notification_recipients_notification_guest"),
    )

    # --- audit_logs / app_settings ---
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("action", sa.String(50), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=False, index=True),
        sa.Column("entity_id", sa.String(36), nullable=True, index=True),
        sa.Column("old_values", sa.JSON, nullable=True),
        sa.Column("new_values", sa.JSON, nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.JSON, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    op.drop_table("audit_logs")
    op.drop_table("notification_recipients")
    op.drop_table("notifications")
    op.drop_table("notification_templates")
    op.drop_table("rsvp_plus_ones")
    op.drop_table("rsvps")
    op.drop_table("guest_group_members")
    op.drop_table("guest_groups")
    op.drop_table("event_guests")
    op.drop_table("guests")
    op.drop_table("event_venues")
    op.drop_table("events")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
