"""initial_schema

Create the DonorLink schema:
- Donors (one per subscriber email, lifecycle status)
- Prospects (leads recorded before they pay)
- Invites (portal invite codes; revoked_at IS NULL means active)
- Invite links (share links owned by exactly one donor or prospect)
- Payments (one row per provider transaction)
- Events (append-only audit log)
- Settings (admin-editable provider configuration, one row per key)
- Sessions (server-stored admin sessions)

Revision ID: 3c1f7a9d2e41
Revises:
Create Date: 2026-10-16 09:12:44.318205

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f7a9d2e41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=nullable,
        server_default=sa.text("NOW()") if default else None,
    )


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # DONORS table
    # ========================================================================
    op.create_table(
        "donors",
        _uuid_pk(),
        sa.Column("email", sa.String(320), nullable=False),  # Stored lowercase
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("subscription_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("last_payment_at", nullable=True, default=False),
        _timestamp("last_event_at", nullable=True, default=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'cancelled', 'suspended', 'expired')",
            name="donor_status_valid",
        ),
    )
    op.create_index("idx_donors_email", "donors", ["email"], unique=True)
    op.create_index(
        "idx_donors_subscription_id",
        "donors",
        ["subscription_id"],
        unique=True,
        postgresql_where=sa.text("subscription_id IS NOT NULL"),
    )

    # ========================================================================
    # PROSPECTS table
    # ========================================================================
    op.create_table(
        "prospects",
        _uuid_pk(),
        sa.Column("email", sa.String(320), nullable=False, server_default=""),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("converted_at", nullable=True, default=False),
        sa.Column("converted_donor_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(
            ["converted_donor_id"], ["donors.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_prospects_email", "prospects", ["email"])

    # ========================================================================
    # INVITES table
    # ========================================================================
    op.create_table(
        "invites",
        _uuid_pk(),
        sa.Column("donor_id", sa.UUID(), nullable=False),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("recipient_email", sa.String(320), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("revoked_at", nullable=True, default=False),
        sa.ForeignKeyConstraint(["donor_id"], ["donors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_invite_code"),
    )
    op.create_index(
        "idx_invites_donor_active",
        "invites",
        ["donor_id", sa.text("created_at DESC")],
        postgresql_where=sa.text("revoked_at IS NULL"),
    )

    # ========================================================================
    # INVITE_LINKS table (share links)
    # ========================================================================
    op.create_table(
        "invite_links",
        _uuid_pk(),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("session_token", sa.String(128), nullable=False),
        sa.Column("donor_id", sa.UUID(), nullable=True),
        sa.Column("prospect_id", sa.UUID(), nullable=True),
        _timestamp("created_at"),
        _timestamp("last_used_at", nullable=True, default=False),
        sa.ForeignKeyConstraint(["donor_id"], ["donors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["prospect_id"], ["prospects.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token", name="uq_invite_link_token"),
        sa.CheckConstraint(
            "num_nonnulls(donor_id, prospect_id) = 1",
            name="invite_link_single_owner",
        ),
    )
    op.create_index("idx_invite_links_donor_id", "invite_links", ["donor_id"])
    op.create_index("idx_invite_links_prospect_id", "invite_links", ["prospect_id"])

    # ========================================================================
    # PAYMENTS table
    # ========================================================================
    op.create_table(
        "payments",
        _uuid_pk(),
        sa.Column("donor_id", sa.UUID(), nullable=False),
        sa.Column("transaction_id", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(8), nullable=True),
        sa.Column("status", sa.String(50), nullable=True),
        _timestamp("occurred_at"),
        sa.ForeignKeyConstraint(["donor_id"], ["donors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_id", name="uq_payment_transaction"),
    )
    op.create_index("idx_payments_donor_id", "payments", ["donor_id"])

    # ========================================================================
    # EVENTS table (append-only)
    # ========================================================================
    op.create_table(
        "events",
        _uuid_pk(),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column(
            "payload",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _timestamp("occurred_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_events_occurred_at", "events", [sa.text("occurred_at DESC")]
    )

    # ========================================================================
    # SETTINGS table
    # ========================================================================
    op.create_table(
        "settings",
        sa.Column("group_name", sa.String(50), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", postgresql.JSONB(), nullable=True),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("group_name", "key"),
    )

    # ========================================================================
    # SESSIONS table (admin)
    # ========================================================================
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(128), nullable=False),
        sa.Column(
            "data",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_sessions_expires_at", "sessions", ["expires_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_sessions_expires_at", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("settings")
    op.drop_index("idx_events_occurred_at", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_payments_donor_id", table_name="payments")
    op.drop_table("payments")
    op.drop_index("idx_invite_links_prospect_id", table_name="invite_links")
    op.drop_index("idx_invite_links_donor_id", table_name="invite_links")
    op.drop_table("invite_links")
    op.drop_index("idx_invites_donor_active", table_name="invites")
    op.drop_table("invites")
    op.drop_index("idx_prospects_email", table_name="prospects")
    op.drop_table("prospects")
    op.drop_index("idx_donors_subscription_id", table_name="donors")
    op.drop_index("idx_donors_email", table_name="donors")
    op.drop_table("donors")
