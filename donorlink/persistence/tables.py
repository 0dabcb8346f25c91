"""SQLAlchemy table definitions for DonorLink.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

metadata = MetaData()

# ============================================================================
# DONORS TABLE
# ============================================================================
donors_table = Table(
    "donors",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("email", String(320), nullable=False),  # Stored lowercase
    Column("name", String(255), nullable=False, server_default=""),
    Column("password_hash", Text, nullable=True),
    Column("subscription_id", String(255), nullable=True),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_payment_at", TIMESTAMP(timezone=True), nullable=True),
    Column("last_event_at", TIMESTAMP(timezone=True), nullable=True),
    CheckConstraint(
        "status IN ('pending', 'active', 'cancelled', 'suspended', 'expired')",
        name="donor_status_valid",
    ),
)

Index("idx_donors_email", donors_table.c.email, unique=True)
Index(
    "idx_donors_subscription_id",
    donors_table.c.subscription_id,
    unique=True,
    postgresql_where=text("subscription_id IS NOT NULL"),
)

# ============================================================================
# PROSPECTS TABLE
# ============================================================================
prospects_table = Table(
    "prospects",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("email", String(320), nullable=False, server_default=""),
    Column("name", String(255), nullable=False, server_default=""),
    Column("note", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("converted_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "converted_donor_id",
        UUID,
        ForeignKey("donors.id", ondelete="SET NULL"),
        nullable=True,
    ),
)

Index("idx_prospects_email", prospects_table.c.email)

# ============================================================================
# INVITES TABLE (revoked_at IS NULL means active)
# ============================================================================
invites_table = Table(
    "invites",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "donor_id", UUID, ForeignKey("donors.id", ondelete="CASCADE"), nullable=False
    ),
    Column("code", String(64), nullable=False),
    Column("url", Text, nullable=False),
    Column("recipient_email", String(320), nullable=False),
    Column("note", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("revoked_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("code", name="uq_invite_code"),
)

Index(
    "idx_invites_donor_active",
    invites_table.c.donor_id,
    invites_table.c.created_at.desc(),
    postgresql_where=text("revoked_at IS NULL"),
)

# ============================================================================
# INVITE LINKS TABLE (share links)
# ============================================================================
invite_links_table = Table(
    "invite_links",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("token", String(128), nullable=False),
    Column("session_token", String(128), nullable=False),
    Column(
        "donor_id", UUID, ForeignKey("donors.id", ondelete="CASCADE"), nullable=True
    ),
    Column(
        "prospect_id",
        UUID,
        ForeignKey("prospects.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_used_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("token", name="uq_invite_link_token"),
    CheckConstraint(
        "num_nonnulls(donor_id, prospect_id) = 1",
        name="invite_link_single_owner",
    ),
)

Index("idx_invite_links_donor_id", invite_links_table.c.donor_id)
Index("idx_invite_links_prospect_id", invite_links_table.c.prospect_id)

# ============================================================================
# PAYMENTS TABLE
# ============================================================================
payments_table = Table(
    "payments",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "donor_id", UUID, ForeignKey("donors.id", ondelete="CASCADE"), nullable=False
    ),
    Column("transaction_id", String(255), nullable=False),
    Column("amount", Numeric(12, 2), nullable=True),
    Column("currency", String(8), nullable=True),
    Column("status", String(50), nullable=True),
    Column(
        "occurred_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("transaction_id", name="uq_payment_transaction"),
)

Index("idx_payments_donor_id", payments_table.c.donor_id)

# ============================================================================
# EVENTS TABLE (append-only audit log)
# ============================================================================
events_table = Table(
    "events",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("event_type", String(100), nullable=False),
    Column("payload", JSONB, nullable=False, server_default="{}"),
    Column(
        "occurred_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_events_occurred_at", events_table.c.occurred_at.desc())

# ============================================================================
# SETTINGS TABLE (one row per group/key)
# ============================================================================
settings_table = Table(
    "settings",
    metadata,
    Column("group_name", String(50), primary_key=True),
    Column("key", String(100), primary_key=True),
    Column("value", JSONB, nullable=True),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

# ============================================================================
# SESSIONS TABLE (admin and donor sessions)
# ============================================================================
sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("data", JSONB, nullable=False, server_default="{}"),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
)

Index("idx_sessions_expires_at", sessions_table.c.expires_at)
