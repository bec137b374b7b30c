"""001 – Initial schema: profiles, sessions, holidays, attendance, leave, work summary, audit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-01 09:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("user_role", ["employee", "admin"]),
    ("leave_status", ["pending", "approved", "rejected", "cancelled"]),
    ("leave_kind", ["sick", "casual"]),
    ("half_day_period", ["morning", "evening"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE profiles (
            id                    UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            email                 VARCHAR(255) NOT NULL UNIQUE,
            name                  VARCHAR(200) NOT NULL,
            password_hash         VARCHAR(255) NOT NULL,
            role                  user_role NOT NULL DEFAULT 'employee',
            enrolled_on           DATE NOT NULL DEFAULT CURRENT_DATE,
            sick_leave_balance    NUMERIC(5,1) NOT NULL DEFAULT 7,
            casual_leave_balance  NUMERIC(5,1) NOT NULL DEFAULT 14,
            is_active             BOOLEAN NOT NULL DEFAULT TRUE,
            created_at            TIMESTAMPTZ DEFAULT NOW(),
            updated_at            TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_profiles_role_name ON profiles(role, name)")

    # ── 2. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            profile_id  UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            token_hash  VARCHAR(128) NOT NULL,
            ip_address  VARCHAR(64),
            user_agent  TEXT,
            expires_at  TIMESTAMPTZ NOT NULL,
            is_revoked  BOOLEAN NOT NULL DEFAULT FALSE,
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_token_hash ON user_sessions(token_hash)")
    op.execute("CREATE INDEX ix_user_sessions_profile    ON user_sessions(profile_id)")

    # ── 3. holidays ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE holidays (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            uid         VARCHAR(255) NOT NULL UNIQUE,
            summary     VARCHAR(255) NOT NULL,
            categories  JSONB NOT NULL DEFAULT '[]'::jsonb,
            start_date  DATE NOT NULL,
            end_date    DATE,
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_holidays_start_date ON holidays(start_date)")

    # ── 4. attendance_records ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            profile_id        UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            date              DATE NOT NULL,
            check_in          TIMESTAMPTZ,
            check_out         TIMESTAMPTZ,
            location          VARCHAR(255),
            auto_checked_out  BOOLEAN NOT NULL DEFAULT FALSE,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            updated_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_profile_date UNIQUE (profile_id, date)
        )
    """)
    op.execute("CREATE INDEX ix_attendance_records_date ON attendance_records(date)")

    # ── 5. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            profile_id        UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            from_date         DATE NOT NULL,
            to_date           DATE NOT NULL,
            reason            TEXT NOT NULL,
            leave_type        leave_kind NOT NULL,
            is_half_day       BOOLEAN NOT NULL DEFAULT FALSE,
            half_day_period   half_day_period,
            days              NUMERIC(5,1) NOT NULL,
            status            leave_status NOT NULL DEFAULT 'pending',
            reviewed_by       UUID REFERENCES profiles(id),
            reviewed_at       TIMESTAMPTZ,
            reviewer_remarks  TEXT,
            cancelled_at      TIMESTAMPTZ,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            updated_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_requests_range CHECK (to_date >= from_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_requests_profile_status ON leave_requests(profile_id, status)"
    )
    op.execute("CREATE INDEX ix_leave_requests_dates ON leave_requests(from_date, to_date)")

    # ── 6. work_summary_entries ───────────────────────────────────────────
    op.execute("""
        CREATE TABLE work_summary_entries (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            profile_id     UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            month          VARCHAR(7) NOT NULL,
            work           VARCHAR(255) NOT NULL,
            handled_tasks  INTEGER NOT NULL DEFAULT 0,
            created_at     TIMESTAMPTZ DEFAULT NOW(),
            updated_at     TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_work_summary_handled_tasks CHECK (handled_tasks >= 0)
        )
    """)
    op.execute(
        "CREATE INDEX ix_work_summary_profile_month ON work_summary_entries(profile_id, month)"
    )

    # ── 7. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID REFERENCES profiles(id),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "work_summary_entries",
        "leave_requests",
        "attendance_records",
        "holidays",
        "user_sessions",
        "profiles",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
