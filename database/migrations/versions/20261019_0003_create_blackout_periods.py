"""create blackout periods

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


blackout_kind = sa.Enum("holiday", "blackout", "event", name="blackout_kind")
blackout_scope = sa.Enum("global", "room", "teacher", name="blackout_scope")


def upgrade() -> None:
    op.create_table(
        "blackout_periods",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("kind", blackout_kind, nullable=False, server_default="blackout"),
        sa.Column("scope", blackout_scope, nullable=False, server_default="global"),
        sa.Column("scope_ref_id", sa.String(length=36), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=False, server_default="#ef4444"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_blackout_periods_start_date", "blackout_periods", ["start_date"], unique=False)
    op.create_index("ix_blackout_periods_end_date", "blackout_periods", ["end_date"], unique=False)
    op.create_index("ix_blackout_periods_scope_ref_id", "blackout_periods", ["scope_ref_id"], unique=False)
    op.create_index("ix_blackout_periods_active", "blackout_periods", ["active"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_blackout_periods_active", table_name="blackout_periods")
    op.drop_index("ix_blackout_periods_scope_ref_id", table_name="blackout_periods")
    op.drop_index("ix_blackout_periods_end_date", table_name="blackout_periods")
    op.drop_index("ix_blackout_periods_start_date", table_name="blackout_periods")
    op.drop_table("blackout_periods")
    blackout_scope.drop(op.get_bind(), checkfirst=True)
    blackout_kind.drop(op.get_bind(), checkfirst=True)
