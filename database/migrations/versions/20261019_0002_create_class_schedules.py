"""create class schedules

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


schedule_status = sa.Enum(
    "planned",
    "open_enrollment",
    "active",
    "concluded",
    "cancelled",
    name="schedule_status",
)


def upgrade() -> None:
    op.create_table(
        "class_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("room_id", sa.String(length=36), sa.ForeignKey("rooms.id"), nullable=True),
        sa.Column("weekday_mask", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", schedule_status, nullable=False, server_default="planned"),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("online_link", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.String(length=36), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_time < end_time", name="ck_class_schedules_window"),
        sa.CheckConstraint("end_date IS NULL OR start_date <= end_date", name="ck_class_schedules_dates"),
        sa.CheckConstraint("weekday_mask > 0 AND weekday_mask < 128", name="ck_class_schedules_weekdays"),
    )
    op.create_index("ix_class_schedules_teacher_id", "class_schedules", ["teacher_id"], unique=False)
    op.create_index("ix_class_schedules_room_id", "class_schedules", ["room_id"], unique=False)
    op.create_index("ix_class_schedules_status", "class_schedules", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_class_schedules_status", table_name="class_schedules")
    op.drop_index("ix_class_schedules_room_id", table_name="class_schedules")
    op.drop_index("ix_class_schedules_teacher_id", table_name="class_schedules")
    op.drop_table("class_schedules")
    schedule_status.drop(op.get_bind(), checkfirst=True)
