import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from agenda.db.base import Base
from agenda.services.blackout import BlackoutKind, BlackoutScopeKind


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class BlackoutPeriodRecord(Base):
    __tablename__ = "blackout_periods"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, index=True, nullable=True)
    kind: Mapped[BlackoutKind] = mapped_column(
        SAEnum(BlackoutKind, name="blackout_kind", values_callable=_enum_values),
        nullable=False,
        default=BlackoutKind.blackout,
    )
    scope: Mapped[BlackoutScopeKind] = mapped_column(
        SAEnum(BlackoutScopeKind, name="blackout_scope", values_callable=_enum_values),
        nullable=False,
        default=BlackoutScopeKind.global_,
    )
    scope_ref_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#ef4444")
    active: Mapped[bool] = mapped_column(Boolean, index=True, nullable=False, default=True)
    created_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
