"""SQLAlchemy ORM models for advisors, clients, cases and case activity."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean, CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text,
    UniqueConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casedesk.db.base import Base
from casedesk.db.enums import ActivityType, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# People
# =============================================================================

class User(Base):
    """
    Advisor or admin account.

    Identity is established upstream; the API only receives the user id.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=Role.ADVISOR.value, nullable=False)
    # Inactive users keep their history but drop out of advisor pickers
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    # Relationships
    cases: Mapped[list["Case"]] = relationship(back_populates="advisor")


class Client(Base):
    """A client of the practice; may hold several cases."""
    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Joint applicants
    name2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name3: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    cases: Mapped[list["Case"]] = relationship(back_populates="client")


# =============================================================================
# Cases
# =============================================================================

class Case(Base):
    """
    One client application moving through the advisory pipeline.

    status is a free-form stage name; the configured stage list is the
    board's column order, not a closed enum.
    deadline is a calendar date with no time-of-day semantics.
    Deleting a case deletes its activity log.
    """
    __tablename__ = "cases"
    __table_args__ = (
        UniqueConstraint("case_number", name="uq_case_number"),
        CheckConstraint("value IS NULL OR value >= 0", name="ck_case_value_non_negative"),
        Index("idx_cases_status", "status"),
        Index("idx_cases_updated", "updated_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    broker_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    task_owner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id"),
        nullable=False
    )
    advisor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    client: Mapped["Client"] = relationship(back_populates="cases")
    advisor: Mapped["User"] = relationship(back_populates="cases")
    activities: Mapped[list["CaseActivity"]] = relationship(
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="CaseActivity.created_at.desc()",
    )


class CaseActivity(Base):
    """
    Append-only case log: user comments and system-generated change entries.

    Entries are never edited; they go away only with their case.
    """
    __tablename__ = "case_activities"
    __table_args__ = (
        Index("idx_case_activity_case_time", "case_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False
    )
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    activity_type: Mapped[str] = mapped_column(
        String(20),
        default=ActivityType.COMMENT.value,
        nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    # Relationships
    case: Mapped["Case"] = relationship(back_populates="activities")
    author: Mapped["User | None"] = relationship(foreign_keys=[author_id])
