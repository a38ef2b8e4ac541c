from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Integer, Enum, Index, Text, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


class TimesheetStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ClockStatus(str, enum.Enum):
    """Derived state of a worker's session, never stored."""
    NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"


class TimesheetSource(str, enum.Enum):
    WEB = "web"
    KIOSK = "kiosk"


class Timesheet(Base):
    __tablename__ = "timesheets"
    deletion_policy = DeletionPolicy.HARD

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False, index=True)
    shift_id = Column(Uuid, ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True, index=True)

    # Local calendar day of the clock-in at the location
    date = Column(Date, nullable=False, index=True)
    clock_in = Column(DateTime, nullable=False)
    clock_out = Column(DateTime, nullable=True)
    break_start = Column(DateTime, nullable=True)
    break_end = Column(DateTime, nullable=True)
    # Minutes of every finished break of this session
    break_minutes = Column(Integer, nullable=False, default=0)
    total_minutes = Column(Integer, nullable=True)

    status = Column(Enum(TimesheetStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TimesheetStatus.PENDING)
    source = Column(Enum(TimesheetSource, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TimesheetSource.WEB)
    notes = Column(Text, nullable=True)
    approved_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    # Scope key of the open session; cleared at clock-out. Unique so that
    # at most one open session exists per scope.
    session_key = Column(String(200), nullable=True, unique=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    location = relationship("Location")
    shift = relationship("Shift")

    __table_args__ = (
        Index("idx_timesheets_user_clock_out", "user_id", "clock_out"),
        Index("idx_timesheets_location_date", "location_id", "date"),
        Index("idx_timesheets_user_location_date", "user_id", "location_id", "date"),
    )
