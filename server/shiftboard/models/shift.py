"""
Shift Model

A shift is either a scheduled unit of work or a day-off marker on one
calendar date at one location. An open shift has no assigned worker.
"""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, Date, Time, ForeignKey, Boolean, Text, Integer, Enum, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.core.dates import shift_duration_minutes
from shiftboard.services.timezone_service import utcnow


class ShiftStatus(str, enum.Enum):
    """Shift status options."""
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DayOffType(str, enum.Enum):
    """Reason category of a day-off record."""
    DAY_OFF = "DAY_OFF"
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    HOLIDAY = "HOLIDAY"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    OTHER = "OTHER"


class Shift(Base):
    """Shift or day-off record for one location on one date."""
    __tablename__ = "shifts"
    deletion_policy = DeletionPolicy.HARD

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)  # Null = open/unclaimed
    position_id = Column(Uuid, ForeignKey("positions.id"), nullable=True, index=True)

    # Calendar day and times of day, stored independently
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    break_minutes = Column(Integer, nullable=False, default=0)

    status = Column(Enum(ShiftStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=ShiftStatus.SCHEDULED)
    notes = Column(Text, nullable=True)
    is_open_shift = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)

    # Day-off records
    is_day_off = Column(Boolean, nullable=False, default=False)
    day_off_type = Column(Enum(DayOffType, values_callable=lambda x: [e.value for e in x]), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=True)

    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    location = relationship("Location")
    user = relationship("User", foreign_keys=[user_id])
    position = relationship("Position")

    __table_args__ = (
        CheckConstraint(
            "NOT is_day_off OR (position_id IS NULL AND start_time IS NULL AND end_time IS NULL "
            "AND break_minutes = 0 AND NOT is_open_shift)",
            name="ck_shifts_day_off_fields",
        ),
        CheckConstraint(
            "NOT is_open_shift OR user_id IS NULL",
            name="ck_shifts_open_shift_unassigned",
        ),
        Index("idx_shifts_location_date", "location_id", "date"),
        Index("idx_shifts_user_date", "user_id", "date"),
        Index("idx_shifts_location_date_published", "location_id", "date", "is_published"),
    )

    @property
    def duration_minutes(self) -> int:
        """Paid minutes, crossing midnight when end is not after start."""
        return shift_duration_minutes(self.start_time, self.end_time, self.break_minutes)
