from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Enum, Index, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


class TimeOffType(str, enum.Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


class TimeOffStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"
    # Withdrawn requests stay as CANCELLED
    deletion_policy = DeletionPolicy.SOFT

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(TimeOffType, values_callable=lambda x: [e.value for e in x]), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(1000), nullable=True)
    status = Column(Enum(TimeOffStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TimeOffStatus.PENDING)
    approved_by_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_reason = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])

    __table_args__ = (
        Index("idx_time_off_requests_user_status", "user_id", "status"),
        Index("idx_time_off_requests_status_created", "status", "created_at"),
    )
