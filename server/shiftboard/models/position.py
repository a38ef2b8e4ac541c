from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Numeric, Uuid
import uuid
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


class Position(Base):
    __tablename__ = "positions"
    deletion_policy = DeletionPolicy.SOFT

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    color = Column(String(7), nullable=False, default="#3B82F6")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
