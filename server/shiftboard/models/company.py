from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.orm import relationship
import uuid
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


class Company(Base):
    __tablename__ = "companies"
    deletion_policy = DeletionPolicy.SOFT

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    currency = Column(String(3), nullable=False, default="USD")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    locations = relationship("Location", back_populates="company")
