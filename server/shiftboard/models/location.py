from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Index, Uuid
from sqlalchemy.orm import relationship
import secrets
import uuid
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


def generate_kiosk_token() -> str:
    return secrets.token_urlsafe(24)


class Location(Base):
    __tablename__ = "locations"
    deletion_policy = DeletionPolicy.SOFT

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    timezone = Column(String(64), nullable=True)  # Falls back to the company timezone
    # At most one per company, kept by location_service.set_headquarters
    is_headquarters = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    kiosk_token = Column(String(64), nullable=False, unique=True, default=generate_kiosk_token)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    company = relationship("Company", back_populates="locations")
    user_locations = relationship("UserLocation", back_populates="location")

    __table_args__ = (
        Index("idx_locations_company_active", "company_id", "is_active"),
    )
