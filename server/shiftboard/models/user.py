from sqlalchemy import Column, String, ForeignKey, Enum, DateTime, Boolean, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from shiftboard.core.database import Base, DeletionPolicy
from shiftboard.services.timezone_service import utcnow


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SUPERVISOR = "SUPERVISOR"
    EMPLOYEE = "EMPLOYEE"


class User(Base):
    __tablename__ = "users"
    deletion_policy = DeletionPolicy.SOFT

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("companies.id"), nullable=False, index=True)
    role = Column(Enum(UserRole, values_callable=lambda x: [e.value for e in x]), nullable=False, default=UserRole.EMPLOYEE)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, index=True)
    # Sees every location of the company regardless of role
    can_view_all = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    # Optional kiosk PIN, never leaves the service
    pin_hash = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user_locations = relationship("UserLocation", back_populates="user", cascade="all, delete-orphan")
    user_positions = relationship("UserPosition", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("company_id", "email", name="uq_user_company_email"),
        Index("idx_users_company_active", "company_id", "is_active"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserLocation(Base):
    __tablename__ = "user_locations"
    deletion_policy = DeletionPolicy.HARD

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Uuid, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="user_locations")
    location = relationship("Location", back_populates="user_locations")

    __table_args__ = (
        UniqueConstraint("user_id", "location_id", name="uq_user_location"),
    )


class UserPosition(Base):
    __tablename__ = "user_positions"
    deletion_policy = DeletionPolicy.HARD

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position_id = Column(Uuid, ForeignKey("positions.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="user_positions")
    position = relationship("Position")

    __table_args__ = (
        UniqueConstraint("user_id", "position_id", name="uq_user_position"),
    )
