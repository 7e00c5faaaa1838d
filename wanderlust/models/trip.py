from sqlalchemy import Column, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from wanderlust.core.enums import TripRole
from wanderlust.core.utils import utcnow
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    members = relationship("TripMember", back_populates="trip", cascade="all, delete")


class TripMember(Base):
    __tablename__ = "trip_members"
    __table_args__ = (UniqueConstraint("trip_id", "user_id", name="uq_trip_member"),)

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    role = Column(Enum(TripRole, name="trip_role"), nullable=False, default=TripRole.MEMBER)
    joined_at = Column(UTCDateTime, nullable=False, default=utcnow)

    trip = relationship("Trip", back_populates="members")
