from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from wanderlust.core.enums import PollStatus, PollType
from wanderlust.core.utils import utcnow
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    type = Column(Enum(PollType, name="poll_type"), nullable=False, default=PollType.CUSTOM)
    status = Column(Enum(PollStatus, name="poll_status"), nullable=False, default=PollStatus.ACTIVE)
    allow_multiple = Column(Boolean, nullable=False, default=False)
    max_votes = Column(Integer, nullable=True)
    closes_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.display_order",
    )


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    poll = relationship("Poll", back_populates="options")
