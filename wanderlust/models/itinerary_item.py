from sqlalchemy import Column, Enum, ForeignKey, Integer, Numeric, String, Text

from wanderlust.core.enums import ItineraryItemType
from wanderlust.core.utils import utcnow
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class ItineraryItem(Base):
    __tablename__ = "itinerary_items"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(Enum(ItineraryItemType, name="itinerary_item_type"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=True)
    location = Column(String(500), nullable=True)
    cost = Column(Numeric(10, 2), nullable=True)
    url = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
