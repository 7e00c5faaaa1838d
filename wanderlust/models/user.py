from sqlalchemy import Column, Integer, String

from wanderlust.core.utils import utcnow
from wanderlust.db.session import Base
from wanderlust.db.types import UTCDateTime


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
