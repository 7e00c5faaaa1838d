from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from wanderlust.core.utils import as_utc


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC timestamps on every backend.

    SQLite drops tzinfo on the way in and out; normalising both directions keeps
    ``updated_at`` equality checks exact.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return as_utc(value)
