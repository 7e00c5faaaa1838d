from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from wanderlust.core.enums import ItineraryItemType
from wanderlust.core.utils import as_utc
from wanderlust.schemas.common import Money


class ItineraryItemCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: ItineraryItemType
    start_time: datetime
    end_time: datetime | None = None
    location: str | None = Field(default=None, max_length=500)
    cost: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    url: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def end_after_start(self) -> "ItineraryItemCreate":
        if self.end_time and as_utc(self.end_time) <= as_utc(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class ItineraryItemUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: ItineraryItemType | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = Field(default=None, max_length=500)
    cost: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    url: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=2000)
    # Optimistic locking: the updated_at the client last fetched
    client_updated_at: datetime | None = None


class ItineraryItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: int
    created_by: int
    title: str
    description: str | None = None
    type: ItineraryItemType
    start_time: datetime
    end_time: datetime | None = None
    location: str | None = None
    cost: Money | None = None
    url: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
