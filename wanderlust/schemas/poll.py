from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from wanderlust.core.enums import PollStatus, PollType
from wanderlust.core.utils import as_utc, utcnow


class PollOptionInput(BaseModel):
    label: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    display_order: int | None = Field(default=None, ge=0)


class PollCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    type: PollType = PollType.CUSTOM
    allow_multiple: bool = False
    max_votes: int | None = Field(default=None, gt=0)
    closes_at: datetime | None = None
    options: List[PollOptionInput] = Field(min_length=2, max_length=10)

    @model_validator(mode="after")
    def check_settings(self) -> "PollCreate":
        if self.max_votes is not None and not self.allow_multiple:
            raise ValueError("max_votes can only be set when allow_multiple is true")
        if self.closes_at and as_utc(self.closes_at) <= utcnow():
            raise ValueError("closes_at must be in the future")
        return self


class PollUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    closes_at: datetime | None = None
    status: PollStatus | None = None
    # Optimistic locking: the updated_at the client last fetched
    client_updated_at: datetime | None = None


class PollOptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str
    description: str | None = None
    display_order: int
    vote_count: int = 0
    has_voted: bool = False


class PollOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: int
    created_by: int
    title: str
    description: str | None = None
    type: PollType
    status: PollStatus
    allow_multiple: bool
    max_votes: int | None = None
    closes_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    total_votes: int = 0
    options: List[PollOptionOut]


class VoteCreate(BaseModel):
    option_id: int


class VoteChange(BaseModel):
    old_option_id: int
    new_option_id: int


class VoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    poll_id: int
    option_id: int
    user_id: int
    created_at: datetime


class PollResultsOut(BaseModel):
    poll_id: int
    status: PollStatus
    total_votes: int
    options: List[PollOptionOut]
