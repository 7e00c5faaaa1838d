from enum import Enum


class SplitType(str, Enum):
    EQUAL = "EQUAL"
    CUSTOM = "CUSTOM"
    PERCENTAGE = "PERCENTAGE"


class ExpenseCategory(str, Enum):
    ACCOMMODATION = "ACCOMMODATION"
    TRANSPORT = "TRANSPORT"
    FOOD = "FOOD"
    ACTIVITIES = "ACTIVITIES"
    SHOPPING = "SHOPPING"
    OTHER = "OTHER"


class TripRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class ItineraryItemType(str, Enum):
    ACCOMMODATION = "ACCOMMODATION"
    TRANSPORT = "TRANSPORT"
    ACTIVITY = "ACTIVITY"
    MEAL = "MEAL"
    CUSTOM = "CUSTOM"


class PollType(str, Enum):
    PLACE = "PLACE"
    ACTIVITY = "ACTIVITY"
    DATE = "DATE"
    CUSTOM = "CUSTOM"


class PollStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    ARCHIVED = "ARCHIVED"
