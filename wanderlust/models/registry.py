# Importing this module registers every table on Base.metadata.
from wanderlust.models.expense import Expense
from wanderlust.models.expense_split import ExpenseSplit
from wanderlust.models.itinerary_item import ItineraryItem
from wanderlust.models.poll import Poll, PollOption
from wanderlust.models.trip import Trip, TripMember
from wanderlust.models.user import User
from wanderlust.models.vote import Vote

__all__ = [
    "Expense",
    "ExpenseSplit",
    "ItineraryItem",
    "Poll",
    "PollOption",
    "Trip",
    "TripMember",
    "User",
    "Vote",
]
