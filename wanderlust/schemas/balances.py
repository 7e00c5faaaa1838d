from typing import List

from pydantic import BaseModel

from wanderlust.schemas.common import Money


class BalanceOut(BaseModel):
    user_id: int
    user_name: str | None = None
    total_paid: Money
    total_owed: Money
    balance: Money
    is_settled: bool


class SettlementOut(BaseModel):
    from_id: int
    from_name: str | None = None
    to_id: int
    to_name: str | None = None
    amount: Money


class SettlementSummary(BaseModel):
    total_transactions: int
    total_amount: Money


class TripSettlementsOut(BaseModel):
    settlements: List[SettlementOut]
    summary: SettlementSummary
