"""
Expense split engine.

Pure functions over Decimal amounts: validate a split request, turn it into
per-member shares, aggregate shares into balances and propose settlement
transfers. Nothing here touches the database.

Residual cents:
    EQUAL       every share is rounded down to the cent and the leftover
                cents go to the first participant in input order.
    PERCENTAGE  every share is rounded down to the cent and the leftover
                cents go to the participant with the largest percentage, the
                earliest one on a tie.
"""

from collections import defaultdict, deque
from decimal import Decimal
from typing import Callable, Iterable, List, NamedTuple, Sequence, Tuple

from pydantic import BaseModel, computed_field

from wanderlust.core.enums import SplitType
from wanderlust.core.errors import FieldError, SplitValidationError
from wanderlust.core.utils import (
    CENTS,
    HUNDRED,
    floor_cents,
    has_cent_precision,
    qround,
    to_decimal,
)

PARTICIPANT_FIELDS = {
    SplitType.EQUAL: "split_with",
    SplitType.CUSTOM: "custom_splits",
    SplitType.PERCENTAGE: "percentage_splits",
}

VALUE_FIELDS = {
    SplitType.CUSTOM: "amount",
    SplitType.PERCENTAGE: "percentage",
}


class SplitShare(BaseModel):
    user_id: int
    amount: Decimal


class Balance(BaseModel):
    user_id: int
    total_paid: Decimal
    total_owed: Decimal
    balance: Decimal

    @computed_field
    @property
    def is_settled(self) -> bool:
        return abs(self.balance) < CENTS


class SettlementTransfer(BaseModel):
    from_user_id: int
    to_user_id: int
    amount: Decimal


class SplitRequest(NamedTuple):
    amount: Decimal
    split_type: SplitType
    # (user_id, value) pairs; value is None for EQUAL
    entries: List[Tuple[int, Decimal | None]]

    @property
    def field(self) -> str:
        return PARTICIPANT_FIELDS[self.split_type]

    def entry_path(self, index: int) -> str:
        if self.split_type is SplitType.EQUAL:
            return f"{self.field}.{index}"
        return f"{self.field}.{index}.{VALUE_FIELDS[self.split_type]}"


class SplitRule(NamedTuple):
    name: str
    check: Callable[[SplitRequest], List[FieldError]]
    requires: Tuple[str, ...] = ()


def _amount_positive(req: SplitRequest) -> List[FieldError]:
    if req.amount <= 0:
        return [FieldError(path="amount", message="Amount must be positive")]
    return []


def _amount_precision(req: SplitRequest) -> List[FieldError]:
    if not has_cent_precision(req.amount):
        return [FieldError(path="amount", message="Amount can have at most 2 decimal places")]
    return []


def _participants_present(req: SplitRequest) -> List[FieldError]:
    if not req.entries:
        return [FieldError(
            path=req.field,
            message=f"{req.field} is required for {req.split_type.value} split type",
        )]
    return []


def _participants_unique(req: SplitRequest) -> List[FieldError]:
    seen = set()
    errors = []
    for i, (user_id, _) in enumerate(req.entries):
        if user_id in seen:
            errors.append(FieldError(
                path=f"{req.field}.{i}",
                message=f"User {user_id} appears more than once in the split",
            ))
        seen.add(user_id)
    return errors


def _values_positive(req: SplitRequest) -> List[FieldError]:
    if req.split_type is SplitType.EQUAL:
        return []
    label = VALUE_FIELDS[req.split_type].capitalize()
    return [
        FieldError(path=req.entry_path(i), message=f"{label} must be positive")
        for i, (_, value) in enumerate(req.entries)
        if value <= 0
    ]


def _custom_amount_precision(req: SplitRequest) -> List[FieldError]:
    if req.split_type is not SplitType.CUSTOM:
        return []
    return [
        FieldError(path=req.entry_path(i), message="Amount can have at most 2 decimal places")
        for i, (_, value) in enumerate(req.entries)
        if not has_cent_precision(value)
    ]


def _percentage_within_range(req: SplitRequest) -> List[FieldError]:
    if req.split_type is not SplitType.PERCENTAGE:
        return []
    return [
        FieldError(path=req.entry_path(i), message="Percentage cannot exceed 100")
        for i, (_, value) in enumerate(req.entries)
        if value > HUNDRED
    ]


def _custom_sum_matches_total(req: SplitRequest) -> List[FieldError]:
    if req.split_type is not SplitType.CUSTOM:
        return []
    total = sum((value for _, value in req.entries), Decimal("0"))
    if abs(total - req.amount) >= CENTS:
        return [FieldError(path=req.field, message="Sum of custom splits must equal total amount")]
    return []


def _percentage_sum_is_100(req: SplitRequest) -> List[FieldError]:
    if req.split_type is not SplitType.PERCENTAGE:
        return []
    total = sum((value for _, value in req.entries), Decimal("0"))
    if abs(total - HUNDRED) >= CENTS:
        return [FieldError(path=req.field, message="Sum of percentages must equal 100")]
    return []


# Evaluated in order. A rule is skipped when any rule it requires failed or was skipped.
SPLIT_RULES: Tuple[SplitRule, ...] = (
    SplitRule("amount_positive", _amount_positive),
    SplitRule("amount_precision", _amount_precision),
    SplitRule("participants_present", _participants_present),
    SplitRule("participants_unique", _participants_unique, ("participants_present",)),
    SplitRule("participant_values_positive", _values_positive, ("participants_present",)),
    SplitRule("custom_amount_precision", _custom_amount_precision, ("participants_present",)),
    SplitRule("percentage_within_range", _percentage_within_range, ("participants_present",)),
    SplitRule(
        "custom_sum_matches_total",
        _custom_sum_matches_total,
        ("amount_positive", "participants_present", "participant_values_positive"),
    ),
    SplitRule(
        "percentage_sum_is_100",
        _percentage_sum_is_100,
        ("participants_present", "participant_values_positive"),
    ),
)


def _build_request(amount, split_type: SplitType, participants: Iterable) -> SplitRequest:
    if split_type is SplitType.EQUAL:
        entries = [(user_id, None) for user_id in participants]
    else:
        entries = [(user_id, to_decimal(value)) for user_id, value in participants]
    return SplitRequest(to_decimal(amount), split_type, entries)


def collect_split_errors(amount, split_type, participants: Iterable) -> List[FieldError]:
    """Run every split rule and return all field errors found."""
    try:
        split_type = SplitType(split_type)
    except ValueError:
        return [FieldError(path="split_type", message=f"Unknown split type: {split_type}")]

    request = _build_request(amount, split_type, participants)

    blocked = set()
    errors: List[FieldError] = []
    for rule in SPLIT_RULES:
        if blocked.intersection(rule.requires):
            blocked.add(rule.name)
            continue
        found = rule.check(request)
        if found:
            blocked.add(rule.name)
            errors.extend(found)
    return errors


def equal_shares(amount: Decimal, user_ids: Sequence[int]) -> List[SplitShare]:
    count = len(user_ids)
    base = floor_cents(amount / count)
    remainder = amount - base * count

    shares = [SplitShare(user_id=uid, amount=base) for uid in user_ids]
    shares[0].amount = base + remainder
    return shares


def percentage_shares(amount: Decimal, entries: Sequence[Tuple[int, Decimal]]) -> List[SplitShare]:
    # Scaled by the actual percentage total so floored shares never exceed amount
    pct_total = sum((pct for _, pct in entries), Decimal("0"))
    shares = [
        SplitShare(user_id=uid, amount=floor_cents(amount * pct / pct_total))
        for uid, pct in entries
    ]

    residual = amount - sum((s.amount for s in shares), Decimal("0"))
    if residual:
        # max() keeps the first of equal percentages
        largest = max(range(len(entries)), key=lambda i: entries[i][1])
        shares[largest].amount += residual
    return shares


def validate_split(amount, split_type, participants: Iterable) -> List[SplitShare]:
    """Validate a split request and compute the per-member shares.

    ``participants`` is a sequence of user ids for EQUAL splits and a sequence of
    ``(user_id, value)`` pairs for CUSTOM (amounts) and PERCENTAGE (percentages)
    splits. Shares come back in input order and always sum to ``amount``.

    Raises SplitValidationError carrying every failed rule.
    """
    participants = list(participants)
    errors = collect_split_errors(amount, split_type, participants)
    if errors:
        raise SplitValidationError(errors)

    request = _build_request(amount, SplitType(split_type), participants)
    amount = qround(request.amount)

    if request.split_type is SplitType.EQUAL:
        return equal_shares(amount, [uid for uid, _ in request.entries])
    if request.split_type is SplitType.CUSTOM:
        return [SplitShare(user_id=uid, amount=qround(value)) for uid, value in request.entries]
    return percentage_shares(amount, request.entries)


def compute_balances(expenses: Iterable, splits: Iterable, member_ids: Iterable[int]) -> List[Balance]:
    """Aggregate paid and owed totals per user.

    ``expenses`` need ``id``, ``paid_by`` and ``amount``; ``splits`` need
    ``expense_id``, ``user_id`` and ``amount``. Splits of expenses not in
    ``expenses`` are ignored. Members come first in the given order, followed
    by any non-member with activity in ascending id order.
    """
    paid = defaultdict(Decimal)
    owed = defaultdict(Decimal)

    expense_ids = set()
    for expense in expenses:
        expense_ids.add(expense.id)
        paid[expense.paid_by] += to_decimal(expense.amount)

    for split in splits:
        if split.expense_id in expense_ids:
            owed[split.user_id] += to_decimal(split.amount)

    members = list(dict.fromkeys(member_ids))
    others = sorted((set(paid) | set(owed)) - set(members))

    return [
        Balance(
            user_id=uid,
            total_paid=qround(paid.get(uid, Decimal("0"))),
            total_owed=qround(owed.get(uid, Decimal("0"))),
            balance=qround(paid.get(uid, Decimal("0")) - owed.get(uid, Decimal("0"))),
        )
        for uid in members + others
    ]


def plan_settlements(balances: Iterable[Balance]) -> List[SettlementTransfer]:
    """Greedy largest-debtor to largest-creditor matching."""
    creditors = []
    debtors = []

    for b in balances:
        if b.balance >= CENTS:
            creditors.append([b.user_id, b.balance])
        elif b.balance <= -CENTS:
            debtors.append([b.user_id, -b.balance])

    creditors.sort(key=lambda x: (-x[1], x[0]))
    debtors.sort(key=lambda x: (-x[1], x[0]))

    creditors = deque(creditors)
    debtors = deque(debtors)

    transfers: List[SettlementTransfer] = []

    while creditors and debtors:
        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        pay_amt = qround(min(cred_amt, debt_amt))

        transfers.append(SettlementTransfer(from_user_id=debt_id, to_user_id=cred_id, amount=pay_amt))

        new_cred = qround(cred_amt - pay_amt)
        new_debt = qround(debt_amt - pay_amt)

        creditors.popleft()
        debtors.popleft()

        if new_cred >= CENTS:
            creditors.appendleft([cred_id, new_cred])
        if new_debt >= CENTS:
            debtors.appendleft([debt_id, new_debt])
    return transfers
