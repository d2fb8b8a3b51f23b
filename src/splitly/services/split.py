from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN
from enum import Enum
from typing import Hashable, Mapping, Sequence, Union

SPLIT_TOLERANCE = 0.001


class SplitError(ValueError):
    pass


class SplitMethod(str, Enum):
    EQUAL = "equal"
    UNEQUAL = "unequal"
    PERCENTAGE = "percentage"
    SHARES = "shares"


def to_cents(amount: float) -> int:
    return int(Decimal(str(amount)).scaleb(2).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))


def from_cents(cents: int) -> float:
    return cents / 100


def distribute_cents(total_cents: int, weights: Sequence[int]) -> list[int]:
    """Split ``total_cents`` proportionally to ``weights`` so the parts add up exactly.

    Rounding leftovers are handed out one cent at a time starting from the
    first participant.
    """
    if total_cents < 0:
        raise SplitError("amount must be non-negative")
    weight_sum = sum(weights)
    if not weights or weight_sum <= 0:
        raise SplitError("weights must not be empty")

    decimal_total = Decimal(total_cents)
    parts = [
        int((decimal_total * Decimal(weight) / Decimal(weight_sum)).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))
        for weight in weights
    ]
    remainder = total_cents - sum(parts)

    n = len(parts)
    idx = 0
    step = 1 if remainder > 0 else -1
    while remainder != 0:
        parts[idx % n] += step
        remainder -= step
        idx += 1

    return parts


def _require_participants(count: int) -> None:
    if count == 1:
        raise SplitError("an expense must be split between at least 2 people")


def split_equally(total: float, members: Sequence[Hashable]) -> dict[Hashable, float]:
    if not members:
        return {}
    _require_participants(len(members))

    parts = distribute_cents(to_cents(total), [1] * len(members))
    return {member: from_cents(part) for member, part in zip(members, parts)}


def split_unequally(total: float, amounts: Mapping[Hashable, float]) -> dict[Hashable, float]:
    shares = {member: amount for member, amount in amounts.items() if amount > 0}
    allocated = sum(shares.values())
    if total > 0 and abs(total - allocated) > SPLIT_TOLERANCE:
        raise SplitError(f"the total split ({allocated:.2f}) does not match the expense amount ({total:.2f})")
    return shares


def split_by_percentage(total: float, percentages: Mapping[Hashable, float]) -> dict[Hashable, float]:
    valid = {member: pct for member, pct in percentages.items() if pct > 0}
    _require_participants(len(valid))

    total_pct = sum(valid.values())
    if total > 0 and abs(total_pct - 100) > SPLIT_TOLERANCE:
        raise SplitError(f"percentages must add up to 100%, current total: {total_pct:.2f}%")
    if not valid:
        return {}

    weights = [to_cents(pct) for pct in valid.values()]
    parts = distribute_cents(to_cents(total), weights)
    return {member: from_cents(part) for member, part in zip(valid, parts)}


def split_by_shares(total: float, shares: Mapping[Hashable, int]) -> dict[Hashable, float]:
    valid = {member: int(count) for member, count in shares.items() if int(count) > 0}
    _require_participants(len(valid))
    if not valid:
        return {}

    parts = distribute_cents(to_cents(total), list(valid.values()))
    return {member: from_cents(part) for member, part in zip(valid, parts)}


def calculate_split(
    method: SplitMethod,
    total: float,
    allocation: Union[Sequence[Hashable], Mapping[Hashable, float]],
) -> dict[Hashable, float]:
    method = SplitMethod(method)
    if method == SplitMethod.EQUAL:
        return split_equally(total, list(allocation))
    if method == SplitMethod.UNEQUAL:
        return split_unequally(total, allocation)
    if method == SplitMethod.PERCENTAGE:
        return split_by_percentage(total, allocation)
    return split_by_shares(total, allocation)
