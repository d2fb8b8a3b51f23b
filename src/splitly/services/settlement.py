from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Hashable, Iterable, List, Mapping

PRECISION = 0.01


@dataclass(slots=True, frozen=True)
class Transfer:
    from_member: Hashable
    to_member: Hashable
    amount: float


@dataclass(slots=True)
class _Position:
    member_id: Hashable
    remaining: float


def _ranked(positions: list[_Position]) -> list[_Position]:
    return sorted(positions, key=lambda p: (-p.remaining, str(p.member_id)))


def simplify(balances: Mapping[Hashable, float], precision: float = PRECISION) -> List[Transfer]:
    """Greedily match the largest debtor with the largest creditor.

    Balances are signed: positive means the member is owed money, negative
    means the member owes. Non-finite balances are skipped. The input is
    expected to sum to zero; any unmatched remainder is left untransferred.
    The result holds at most
    ``debtors + creditors - 1`` transfers, which is not always the minimum.
    """
    if not math.isfinite(precision) or precision <= 0:
        raise ValueError("precision must be a positive finite number")

    debtors: list[_Position] = []
    creditors: list[_Position] = []

    for member_id, balance in balances.items():
        if not math.isfinite(balance):
            continue
        if balance < -precision:
            debtors.append(_Position(member_id, -balance))
        elif balance > precision:
            creditors.append(_Position(member_id, balance))

    debtors = _ranked(debtors)
    creditors = _ranked(creditors)

    transfers: list[Transfer] = []
    i, j = 0, 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        transfer_amount = min(debtor.remaining, creditor.remaining)
        if transfer_amount > precision:
            transfers.append(
                Transfer(from_member=debtor.member_id, to_member=creditor.member_id, amount=transfer_amount)
            )

        debtor.remaining -= transfer_amount
        creditor.remaining -= transfer_amount

        if debtor.remaining < precision:
            i += 1
        if creditor.remaining < precision:
            j += 1

    return transfers


def outstanding_debt(transfers: Iterable[Transfer]) -> float:
    return sum(t.amount for t in transfers)


def is_fully_settled(transfers: Iterable[Transfer], precision: float = PRECISION) -> bool:
    return outstanding_debt(transfers) <= precision
