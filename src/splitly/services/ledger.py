from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Hashable, Iterable, Mapping, Optional, Sequence, Union

from splitly.services.settlement import PRECISION, Transfer, simplify

EFFECT_TOLERANCE = 0.001


class LedgerError(ValueError):
    pass


class CurrencyMismatchError(LedgerError):
    pass


@dataclass(slots=True, frozen=True)
class Expense:
    event_id: str
    payer: Hashable
    amount: float
    shares: Mapping[Hashable, float]
    occurred_at: datetime
    description: str = ""
    category: str = "Other"
    currency: str = "USD"


@dataclass(slots=True, frozen=True)
class Settlement:
    event_id: str
    payer: Hashable
    recipient: Hashable
    amount: float
    occurred_at: datetime
    description: str = ""
    currency: str = "USD"
    category: str = field(default="Payment", init=False)


LedgerEvent = Union[Expense, Settlement]


@dataclass(slots=True)
class PairwiseEntry:
    event: LedgerEvent
    effect: float


@dataclass(slots=True)
class PairwiseHistory:
    member: Hashable
    counterpart: Hashable
    entries: list[PairwiseEntry]
    net: float

    def is_settled(self, precision: float = PRECISION) -> bool:
        return abs(self.net) < precision


@dataclass(slots=True)
class GroupSummary:
    total_expense: float
    total_shared: float
    total_settled: float
    outstanding: float


def _check_currency(events: Sequence[LedgerEvent]) -> None:
    currencies = {event.currency for event in events}
    if len(currencies) > 1:
        raise CurrencyMismatchError(f"ledger mixes currencies: {', '.join(sorted(currencies))}")


def calculate_balances(
    events: Iterable[LedgerEvent],
    members: Optional[Iterable[Hashable]] = None,
) -> dict[Hashable, float]:
    events = list(events)
    _check_currency(events)

    if members is None:
        balances: dict[Hashable, float] = {}
        tracked = None
    else:
        balances = {member: 0.0 for member in members}
        tracked = set(balances)

    def credit(member: Hashable, amount: float) -> None:
        if tracked is None or member in tracked:
            balances[member] = balances.get(member, 0.0) + amount

    for event in events:
        if tracked is not None and event.payer not in tracked:
            continue
        credit(event.payer, event.amount)
        if isinstance(event, Settlement):
            credit(event.recipient, -event.amount)
        else:
            for member, share in event.shares.items():
                credit(member, -share)

    return balances


def _effect(event: LedgerEvent, member: Hashable, counterpart: Hashable) -> Optional[float]:
    if isinstance(event, Settlement):
        if event.payer == member and event.recipient == counterpart:
            return event.amount
        if event.payer == counterpart and event.recipient == member:
            return -event.amount
        return None

    involved = {event.payer, *event.shares}
    if member not in involved or counterpart not in involved:
        return None
    if event.payer == member:
        return event.shares.get(counterpart, 0.0)
    if event.payer == counterpart:
        return -event.shares.get(member, 0.0)
    return 0.0


def pairwise_history(
    events: Iterable[LedgerEvent],
    member: Hashable,
    counterpart: Hashable,
) -> PairwiseHistory:
    """Collect the events between two members and their net position.

    A positive effect means ``counterpart`` owes ``member``; entries are
    ordered newest first.
    """
    entries: list[PairwiseEntry] = []
    net = 0.0
    for event in events:
        effect = _effect(event, member, counterpart)
        if effect is None:
            continue
        net += effect
        if abs(effect) > EFFECT_TOLERANCE:
            entries.append(PairwiseEntry(event=event, effect=effect))

    entries.sort(key=lambda e: e.event.occurred_at, reverse=True)
    return PairwiseHistory(member=member, counterpart=counterpart, entries=entries, net=net)


def settle_group(
    events: Iterable[LedgerEvent],
    members: Optional[Iterable[Hashable]] = None,
    precision: float = PRECISION,
) -> list[Transfer]:
    return simplify(calculate_balances(events, members), precision)


def unique_events(events: Iterable[LedgerEvent]) -> list[LedgerEvent]:
    seen: set[str] = set()
    unique: list[LedgerEvent] = []
    for event in events:
        if event.event_id in seen:
            continue
        seen.add(event.event_id)
        unique.append(event)
    return unique


def group_summary(events: Iterable[LedgerEvent], balances: Mapping[Hashable, float]) -> GroupSummary:
    """Totals for a group's event log.

    Every event counts towards ``total_expense``, payments included. Only
    expenses split between two or more members count as shared.
    ``outstanding`` is what the members with negative balances still owe.
    """
    events = unique_events(events)
    return GroupSummary(
        total_expense=sum(event.amount for event in events),
        total_shared=sum(
            event.amount for event in events if isinstance(event, Expense) and len(event.shares) >= 2
        ),
        total_settled=sum(event.amount for event in events if isinstance(event, Settlement)),
        outstanding=sum(-balance for balance in balances.values() if balance < 0),
    )
