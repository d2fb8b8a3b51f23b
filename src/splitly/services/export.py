from __future__ import annotations

import csv
import io
from typing import Hashable, Iterable, Mapping, Sequence

from splitly.services.ledger import LedgerEvent, Settlement
from splitly.services.settlement import Transfer

UNKNOWN_MEMBER = "Unknown"
SELF_SUFFIX = " (You)"

SETTLEMENT_HEADERS = ["From", "To", "Amount"]
EXPENSE_LOG_HEADERS = ["Date", "Description", "Category", "Amount", "Paid By", "Split Details"]


def display_name(names: Mapping[Hashable, str], member_id: Hashable) -> str:
    name = names.get(member_id)
    if not name:
        return UNKNOWN_MEMBER
    return name.replace(SELF_SUFFIX, "")


def _render(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def settlement_to_csv(transfers: Iterable[Transfer], names: Mapping[Hashable, str]) -> str:
    rows = (
        [display_name(names, t.from_member), display_name(names, t.to_member), f"{t.amount:.2f}"]
        for t in transfers
    )
    return _render(SETTLEMENT_HEADERS, rows)


def _split_details(event: LedgerEvent, names: Mapping[Hashable, str]) -> str:
    if isinstance(event, Settlement):
        owed = [(event.recipient, event.amount)]
    else:
        owed = list(event.shares.items())
    return "; ".join(f"{display_name(names, member)} owes ${amount:.2f}" for member, amount in owed)


def expense_log_to_csv(events: Iterable[LedgerEvent], names: Mapping[Hashable, str]) -> str:
    rows = (
        [
            event.occurred_at.date().isoformat(),
            event.description,
            event.category,
            f"{event.amount:.2f}",
            display_name(names, event.payer),
            _split_details(event, names),
        ]
        for event in events
    )
    return _render(EXPENSE_LOG_HEADERS, rows)
