from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from splitly.config import get_settings
from splitly.logging import configure_logging, get_logger
from splitly.services.export import expense_log_to_csv, settlement_to_csv
from splitly.services.ledger import calculate_balances, group_summary
from splitly.services.migration import migrate_records
from splitly.services.settlement import outstanding_debt, simplify


def load_snapshot(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as fh:
        snapshot = json.load(fh)
    if not isinstance(snapshot, dict):
        raise ValueError("snapshot must be a JSON object")
    return snapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="splitly-settle",
        description="Print the settlement plan for a group snapshot as CSV.",
    )
    parser.add_argument("snapshot", type=Path, help="JSON file with 'members' and 'expenses'")
    parser.add_argument(
        "--members-only",
        action="store_true",
        help="only track listed members; events paid by anyone else are skipped",
    )
    parser.add_argument(
        "--expense-log",
        action="store_true",
        help="print the migrated expense log instead of the settlement plan",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    try:
        snapshot = load_snapshot(args.snapshot)
        members = snapshot.get("members", [])
        names = {member["id"]: member.get("name", "") for member in members}
        events = migrate_records(snapshot.get("expenses", []), settings.cutover_utc)
        balances = calculate_balances(events, names.keys() if args.members_only else None)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        log.error("settlement.report.failed", snapshot=str(args.snapshot), error=str(exc))
        return 1

    if args.expense_log:
        print(expense_log_to_csv(events, names))
        return 0

    transfers = simplify(balances, settings.precision)
    summary = group_summary(events, balances)
    log.info(
        "settlement.report",
        members=len(balances),
        events=len(events),
        transfers=len(transfers),
        outstanding=round(outstanding_debt(transfers), 2),
        total_expense=round(summary.total_expense, 2),
        total_shared=round(summary.total_shared, 2),
        total_settled=round(summary.total_settled, 2),
    )
    print(settlement_to_csv(transfers, names))
    return 0


if __name__ == "__main__":
    sys.exit(main())
