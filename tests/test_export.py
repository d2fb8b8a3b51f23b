from datetime import datetime, timezone

from splitly.services.export import display_name, expense_log_to_csv, settlement_to_csv
from splitly.services.ledger import Expense, Settlement
from splitly.services.settlement import Transfer

NAMES = {"ann": "Ann (You)", "bob": "Bob, Jr.", "cid": ""}


def test_display_name():
    assert display_name(NAMES, "ann") == "Ann"
    assert display_name(NAMES, "cid") == "Unknown"
    assert display_name(NAMES, "zed") == "Unknown"


def test_settlement_to_csv():
    transfers = [
        Transfer(from_member="bob", to_member="ann", amount=12.5),
        Transfer(from_member="zed", to_member="ann", amount=1 / 3),
    ]

    assert settlement_to_csv(transfers, NAMES) == (
        'From,To,Amount\n'
        '"Bob, Jr.",Ann,12.50\n'
        'Unknown,Ann,0.33'
    )


def test_settlement_to_csv_empty():
    assert settlement_to_csv([], NAMES) == "From,To,Amount"


def test_expense_log_to_csv():
    events = [
        Expense(
            event_id="e1",
            payer="ann",
            amount=30.0,
            shares={"ann": 15.0, "bob": 15.0},
            occurred_at=datetime(2025, 11, 3, 18, 30, tzinfo=timezone.utc),
            description='Pizza "large"',
            category="Food & Drink",
        ),
        Settlement(
            event_id="p1",
            payer="bob",
            recipient="ann",
            amount=15.0,
            occurred_at=datetime(2025, 11, 4, tzinfo=timezone.utc),
            description="Payment from Bob to Ann",
        ),
    ]

    lines = expense_log_to_csv(events, NAMES).split("\n")

    assert lines[0] == "Date,Description,Category,Amount,Paid By,Split Details"
    assert lines[1] == '2025-11-03,"Pizza ""large""",Food & Drink,30.00,Ann,"Ann owes $15.00; Bob, Jr. owes $15.00"'
    assert lines[2] == "2025-11-04,Payment from Bob to Ann,Payment,15.00,\"Bob, Jr.\",Ann owes $15.00"
