"""Ingestion of stored expense documents into canonical ledger events.

Payment records written before the cutover date store the recipient in
``paidBy`` and the payer as the only split. Later records store the payer in
``paidBy`` and the recipient as the split. Both shapes become a
:class:`~splitly.services.ledger.Settlement` here so nothing downstream has
to look at dates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from splitly.config import LEGACY_PAYMENT_CUTOVER
from splitly.logging import get_logger
from splitly.services.ledger import Expense, LedgerEvent, Settlement
from splitly.services.split import SplitMethod

PAYMENT_CATEGORY = "Payment"


class MigrationError(ValueError):
    pass


class SplitRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    amount: float


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    group_id: Optional[str] = Field(None, alias="groupId")
    description: str = ""
    amount: float
    category: str = "Other"
    paid_by: str = Field(..., alias="paidBy")
    expense_date: datetime = Field(..., alias="expenseDate")
    split_method: SplitMethod = Field(SplitMethod.EQUAL, alias="splitMethod")
    splits: list[SplitRecord] = Field(default_factory=list)
    currency: str = "USD"

    @field_validator("expense_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_payment(self) -> bool:
        return self.category == PAYMENT_CATEGORY


def is_legacy_payment(record: ExpenseRecord, cutover: datetime = LEGACY_PAYMENT_CUTOVER) -> bool:
    return record.is_payment and record.expense_date < cutover


def migrate_record(record: ExpenseRecord, cutover: datetime = LEGACY_PAYMENT_CUTOVER) -> LedgerEvent:
    if not record.is_payment:
        shares: dict[str, float] = {}
        for split in record.splits:
            shares[split.user_id] = shares.get(split.user_id, 0.0) + split.amount
        return Expense(
            event_id=record.id,
            payer=record.paid_by,
            amount=record.amount,
            shares=shares,
            occurred_at=record.expense_date,
            description=record.description,
            category=record.category,
            currency=record.currency,
        )

    if len(record.splits) != 1:
        raise MigrationError(f"payment {record.id} must have exactly one split, got {len(record.splits)}")

    counterpart = record.splits[0].user_id
    if is_legacy_payment(record, cutover):
        payer, recipient = counterpart, record.paid_by
    else:
        payer, recipient = record.paid_by, counterpart

    return Settlement(
        event_id=record.id,
        payer=payer,
        recipient=recipient,
        amount=record.amount,
        occurred_at=record.expense_date,
        description=record.description,
        currency=record.currency,
    )


def migrate_records(
    documents: Iterable[dict[str, Any]],
    cutover: datetime = LEGACY_PAYMENT_CUTOVER,
) -> list[LedgerEvent]:
    log = get_logger(__name__)
    events: list[LedgerEvent] = []
    seen: set[str] = set()
    legacy = 0

    for index, document in enumerate(documents):
        try:
            record = ExpenseRecord.model_validate(document)
        except ValidationError as exc:
            raise MigrationError(f"record #{index} is not a valid expense: {exc}") from exc

        if record.id in seen:
            log.warning("migration.duplicate_record", record_id=record.id, index=index)
            continue
        seen.add(record.id)

        if is_legacy_payment(record, cutover):
            legacy += 1
            log.debug("migration.legacy_payment", record_id=record.id)
        events.append(migrate_record(record, cutover))

    events.sort(key=lambda event: event.occurred_at)
    log.info("migration.done", events=len(events), legacy_payments=legacy)
    return events
