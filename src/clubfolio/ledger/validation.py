"""
Ledger append-time validation.

The ledger is a recording ledger, not a constraint-checked bookkeeping system:
it checks that a transaction carries the fields its type needs and nothing else.
Available cash and held quantity are deliberately not checked here.
"""
from __future__ import annotations

import math
import uuid
from typing import Callable

from clubfolio.ledger.models import (
    MEMBER_FLOW_TYPES,
    TRADE_TYPES,
    Transaction,
    TransactionDraft,
    TransactionType,
)


class InvalidTransactionError(ValueError):
    """A draft is missing fields required by its type, carries a non-positive number, or is inconsistent."""

    def __init__(self, draft: TransactionDraft, missing: list[str]):
        self.draft = draft
        self.missing = list(missing)
        super().__init__(f"{draft.type.value} transaction is missing/invalid: {', '.join(self.missing)}")


def new_transaction_id() -> str:
    return f"t{uuid.uuid4().hex[:12]}"


def _present_number(x: float | None) -> bool:
    # Zero counts as absent; negative amounts, quantities and prices are rejected.
    if x is None:
        return False
    try:
        v = float(x)
    except (TypeError, ValueError):
        return False
    return not math.isnan(v) and v > 0.0


def _present_text(x: str | None) -> bool:
    return bool(str(x or "").strip())


def validate_draft(draft: TransactionDraft) -> list[str]:
    """Return the names of required fields the draft is missing (or has non-positive) for its type."""
    missing: list[str] = []
    if not _present_text(draft.date):
        missing.append("date")

    if draft.type in MEMBER_FLOW_TYPES:
        if not _present_text(draft.member_id):
            missing.append("member_id")
        if not _present_number(draft.amount):
            missing.append("amount")
    elif draft.type in TRADE_TYPES:
        if not _present_text(draft.asset):
            missing.append("asset")
        if not _present_number(draft.quantity):
            missing.append("quantity")
        if not _present_number(draft.price):
            missing.append("price")
    elif draft.type == TransactionType.DIVIDEND:
        if not _present_text(draft.asset):
            missing.append("asset")
        if not _present_number(draft.amount):
            missing.append("amount")
    return missing


def prepare_transaction(
    draft: TransactionDraft,
    *,
    id_factory: Callable[[], str] = new_transaction_id,
) -> Transaction:
    """
    Turn a draft into an immutable Transaction with a fresh id.

    BUY/SELL: amount = quantity * price when the draft leaves it unset. A draft
    that supplies an amount disagreeing with quantity * price is rejected.

    Raises:
        InvalidTransactionError: draft lacks fields required by its type.
    """
    missing = validate_draft(draft)
    if missing:
        raise InvalidTransactionError(draft, missing)

    amount = draft.amount
    quantity = float(draft.quantity) if draft.quantity is not None else None
    price = float(draft.price) if draft.price is not None else None
    if draft.type in TRADE_TYPES:
        notional = float(quantity) * float(price)  # type: ignore[arg-type]
        if amount is None:
            amount = notional
        elif not math.isclose(float(amount), notional, rel_tol=1e-9, abs_tol=1e-6):
            raise InvalidTransactionError(draft, ["amount (must equal quantity * price)"])

    asset = str(draft.asset).strip().upper() if _present_text(draft.asset) else None
    member_id = str(draft.member_id).strip() if _present_text(draft.member_id) else None

    return Transaction(
        id=id_factory(),
        date=str(draft.date).strip(),
        type=draft.type,
        portfolio=draft.portfolio,
        amount=float(amount),  # type: ignore[arg-type]
        member_id=member_id if draft.type in MEMBER_FLOW_TYPES else None,
        asset=asset if draft.type not in MEMBER_FLOW_TYPES else None,
        quantity=quantity if draft.type in TRADE_TYPES else None,
        price=price if draft.type in TRADE_TYPES else None,
    )
