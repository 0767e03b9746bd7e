"""
Membership equity: unitized share accounting for member deposits/withdrawals.

Each flow is priced at the share value in effect immediately before it is
appended. Before any shares exist the club bootstraps at a fixed unit price.
"""
from __future__ import annotations

from typing import Sequence

from clubfolio.ledger.models import (
    Member,
    Transaction,
    TransactionType,
    with_deposit,
    with_withdrawal,
)
from clubfolio.utils.dates import today_iso

BOOTSTRAP_SHARE_VALUE = 100.0


def effective_share_value(prior_share_value: float, bootstrap: float = BOOTSTRAP_SHARE_VALUE) -> float:
    """Unit price for the next flow: the prior share value, or `bootstrap` when it is not positive."""
    return float(prior_share_value) if prior_share_value and prior_share_value > 0 else float(bootstrap)


def apply_member_flow(
    members: Sequence[Member],
    transaction: Transaction,
    prior_share_value: float,
    *,
    today: str | None = None,
    bootstrap_share_value: float = BOOTSTRAP_SHARE_VALUE,
) -> list[Member]:
    """
    Return a new member list reflecting one DEPOSIT or WITHDRAWAL.

    Other transaction types, or a member id not on the roster, leave the list as is.
    """
    out = list(members)
    if transaction.type not in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL) or not transaction.member_id:
        return out

    price = effective_share_value(prior_share_value, bootstrap_share_value)
    units = float(transaction.amount) / price
    for i, m in enumerate(out):
        if m.id != transaction.member_id:
            continue
        if transaction.type == TransactionType.DEPOSIT:
            out[i] = with_deposit(m, float(transaction.amount), units)
        else:
            out[i] = with_withdrawal(m, units, today or today_iso())
    return out
