"""
Member roster and personal member reports over a derived ClubData.
"""
from __future__ import annotations

from dataclasses import dataclass

from clubfolio.engine.valuation import ClubData
from clubfolio.ledger.models import MEMBER_FLOW_TYPES, Member, Transaction, TransactionType


class MemberNotFoundError(LookupError):
    """No member matches the given id + email pair."""


@dataclass(frozen=True)
class MemberRow:
    member: Member
    equity_value: float
    # Percent of total club shares.
    ownership_pct: float


@dataclass(frozen=True)
class MemberReport:
    member: Member
    share_value: float
    equity_value: float
    transactions: tuple[Transaction, ...]

    @property
    def total_deposited(self) -> float:
        return sum(t.amount for t in self.transactions if t.type == TransactionType.DEPOSIT)

    @property
    def total_withdrawn(self) -> float:
        return sum(t.amount for t in self.transactions if t.type == TransactionType.WITHDRAWAL)


def member_rows(data: ClubData) -> list[MemberRow]:
    share_value = data.share_value
    total_shares = data.total_shares
    return [
        MemberRow(
            member=m,
            equity_value=m.shares * share_value,
            ownership_pct=(m.shares / total_shares * 100) if total_shares > 0 else 0.0,
        )
        for m in data.members
    ]


def member_report(data: ClubData, member_id: str, email: str) -> MemberReport:
    """
    Personal statement for one member: equity at the current share value and
    every deposit/withdrawal booked to them, in ledger order.

    The email match is case-insensitive. This is a lookup, not authentication.

    Raises:
        MemberNotFoundError: id + email do not match a member.
    """
    mid = str(member_id or "").strip()
    mail = str(email or "").strip().lower()
    member = next((m for m in data.members if m.id == mid and m.email.lower() == mail), None)
    if member is None:
        raise MemberNotFoundError("Invalid Member ID or Email. Please try again.")
    txs = tuple(t for t in data.transactions if t.member_id == member.id and t.type in MEMBER_FLOW_TYPES)
    return MemberReport(
        member=member,
        share_value=data.share_value,
        equity_value=member.shares * data.share_value,
        transactions=txs,
    )
