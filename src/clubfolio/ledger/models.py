from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

# Below this many shares a member counts as fully withdrawn.
SHARE_EPSILON = 0.01


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"


class MemberStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ProfileType(str, Enum):
    PRUDENT = "PHR_Prudent"
    DYNAMIC = "FLG_Dynamique"


class PortfolioId(str, Enum):
    """The two independently tracked sub-portfolios."""

    PHRONESIS = "Phronesis_Portfolio"  # passive
    FLAGSHIP = "FlagShip_Portfolio"  # active

    @property
    def label(self) -> str:
        return "Phronesis" if self is PortfolioId.PHRONESIS else "FlagShip"


MEMBER_FLOW_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)
TRADE_TYPES = (TransactionType.BUY, TransactionType.SELL)


@dataclass(frozen=True)
class Member:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    join_date: str = ""
    exit_date: str | None = None
    invested_capital: float = 0.0
    shares: float = 0.0
    status: MemberStatus = MemberStatus.ACTIVE
    # Free-form classification tag; ProfileType holds the known values.
    profile_type: str = ProfileType.PRUDENT.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "joinDate": self.join_date,
            "exitDate": self.exit_date,
            "investedCapital": self.invested_capital,
            "shares": self.shares,
            "status": self.status.value,
            "profileType": self.profile_type,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Member":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            email=str(d.get("email") or ""),
            phone=str(d.get("phone") or ""),
            join_date=str(d.get("joinDate") or ""),
            exit_date=d.get("exitDate") or None,
            invested_capital=float(d.get("investedCapital") or 0.0),
            shares=float(d.get("shares") or 0.0),
            status=MemberStatus(d.get("status") or MemberStatus.ACTIVE.value),
            profile_type=str(d.get("profileType") or ProfileType.PRUDENT.value),
        )


def with_shares(member: Member, delta: float) -> Member:
    """New copy with `delta` shares added, floored at zero."""
    return replace(member, shares=max(0.0, member.shares + delta))


def with_deposit(member: Member, amount: float, new_shares: float) -> Member:
    """Deposit: add shares and capital, (re)activate and clear any exit date."""
    return replace(
        with_shares(member, new_shares),
        invested_capital=member.invested_capital + amount,
        status=MemberStatus.ACTIVE,
        exit_date=None,
    )


def with_withdrawal(member: Member, withdrawn_shares: float, exit_date: str) -> Member:
    """Withdrawal: burn shares; below SHARE_EPSILON the member becomes Inactive."""
    updated = with_shares(member, -withdrawn_shares)
    if updated.shares < SHARE_EPSILON:
        return replace(updated, status=MemberStatus.INACTIVE, exit_date=exit_date)
    return replace(updated, status=MemberStatus.ACTIVE)


@dataclass(frozen=True)
class Transaction:
    """
    One immutable ledger row.

    `amount` is the authoritative cash-flow magnitude for replay. For BUY/SELL it
    is quantity * price as computed at entry time and is never recomputed.
    """

    id: str
    date: str
    type: TransactionType
    portfolio: PortfolioId
    amount: float
    member_id: str | None = None
    asset: str | None = None
    quantity: float | None = None
    price: float | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "type": self.type.value,
            "portfolio": self.portfolio.value,
            "amount": self.amount,
        }
        if self.member_id is not None:
            d["memberId"] = self.member_id
        if self.asset is not None:
            d["asset"] = self.asset
        if self.quantity is not None:
            d["quantity"] = self.quantity
        if self.price is not None:
            d["price"] = self.price
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Transaction":
        def _optf(k: str) -> float | None:
            v = d.get(k)
            if v is None or str(v).strip() == "":
                return None
            return float(v)

        return cls(
            id=str(d["id"]),
            date=str(d.get("date") or ""),
            type=TransactionType(d["type"]),
            portfolio=PortfolioId(d["portfolio"]),
            amount=float(d.get("amount") or 0.0),
            member_id=d.get("memberId") or None,
            asset=d.get("asset") or None,
            quantity=_optf("quantity"),
            price=_optf("price"),
        )


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction-to-be-added: no id yet, every type-dependent field optional."""

    date: str
    type: TransactionType
    portfolio: PortfolioId
    amount: float | None = None
    member_id: str | None = None
    asset: str | None = None
    quantity: float | None = None
    price: float | None = None
