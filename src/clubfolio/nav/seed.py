"""
Default demo club used the first time no snapshot exists.

Member shares are stored as-is (they are not re-derived from the ledger): the
roster below reflects three historical flows priced at 100 per share.
"""
from __future__ import annotations

from clubfolio.ledger.models import (
    Member,
    MemberStatus,
    PortfolioId,
    ProfileType,
    Transaction,
    TransactionType,
)


def default_members() -> list[Member]:
    return [
        Member(
            id="m1",
            name="Alice Johnson",
            email="alice@email.com",
            phone="555-0101",
            join_date="2019-07-20",
            invested_capital=10000.0,
            shares=100.0,
            status=MemberStatus.ACTIVE,
            profile_type=ProfileType.DYNAMIC.value,
        ),
        Member(
            id="m2",
            name="Bob Williams",
            email="bob@email.com",
            phone="555-0102",
            join_date="2019-07-20",
            invested_capital=15000.0,
            shares=150.0,
            status=MemberStatus.ACTIVE,
            profile_type=ProfileType.PRUDENT.value,
        ),
        Member(
            id="m3",
            name="Charlie Brown",
            email="charlie@email.com",
            phone="555-0103",
            join_date="2022-06-01",
            exit_date="2023-12-31",
            invested_capital=5000.0,
            shares=0.0,
            status=MemberStatus.INACTIVE,
            profile_type=ProfileType.DYNAMIC.value,
        ),
    ]


def default_transactions() -> list[Transaction]:
    P, F = PortfolioId.PHRONESIS, PortfolioId.FLAGSHIP
    T = TransactionType
    return [
        Transaction(id="t1", date="2019-07-20", type=T.DEPOSIT, portfolio=P, amount=10000.0, member_id="m1"),
        Transaction(id="t2", date="2019-07-20", type=T.DEPOSIT, portfolio=P, amount=15000.0, member_id="m2"),
        Transaction(id="t-charlie-in", date="2022-06-01", type=T.DEPOSIT, portfolio=F, amount=5000.0, member_id="m3"),
        Transaction(id="t3", date="2022-08-01", type=T.BUY, portfolio=P, amount=4500.0, asset="AAPL", quantity=30.0, price=150.0),
        Transaction(id="t4", date="2023-03-10", type=T.BUY, portfolio=P, amount=1000.0, asset="GOOGL", quantity=10.0, price=100.0),
        Transaction(id="t5", date="2023-05-15", type=T.BUY, portfolio=F, amount=3800.0, asset="XAU/USD", quantity=2.0, price=1900.0),
        Transaction(id="t6", date="2023-06-01", type=T.SELL, portfolio=F, amount=1950.0, asset="XAU/USD", quantity=1.0, price=1950.0),
        Transaction(id="t-charlie-out", date="2023-12-31", type=T.WITHDRAWAL, portfolio=F, amount=5500.0, member_id="m3"),
    ]
