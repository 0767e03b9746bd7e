from __future__ import annotations

import pytest

from clubfolio.engine.replay import replay, replay_all
from clubfolio.engine.valuation import COMBINED, build_club_data, price_lookup_from_mapping, valuate
from clubfolio.ledger.models import PortfolioId, Transaction, TransactionType

P, F = PortfolioId.PHRONESIS, PortfolioId.FLAGSHIP
T = TransactionType


def _tx(i, tx_type, portfolio=P, date="2024-01-01", **kw) -> Transaction:
    return Transaction(id=f"t{i}", date=date, type=tx_type, portfolio=portfolio, **kw)


def test_replay_cash_and_lots():
    txs = [
        _tx(1, T.DEPOSIT, amount=1000.0, member_id="m1"),
        _tx(2, T.BUY, amount=400.0, asset="AAPL", quantity=4.0, price=100.0),
        _tx(3, T.BUY, amount=240.0, asset="AAPL", quantity=2.0, price=120.0),
        _tx(4, T.SELL, amount=150.0, asset="AAPL", quantity=1.0, price=150.0),
        _tx(5, T.DIVIDEND, amount=12.5, asset="AAPL"),
        _tx(6, T.WITHDRAWAL, amount=100.0, member_id="m1"),
        _tx(7, T.DEPOSIT, portfolio=F, amount=999.0, member_id="m2"),
    ]
    res = replay(txs, P)
    assert res.cash == pytest.approx(1000 - 400 - 240 + 150 + 12.5 - 100)
    lot = res.lots["AAPL"]
    assert lot.quantity == pytest.approx(5.0)
    # SELL never reduces the cost basis.
    assert lot.total_cost == pytest.approx(640.0)
    assert lot.average_cost == pytest.approx(128.0)


def test_replay_follows_insertion_order_unless_chronological():
    txs = [
        _tx(1, T.SELL, date="2024-02-01", amount=200.0, asset="MSFT", quantity=2.0, price=100.0),
        _tx(2, T.BUY, date="2024-01-01", amount=500.0, asset="MSFT", quantity=5.0, price=100.0),
    ]
    # The sell comes first in the ledger, before any lot exists, so it only moves cash.
    by_insertion = replay(txs, P)
    assert by_insertion.lots["MSFT"].quantity == pytest.approx(5.0)
    assert by_insertion.cash == pytest.approx(-300.0)

    by_date = replay(txs, P, chronological=True)
    assert by_date.lots["MSFT"].quantity == pytest.approx(3.0)
    assert by_date.cash == pytest.approx(-300.0)


def test_oversell_and_overdraw_are_tolerated():
    txs = [
        _tx(1, T.BUY, amount=100.0, asset="XOM", quantity=1.0, price=100.0),
        _tx(2, T.SELL, amount=300.0, asset="XOM", quantity=3.0, price=100.0),
    ]
    res = replay(txs, P)
    assert res.lots["XOM"].quantity == pytest.approx(-2.0)
    assert res.cash == pytest.approx(200.0)
    assert valuate(res.lots, price_lookup_from_mapping({}), P) == []


def test_replay_all_has_every_portfolio():
    out = replay_all([])
    assert set(out) == set(PortfolioId)
    assert all(r.cash == 0.0 and r.lots == {} for r in out.values())


def test_valuate_price_fallback_and_closed_positions():
    txs = [
        _tx(1, T.BUY, amount=300.0, asset="ZZZ", quantity=3.0, price=100.0),
        _tx(2, T.BUY, amount=50.0, asset="AAPL", quantity=1.0, price=50.0),
        _tx(3, T.BUY, amount=10.0, asset="GONE", quantity=1.0, price=10.0),
        _tx(4, T.SELL, amount=10.0, asset="GONE", quantity=1.0, price=10.0),
        _tx(5, T.BUY, amount=20.0, asset="ZERO", quantity=2.0, price=10.0),
    ]
    lots = replay(txs, P).lots
    holdings = {h.asset: h for h in valuate(lots, price_lookup_from_mapping({"aapl": 175.0, "ZERO": 0.0}), P)}

    assert "GONE" not in holdings
    # Untracked asset: marked at average cost, zero P/L.
    assert holdings["ZZZ"].current_price == pytest.approx(100.0)
    assert holdings["ZZZ"].unrealized_gain_loss == pytest.approx(0.0)
    # Non-positive price also falls back.
    assert holdings["ZERO"].current_price == pytest.approx(10.0)
    # Case-insensitive lookup.
    assert holdings["AAPL"].market_value == pytest.approx(175.0)
    assert holdings["AAPL"].unrealized_gain_loss == pytest.approx(125.0)
    assert holdings["AAPL"].gain_loss_pct == pytest.approx(250.0)


def test_seed_club_totals(seed_data):
    ph = seed_data.portfolios[P]
    fl = seed_data.portfolios[F]
    assert ph.cash == pytest.approx(19500.0)
    assert ph.holdings_value == pytest.approx(5250.0 + 1300.0)
    assert fl.cash == pytest.approx(-2350.0)
    xau = fl.holdings[0]
    assert xau.asset == "XAU/USD" and xau.quantity == pytest.approx(1.0)
    assert xau.average_cost == pytest.approx(3800.0)
    assert xau.unrealized_gain_loss == pytest.approx(1980.0 - 3800.0)

    assert seed_data.total_value == pytest.approx(25680.0)
    assert seed_data.total_shares == pytest.approx(250.0)
    assert seed_data.share_value == pytest.approx(102.72)
    assert [h.asset for h in seed_data.holdings] == ["AAPL", "GOOGL", "XAU/USD"]


def test_combined_view_concatenates_same_asset_across_portfolios():
    txs = [
        _tx(1, T.BUY, portfolio=P, amount=150.0, asset="AAPL", quantity=1.0, price=150.0),
        _tx(2, T.BUY, portfolio=F, amount=300.0, asset="AAPL", quantity=2.0, price=150.0),
    ]
    data = build_club_data([], txs)
    holdings, cash, total = data.view(COMBINED)
    assert [(h.asset, h.portfolio) for h in holdings] == [("AAPL", P), ("AAPL", F)]
    assert cash == pytest.approx(-450.0)
    assert total == pytest.approx(3 * 175.0 - 450.0)
    # No members means no shares, and share value falls back to 0.
    assert data.share_value == 0.0

    flagship, f_cash, f_total = data.view(F)
    assert len(flagship) == 1 and f_cash == pytest.approx(-300.0)
    assert f_total == pytest.approx(2 * 175.0 - 300.0)


def test_combined_cash_is_sum_of_sub_portfolio_cash(seed_data):
    txs = [
        _tx(1, T.DEPOSIT, amount=5000.0, member_id="m1"),
        _tx(2, T.BUY, amount=1750.0, asset="AAPL", quantity=10.0, price=175.0),
        _tx(3, T.DEPOSIT, portfolio=F, amount=3000.0, member_id="m2"),
        _tx(4, T.DIVIDEND, portfolio=F, amount=42.0, asset="XOM"),
        _tx(5, T.WITHDRAWAL, portfolio=F, amount=500.0, member_id="m2"),
    ]
    data = build_club_data([], txs)
    _h, p_cash, _t = data.view(P)
    _h, f_cash, _t = data.view(F)
    assert p_cash == pytest.approx(3250.0)
    assert f_cash == pytest.approx(2542.0)
    assert data.view(COMBINED)[1] == pytest.approx(p_cash + f_cash)
    assert data.cash == pytest.approx(p_cash + f_cash)

    assert seed_data.cash == pytest.approx(sum(seed_data.view(pid)[1] for pid in PortfolioId))
