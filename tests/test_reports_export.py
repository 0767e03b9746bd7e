from __future__ import annotations

from pathlib import Path

import pytest

from clubfolio.export import (
    TRACK_RECORD_HEADERS,
    annual_returns_csv,
    holdings_csv,
    track_record_csv,
    transactions_csv,
)
from clubfolio.nav.reports import MemberNotFoundError, member_report, member_rows


def test_member_rows_equity_and_ownership(seed_data):
    rows = {r.member.id: r for r in member_rows(seed_data)}
    assert rows["m1"].equity_value == pytest.approx(100 * 102.72)
    assert rows["m1"].ownership_pct == pytest.approx(40.0)
    assert rows["m2"].ownership_pct == pytest.approx(60.0)
    assert rows["m3"].equity_value == 0.0


def test_member_report_matches_email_case_insensitively(seed_data):
    rep = member_report(seed_data, "m3", "CHARLIE@Email.com")
    assert rep.member.name == "Charlie Brown"
    assert [t.id for t in rep.transactions] == ["t-charlie-in", "t-charlie-out"]
    assert rep.total_deposited == pytest.approx(5000.0)
    assert rep.total_withdrawn == pytest.approx(5500.0)
    assert rep.equity_value == 0.0


def test_member_report_rejects_wrong_email(seed_data):
    with pytest.raises(MemberNotFoundError):
        member_report(seed_data, "m1", "bob@email.com")
    with pytest.raises(LookupError):
        member_report(seed_data, "m9", "alice@email.com")


def test_holdings_csv(seed_data):
    lines = holdings_csv(seed_data.holdings).splitlines()
    assert lines[0] == "Portfolio,Asset,Quantity,Avg. Cost,Current Price,Market Value,Unrealized P/L,P/L %"
    assert lines[1] == "Phronesis_Portfolio,AAPL,30,150,175,5250,750,16.67"
    assert lines[3] == "FlagShip_Portfolio,XAU/USD,1,3800,1980,1980,-1820,-47.89"


def test_transactions_csv_newest_first_with_member_names(seed_data, tmp_path: Path):
    out = tmp_path / "exports" / "transactions.csv"
    text = transactions_csv(seed_data.transactions, seed_data.members, path=str(out))
    lines = text.splitlines()
    assert lines[0] == "ID,Date,Type,Portfolio,Member,Asset,Quantity,Price,Amount"
    assert lines[1] == "t-charlie-out,2023-12-31,WITHDRAWAL,FlagShip_Portfolio,Charlie Brown,,,,5500"
    assert "t6,2023-06-01,SELL,FlagShip_Portfolio,,XAU/USD,1,1950,1950" in lines
    assert out.read_text() == text


def test_track_record_and_annual_returns_csv(small_history):
    lines = track_record_csv(small_history).splitlines()
    assert lines[0] == ",".join(TRACK_RECORD_HEADERS)
    assert lines[1] == "2023-11-30,100,1000,0.00,0.00"
    assert lines[3] == "2024-01-31,99,1100,-10.00,-10.00"

    annual = annual_returns_csv(small_history).splitlines()
    assert annual[0] == "Year,Portfolio Return (%),Benchmark Return (%),Outperformance (%)"
    assert annual[1] == "2024,22.22,10.00,12.22"
    assert annual[2] == "2023,10.00,0.00,10.00"
