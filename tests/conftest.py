"""
Pytest configuration and shared fixtures for clubfolio tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Import helpers from conftest when needed.
"""
import random
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest


def pytest_configure():
    """
    Ensure `src/` is on sys.path for the src-layout package import (`clubfolio`).
    This keeps tests runnable without requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def test_settings(tmp_path: Path):
    """Settings with a fake API key and a throwaway snapshot path."""
    from clubfolio.config import Settings

    return Settings(
        OPENAI_API_KEY="test_openai_key",
        OPENAI_MODEL="gpt-4o-mini",
        CLUB_DATA_PATH=str(tmp_path / "club_data.json"),
    )


@pytest.fixture
def keyless_settings(tmp_path: Path):
    from clubfolio.config import Settings

    return Settings(OPENAI_API_KEY=None, CLUB_DATA_PATH=str(tmp_path / "club_data.json"))


# =============================================================================
# Sample Data Fixtures
# =============================================================================

def make_history(navs, benchmarks=None, start_year: int = 2023, start_month: int = 11):
    """
    Build a monthly PerformanceDataPoint series (month-end dates) from NAV values.

    Usage:
        history = make_history([100, 110, 99, 121], [1000, 1000, 1100, 1210])
    """
    from clubfolio.nav.history import PerformanceDataPoint
    from clubfolio.utils.dates import month_end

    benchmarks = benchmarks or [1000.0] * len(navs)
    out = []
    for i, (nav, bench) in enumerate(zip(navs, benchmarks)):
        idx = start_year * 12 + (start_month - 1) + i
        d = month_end(idx // 12, idx % 12 + 1)
        out.append(PerformanceDataPoint(date=d.isoformat(), nav=float(nav), share_value=float(nav) / 250, benchmark=float(bench)))
    return out


@pytest.fixture
def small_history():
    """Four month-ends straddling a year boundary: +10%, -10%, +22.2%."""
    return make_history([100, 110, 99, 121], [1000, 1000, 1100, 1210])


@pytest.fixture
def seed_data():
    """The demo club, valued at the static demo marks."""
    from clubfolio.engine.valuation import build_club_data
    from clubfolio.nav.seed import default_members, default_transactions

    return build_club_data(default_members(), default_transactions(), make_history([25000, 25500]))


@pytest.fixture
def memory_store(test_settings):
    """A ClubStore seeded from the demo data, persisted in memory, deterministic history."""
    from clubfolio.nav.store import ClubStore, MemorySnapshotStore

    store = ClubStore(MemorySnapshotStore(), settings=test_settings, rng=random.Random(7))
    store.load()
    return store


# =============================================================================
# Mock API Client Fixtures
# =============================================================================

def make_openai_client(content: str = "analysis text") -> MagicMock:
    """
    Mock OpenAI client whose chat completion returns `content`.

    Usage:
        client = make_openai_client('{"assets": []}')
    """
    client = MagicMock()
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    resp = MagicMock()
    resp.choices = [choice]
    client.chat.completions.create.return_value = resp
    return client


@pytest.fixture
def mock_openai_client() -> MagicMock:
    return make_openai_client()
