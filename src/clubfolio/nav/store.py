"""
Club state owner: load-or-seed, ledger appends, full recompute, persist.

The engine functions stay pure; ``ClubStore`` is the only object holding
mutable state and the only writer of the snapshot. Every mutation re-derives
replay, valuation and aggregation from the full transaction list.

Usage:
    store = ClubStore.open()
    store.add_transaction(TransactionDraft(date="2024-01-05", type=TransactionType.DEPOSIT,
                                           portfolio=PortfolioId.PHRONESIS, amount=1000, member_id="m1"))
    print(store.data.share_value)
"""
from __future__ import annotations

import json
import logging
import random
import uuid
from pathlib import Path
from typing import Any, Protocol

from clubfolio.config import Settings
from clubfolio.engine.membership import apply_member_flow
from clubfolio.engine.valuation import ClubData, PriceLookup, build_club_data
from clubfolio.ledger.models import Member, MemberStatus, ProfileType, Transaction, TransactionDraft
from clubfolio.ledger.validation import InvalidTransactionError, new_transaction_id, prepare_transaction
from clubfolio.nav.history import PerformanceDataPoint, generate_performance_history, needs_regeneration
from clubfolio.nav.seed import default_members, default_transactions
from clubfolio.utils.dates import today_iso
from clubfolio.utils.settings import safe_load_settings

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, snapshot: dict[str, Any]) -> None: ...


class JsonSnapshotStore:
    """One JSON document on disk; a missing file reads as 'no snapshot yet'."""

    def __init__(self, path: str | None = None):
        self.path = path or safe_load_settings().club_data_path

    def load(self) -> dict[str, Any] | None:
        p = Path(self.path)
        if not p.exists():
            return None
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"club snapshot at {self.path} is not a JSON object")
        return data

    def save(self, snapshot: dict[str, Any]) -> None:
        p = Path(self.path)
        p.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the target, then swap in; a failed write never truncates the snapshot.
        tmp = p.with_name(f"{p.name}.tmp")
        tmp.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
        tmp.replace(p)


class MemorySnapshotStore:
    """In-process snapshot holder (tests, dry runs)."""

    def __init__(self, snapshot: dict[str, Any] | None = None):
        self.snapshot = snapshot
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return json.loads(json.dumps(self.snapshot)) if self.snapshot is not None else None

    def save(self, snapshot: dict[str, Any]) -> None:
        self.snapshot = json.loads(json.dumps(snapshot))
        self.saves += 1


class ClubStore:
    def __init__(
        self,
        snapshots: SnapshotStore,
        *,
        settings: Settings | None = None,
        price_lookup: PriceLookup | None = None,
        chronological: bool = False,
        rng: random.Random | None = None,
    ):
        self.snapshots = snapshots
        self.settings = settings or safe_load_settings()
        self.price_lookup = price_lookup
        self.chronological = chronological
        self.rng = rng
        self._data: ClubData | None = None

    @classmethod
    def open(cls, path: str | None = None, **kwargs: Any) -> "ClubStore":
        settings = kwargs.pop("settings", None) or safe_load_settings()
        store = cls(JsonSnapshotStore(path or settings.club_data_path), settings=settings, **kwargs)
        store.load()
        return store

    @property
    def data(self) -> ClubData:
        if self._data is None:
            self.load()
        assert self._data is not None
        return self._data

    def _recompute(
        self,
        members: list[Member] | tuple[Member, ...],
        transactions: list[Transaction] | tuple[Transaction, ...],
        history: list[PerformanceDataPoint] | tuple[PerformanceDataPoint, ...],
    ) -> ClubData:
        self._data = build_club_data(
            members,
            transactions,
            history,
            price_lookup=self.price_lookup,
            chronological=self.chronological,
        )
        return self._data

    def load(self) -> ClubData:
        """Load the snapshot, or seed the demo club when there is none."""
        raw = self.snapshots.load()
        if raw is None:
            logger.info("no club snapshot found; seeding demo club")
            data = self._recompute(
                default_members(),
                default_transactions(),
                generate_performance_history(rng=self.rng),
            )
            self.save()
            return data

        members = [Member.from_dict(m) for m in raw.get("members") or []]
        transactions = [Transaction.from_dict(t) for t in raw.get("transactions") or []]
        history = [PerformanceDataPoint.from_dict(p) for p in raw.get("performanceHistory") or []]
        migrated = needs_regeneration(history, min_points=self.settings.min_history_points)
        if migrated:
            logger.info(
                "stored performance history has %d points (< %d); regenerating",
                len(history),
                self.settings.min_history_points,
            )
            history = generate_performance_history(rng=self.rng)
        data = self._recompute(members, transactions, history)
        if migrated:
            self.save()
        return data

    def save(self) -> None:
        self.snapshots.save(self.data.to_dict())

    def add_transaction(self, draft: TransactionDraft, *, today: str | None = None) -> Transaction | None:
        """
        Validate, apply membership equity at the prior share value, append, recompute, save.

        A malformed draft is logged and dropped; nothing is appended.
        """
        try:
            tx = prepare_transaction(draft, id_factory=self._unique_id)
        except InvalidTransactionError as e:
            logger.warning("rejected transaction: %s", e)
            return None

        prior = self.data
        members = apply_member_flow(
            prior.members,
            tx,
            prior.share_value,
            today=today or today_iso(),
            bootstrap_share_value=self.settings.bootstrap_share_value,
        )
        self._recompute(members, [*prior.transactions, tx], prior.performance_history)
        self.save()
        return tx

    def add_member(
        self,
        name: str,
        email: str,
        *,
        phone: str = "",
        join_date: str | None = None,
        profile_type: str = ProfileType.PRUDENT.value,
    ) -> Member:
        """Add a roster entry with zero shares; equity comes only from deposits."""
        if not str(name or "").strip() or not str(email or "").strip():
            raise ValueError("member name and email are required")
        existing = {m.id for m in self.data.members}
        member_id = f"m{uuid.uuid4().hex[:8]}"
        while member_id in existing:
            member_id = f"m{uuid.uuid4().hex[:8]}"
        member = Member(
            id=member_id,
            name=name.strip(),
            email=email.strip(),
            phone=phone,
            join_date=join_date or today_iso(),
            status=MemberStatus.ACTIVE,
            profile_type=profile_type,
        )
        prior = self.data
        self._recompute([*prior.members, member], prior.transactions, prior.performance_history)
        self.save()
        return member

    def _unique_id(self) -> str:
        existing = {t.id for t in self.data.transactions}
        tx_id = new_transaction_id()
        while tx_id in existing:
            tx_id = new_transaction_id()
        return tx_id

