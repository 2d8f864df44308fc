"""
TransactionStore: owned, in-memory ledger cache with an explicit lifecycle.

Loaded at startup, queried on every request, replaced wholesale on refresh.
Readers grab the current snapshot reference; a reload swaps it in a single
assignment, so a reader sees either the old or the new ledger, never a mix.
"""
from __future__ import annotations

import datetime as dt
import itertools
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from loguru import logger

from cashflow.data.schemas import SENTINEL_DATE, Transaction
from cashflow.exceptions import DataNotLoadedError, SourceError


class TransactionSource(Protocol):
    def fetch(self) -> list[Transaction]: ...

    def describe(self) -> str: ...


@dataclass(frozen=True)
class _Snapshot:
    transactions: tuple[Transaction, ...]
    loaded_at: Optional[dt.datetime]
    seq: int
    loaded: bool


_EMPTY = _Snapshot(transactions=(), loaded_at=None, seq=0, loaded=False)

Listener = Callable[["TransactionStore"], None]


class TransactionStore:
    """Ledger cache backed by an injected source."""

    def __init__(self, source: TransactionSource) -> None:
        self.source = source
        self._snapshot: _Snapshot = _EMPTY
        self._seq = itertools.count(1)
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> "TransactionStore":
        """Fetch from the source and replace the whole cache.

        On failure the previous transactions stay in memory but the store is
        marked not-loaded, so callers get "no data" instead of stale data.
        Results of a request that was overtaken by a newer, already committed
        one are discarded.
        Any exception raised by the source counts as a failed load and is
        re-raised as SourceError.
        """
        with self._lock:
            seq = next(self._seq)

        try:
            transactions = self.source.fetch()
        except Exception as exc:
            error = exc if isinstance(exc, SourceError) else SourceError(f"{type(exc).__name__}: {exc}")
            logger.error(f"Ledger load #{seq} failed: {error}")
            with self._lock:
                if seq > self._snapshot.seq:
                    self._snapshot = _Snapshot(
                        transactions=self._snapshot.transactions,
                        loaded_at=self._snapshot.loaded_at,
                        seq=seq,
                        loaded=False,
                    )
                    self._last_error = str(error)
            if error is exc:
                raise
            raise error from exc

        with self._lock:
            if seq < self._snapshot.seq:
                logger.warning(f"Discarding stale ledger load #{seq} (current #{self._snapshot.seq})")
                return self
            self._snapshot = _Snapshot(
                transactions=tuple(transactions),
                loaded_at=dt.datetime.now(),
                seq=seq,
                loaded=True,
            )
            self._last_error = None

        logger.info(f"Ledger load #{seq}: {len(transactions):,} transactions from {self.source.describe()}")
        self._notify()
        return self

    def ensure_loaded(self) -> "TransactionStore":
        """Load once; later calls are no-ops until refresh() or clear()."""
        if not self.is_loaded:
            self.load()
        return self

    def refresh(self) -> "TransactionStore":
        """Force a reload regardless of current state."""
        return self.load()

    def clear(self) -> None:
        with self._lock:
            self._snapshot = _Snapshot(transactions=(), loaded_at=None, seq=self._snapshot.seq, loaded=False)
            self._last_error = None
        logger.info("Ledger cache cleared")
        self._notify()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.loaded

    @property
    def last_updated_at(self) -> Optional[dt.datetime]:
        return self._snapshot.loaded_at

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def transactions(self) -> tuple[Transaction, ...]:
        """Current ledger snapshot. Raises DataNotLoadedError when there is none."""
        snap = self._snapshot
        if not snap.loaded:
            raise DataNotLoadedError(self._last_error or "Ledger not loaded yet")
        return snap.transactions

    def row_count(self) -> int:
        snap = self._snapshot
        return len(snap.transactions) if snap.loaded else 0

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------

    def unique_values(self, field: str) -> list[str]:
        """Sorted distinct non-empty values of a field (filter option lists)."""
        snap = self._snapshot
        if not snap.loaded:
            return []
        values = set()
        for t in snap.transactions:
            raw = getattr(t, field)
            if hasattr(raw, "value"):
                raw = raw.value
            text = str(raw or "").strip()
            if text:
                values.add(text)
        return sorted(values)

    def date_range(self) -> str:
        snap = self._snapshot
        dates = [t.date for t in snap.transactions if t.date != SENTINEL_DATE] if snap.loaded else []
        if not dates:
            return "N/A"
        return f"{min(dates)} to {max(dates)}"

    # ------------------------------------------------------------------
    # Publish / subscribe
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(store) after every successful load or clear. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(f"Store listener {listener!r} failed")


class AutoRefresher:
    """Background thread that refreshes a store every `interval` seconds."""

    def __init__(self, store: TransactionStore, interval: float) -> None:
        self.store = store
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "AutoRefresher":
        self.stop()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ledger-auto-refresh", daemon=True)
        self._thread.start()
        logger.info(f"Auto-refresh every {self.interval:g}s")
        return self

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=5)
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.store.refresh()
            except SourceError:
                # Already logged by the store; try again next tick
                continue
