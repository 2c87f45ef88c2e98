"""Session-scoped emotional memory.

:class:`SessionMemoryStore` keeps a bounded-by-time history of fused
states per session and derives trend, dominant emotion, stability and a
slow EMA baseline from it. Entries older than the retention window are
dropped lazily whenever a session is read or written; idle sessions are
removed only when :meth:`SessionMemoryStore.purge_expired` is called.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .config import FusionConfig
from .exceptions import StateError
from .models import (
    Emotion,
    EmotionalBaseline,
    EmotionalState,
    MemoryContext,
    MemoryEntry,
    Trend,
    clamp,
)

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 0.1
MIN_TREND_ENTRIES = 4
NEUTRAL_STABILITY = 0.5


@dataclass
class _Session:
    session_id: str
    created_at: float
    last_active: float
    entries: list[MemoryEntry] = field(default_factory=list)
    baseline: EmotionalBaseline | None = None
    total_recorded: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionHandle:
    """A session whose lock is held by the caller.

    Obtained from :meth:`SessionMemoryStore.session`; valid only inside
    the ``with`` block.
    """

    def __init__(self, store: SessionMemoryStore, session: _Session) -> None:
        self._store = store
        self._session = session

    @property
    def session_id(self) -> str:
        return self._session.session_id

    def record(self, state: EmotionalState, timestamp: float | None = None) -> MemoryEntry:
        return self._store._append(self._session, state, timestamp)

    def context(self, now: float | None = None) -> MemoryContext:
        return self._store._context(self._session, now)

    def history(self, limit: int | None = None, now: float | None = None) -> list[MemoryEntry]:
        return self._store._history(self._session, limit, now)


class SessionMemoryStore:
    """Per-session emotional history with lazy retention.

    Each session has its own lock; the store-level lock only guards the
    session dictionary, so different sessions never contend.

    Usage::

        store = SessionMemoryStore()
        store.open("s1")
        store.record("s1", state)
        ctx = store.get_context("s1")
    """

    def __init__(
        self,
        retention_seconds: float = 1800.0,
        stability_window: int = 5,
        trend_window: int = 3,
        baseline_alpha: float = 0.1,
        drift_threshold: float = 0.3,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.retention_seconds = retention_seconds
        self.stability_window = stability_window
        self.trend_window = trend_window
        self.baseline_alpha = baseline_alpha
        self.drift_threshold = drift_threshold
        self._clock = clock
        self._sessions: dict[str, _Session] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: FusionConfig, clock: Callable[[], float] = time.time
    ) -> SessionMemoryStore:
        return cls(
            retention_seconds=config.retention_seconds,
            stability_window=config.stability_window,
            trend_window=config.trend_window,
            baseline_alpha=config.baseline_alpha,
            drift_threshold=config.drift_threshold,
            clock=clock,
        )

    # -- Session lifecycle --------------------------------------------------

    def open(self, session_id: str) -> None:
        """Create *session_id* if it does not exist yet."""
        with self._lock:
            if session_id not in self._sessions:
                now = self._clock()
                self._sessions[session_id] = _Session(session_id, created_at=now, last_active=now)

    def close(self, session_id: str) -> None:
        """Discard *session_id* and all its history."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise StateError("Unknown session", session_id=session_id)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def sessions(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def purge_expired(self, now: float | None = None) -> list[str]:
        """Remove sessions idle for longer than the retention window.

        Sessions whose lock is currently held are skipped. Returns the
        removed session ids.
        """
        now = self._clock() if now is None else now
        cutoff = now - self.retention_seconds
        removed: list[str] = []
        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if session.last_active >= cutoff:
                    continue
                if not session.lock.acquire(blocking=False):
                    continue
                try:
                    del self._sessions[session_id]
                    removed.append(session_id)
                finally:
                    session.lock.release()
        if removed:
            logger.info("Purged %d idle session(s)", len(removed))
        return removed

    @contextmanager
    def session(self, session_id: str) -> Iterator[SessionHandle]:
        """Hold *session_id*'s lock for the duration of the block."""
        entry = self._get(session_id)
        with entry.lock:
            yield SessionHandle(self, entry)

    # -- Locked convenience API ---------------------------------------------

    def record(
        self, session_id: str, state: EmotionalState, timestamp: float | None = None
    ) -> MemoryEntry:
        """Append *state* to the session's history."""
        with self.session(session_id) as handle:
            return handle.record(state, timestamp)

    def get_context(self, session_id: str, now: float | None = None) -> MemoryContext:
        with self.session(session_id) as handle:
            return handle.context(now)

    def history(
        self, session_id: str, limit: int | None = None, now: float | None = None
    ) -> list[MemoryEntry]:
        """Retained entries, oldest first; at most the last *limit*."""
        with self.session(session_id) as handle:
            return handle.history(limit, now)

    def stats(self, session_id: str, now: float | None = None) -> dict[str, Any]:
        """Summary counters and means over the retained window."""
        with self.session(session_id) as handle:
            entries = handle.history(now=now)
            session = handle._session
            counts = Counter(e.state.primary_emotion.value for e in entries)
            return {
                "session_id": session_id,
                "sample_count": len(entries),
                "total_recorded": session.total_recorded,
                "created_at": session.created_at,
                "last_active": session.last_active,
                "mean_pleasure": float(np.mean([e.state.pleasure for e in entries])) if entries else 0.0,
                "mean_arousal": float(np.mean([e.state.arousal for e in entries])) if entries else 0.5,
                "emotion_counts": dict(counts),
            }

    # -- Internals (caller holds the session lock) --------------------------

    def _get(self, session_id: str) -> _Session:
        with self._lock:
            entry = self._sessions.get(session_id)
        if entry is None:
            raise StateError("Unknown session", session_id=session_id)
        return entry

    def _expire(self, session: _Session, now: float) -> None:
        cutoff = now - self.retention_seconds
        if session.entries and session.entries[0].timestamp < cutoff:
            session.entries = [e for e in session.entries if e.timestamp >= cutoff]

    def _append(
        self, session: _Session, state: EmotionalState, timestamp: float | None
    ) -> MemoryEntry:
        ts = self._clock() if timestamp is None else timestamp
        entry = MemoryEntry(timestamp=ts, state=state)
        session.entries.append(entry)
        session.total_recorded += 1
        session.last_active = max(session.last_active, ts)
        self._expire(session, ts)
        session.baseline = self._update_baseline(session.baseline, state)

        drift = self._drift(session.entries, session.baseline)
        if drift > self.drift_threshold:
            logger.warning(
                "Emotional drift %.2f exceeds %.2f for session %s",
                drift,
                self.drift_threshold,
                session.session_id,
            )
        return entry

    def _history(
        self, session: _Session, limit: int | None, now: float | None
    ) -> list[MemoryEntry]:
        self._expire(session, self._clock() if now is None else now)
        entries = list(session.entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def _context(self, session: _Session, now: float | None) -> MemoryContext:
        self._expire(session, self._clock() if now is None else now)
        entries = session.entries
        baseline = session.baseline or EmotionalBaseline()
        return MemoryContext(
            session_id=session.session_id,
            trend=self._trend(entries),
            dominant_emotion=self._dominant(entries),
            stability=self._stability(entries),
            sample_count=len(entries),
            baseline=baseline,
            drift=self._drift(entries, session.baseline),
        )

    # -- Aggregates ---------------------------------------------------------

    def _trend(self, entries: list[MemoryEntry]) -> Trend:
        if len(entries) < MIN_TREND_ENTRIES:
            return "neutral"
        w = self.trend_window
        recent = [e.state.pleasure for e in entries[-w:]]
        previous = [e.state.pleasure for e in entries[-2 * w:-w]]
        diff = float(np.mean(recent)) - float(np.mean(previous))
        if diff > TREND_THRESHOLD:
            return "positive"
        if diff < -TREND_THRESHOLD:
            return "negative"
        return "neutral"

    @staticmethod
    def _dominant(entries: list[MemoryEntry]) -> Emotion:
        if not entries:
            return Emotion.NEUTRAL
        counts: Counter[Emotion] = Counter()
        last_seen: dict[Emotion, int] = {}
        for i, e in enumerate(entries):
            counts[e.state.primary_emotion] += 1
            last_seen[e.state.primary_emotion] = i
        return max(counts, key=lambda emotion: (counts[emotion], last_seen[emotion]))

    def _stability(self, entries: list[MemoryEntry]) -> float:
        window = entries[-self.stability_window:]
        if len(window) < 2:
            return NEUTRAL_STABILITY
        var_p = float(np.var([e.state.pleasure for e in window]))
        var_a = float(np.var([e.state.arousal for e in window]))
        return clamp(1.0 - (var_p + var_a) / 2.0, 0.0, 1.0)

    def _update_baseline(
        self, baseline: EmotionalBaseline | None, state: EmotionalState
    ) -> EmotionalBaseline:
        if baseline is None:
            return EmotionalBaseline(
                pleasure=state.pleasure,
                arousal=state.arousal,
                dominance=state.dominance,
                intensity=state.emotional_intensity,
            )
        a = self.baseline_alpha
        return EmotionalBaseline(
            pleasure=baseline.pleasure + a * (state.pleasure - baseline.pleasure),
            arousal=baseline.arousal + a * (state.arousal - baseline.arousal),
            dominance=baseline.dominance + a * (state.dominance - baseline.dominance),
            intensity=baseline.intensity + a * (state.emotional_intensity - baseline.intensity),
        )

    def _drift(self, entries: list[MemoryEntry], baseline: EmotionalBaseline | None) -> float:
        if baseline is None or not entries:
            return 0.0
        window = entries[-self.stability_window:]
        recent = (
            float(np.mean([e.state.pleasure for e in window])),
            float(np.mean([e.state.arousal for e in window])),
            float(np.mean([e.state.dominance for e in window])),
            float(np.mean([e.state.emotional_intensity for e in window])),
        )
        base = (baseline.pleasure, baseline.arousal, baseline.dominance, baseline.intensity)
        return float(np.mean([abs(r - b) for r, b in zip(recent, base)]))
