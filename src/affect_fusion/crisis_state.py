"""Crisis escalation state machine with downgrade hysteresis.

Escalations commit on the first higher reading. A downgrade commits only
after ``hysteresis_turns`` consecutive lower readings, to the highest of
those readings. ``critical`` is sticky: lower readings are ignored until
the session is acknowledged by a human or upstream system.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from .config import FusionConfig
from .events import EventSink
from .exceptions import StateError
from .models import BehavioralIndicators, CrisisLevel, CrisisTransitionEvent

logger = logging.getLogger(__name__)

RECENT_LEVELS = 10

RISING_AGITATION = 0.7
BASELINE_AGITATION = 0.2


def behavioral_indicators(levels: Sequence[CrisisLevel]) -> BehavioralIndicators:
    """Mood swing, agitation and impulsivity scores over a reading sequence.

    * mood swings: ``min(1, var(rank) / 4)``, needs 3 readings
    * agitation: 0.7 when the last 3 readings never fall and end higher
      than they started, otherwise 0.2; needs 2 readings
    * impulsivity: share of steps rising by 2 or more ranks, needs 3 readings
    """
    ranks = [level.rank for level in levels]
    swings = min(1.0, float(np.var(ranks)) / 4.0) if len(ranks) >= 3 else 0.0

    agitation = 0.0
    if len(ranks) >= 2:
        tail = ranks[-3:]
        rising = all(b >= a for a, b in zip(tail, tail[1:])) and tail[-1] > tail[0]
        agitation = RISING_AGITATION if rising else BASELINE_AGITATION

    impulsivity = 0.0
    if len(ranks) >= 3:
        spikes = sum(1 for a, b in zip(ranks, ranks[1:]) if b - a >= 2)
        impulsivity = min(1.0, spikes / len(ranks))

    return BehavioralIndicators(
        rapid_mood_swings=swings,
        agitation=agitation,
        impulsivity=impulsivity,
        risk=0.3 * swings + 0.25 * agitation + 0.2 * impulsivity,
    )


@dataclass
class CrisisState:
    """Mutable per-session state; guarded by ``lock``."""

    level: CrisisLevel = CrisisLevel.NONE
    recent: deque[CrisisLevel] = field(default_factory=lambda: deque(maxlen=RECENT_LEVELS))
    transitions: list[CrisisTransitionEvent] = field(default_factory=list)
    pending: list[CrisisLevel] = field(default_factory=list)
    acknowledged: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class CrisisStateMachine:
    """Track the committed crisis level of each session.

    Parameters
    ----------
    sink:
        Receives a :class:`CrisisTransitionEvent` for every committed change.
    hysteresis_turns:
        Consecutive lower readings required before a downgrade.
    """

    def __init__(
        self,
        sink: EventSink | None = None,
        hysteresis_turns: int = 2,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if hysteresis_turns < 1:
            raise ValueError("hysteresis_turns must be at least 1")
        self.sink = sink
        self.hysteresis_turns = hysteresis_turns
        self._clock = clock
        self._states: dict[str, CrisisState] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: FusionConfig,
        sink: EventSink | None = None,
        clock: Callable[[], float] = time.time,
    ) -> CrisisStateMachine:
        return cls(sink=sink, hysteresis_turns=config.hysteresis_turns, clock=clock)

    # -- Lifecycle ------------------------------------------------------------

    def start(self, session_id: str) -> None:
        """Begin tracking *session_id* at ``none``; no-op if already tracked."""
        with self._lock:
            self._states.setdefault(session_id, CrisisState())

    def end(self, session_id: str) -> CrisisLevel:
        """Stop tracking *session_id* and return its last committed level."""
        with self._lock:
            state = self._states.pop(session_id, None)
        if state is None:
            raise StateError("Unknown session", session_id=session_id)
        return state.level

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._states

    # -- Queries --------------------------------------------------------------

    def level(self, session_id: str) -> CrisisLevel:
        return self._get(session_id).level

    def history(self, session_id: str) -> list[CrisisTransitionEvent]:
        """Committed transitions of *session_id*, oldest first."""
        state = self._get(session_id)
        with state.lock:
            return list(state.transitions)

    def recent_levels(self, session_id: str) -> list[CrisisLevel]:
        state = self._get(session_id)
        with state.lock:
            return list(state.recent)

    def behavioral(self, session_id: str) -> BehavioralIndicators:
        """Behavioral indicators over the session's recent readings."""
        return behavioral_indicators(self.recent_levels(session_id))

    # -- Transitions ----------------------------------------------------------

    def observe(
        self, session_id: str, level: CrisisLevel, now: float | None = None
    ) -> CrisisLevel:
        """Feed one turn's crisis reading and return the committed level."""
        state = self._get(session_id)
        ts = self._clock() if now is None else now
        with state.lock:
            state.recent.append(level)
            current = state.level
            if level is CrisisLevel.CRITICAL:
                # Each critical reading needs its own acknowledgement.
                state.acknowledged = False

            if level > current:
                state.pending.clear()
                self._commit(session_id, state, level, ts, "escalation")
            elif level == current:
                state.pending.clear()
            elif current is CrisisLevel.CRITICAL and not state.acknowledged:
                logger.debug(
                    "Holding critical level for unacknowledged session %s", session_id
                )
            else:
                state.pending.append(level)
                if len(state.pending) >= self.hysteresis_turns:
                    target = max(state.pending)
                    reason = (
                        "acknowledged"
                        if current is CrisisLevel.CRITICAL
                        else "deescalation"
                    )
                    state.pending.clear()
                    state.acknowledged = False
                    self._commit(session_id, state, target, ts, reason)
            return state.level

    def acknowledge(self, session_id: str) -> bool:
        """Allow a ``critical`` session to de-escalate through normal hysteresis.

        Returns ``True`` if the session was at ``critical``; otherwise the
        call has no effect.
        """
        state = self._get(session_id)
        with state.lock:
            if state.level is not CrisisLevel.CRITICAL:
                return False
            state.acknowledged = True
            state.pending.clear()
        logger.info("Crisis acknowledged for session %s", session_id)
        return True

    # -- Internals ------------------------------------------------------------

    def _get(self, session_id: str) -> CrisisState:
        with self._lock:
            state = self._states.get(session_id)
        if state is None:
            raise StateError("Unknown session", session_id=session_id)
        return state

    def _commit(
        self,
        session_id: str,
        state: CrisisState,
        to_level: CrisisLevel,
        ts: float,
        reason: str,
    ) -> None:
        event = CrisisTransitionEvent(
            session_id=session_id,
            from_level=state.level,
            to_level=to_level,
            timestamp=ts,
            reason=reason,  # type: ignore[arg-type]
        )
        state.level = to_level
        state.transitions.append(event)
        if self.sink is not None:
            self.sink.emit(event)
