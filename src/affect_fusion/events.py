"""Structured event delivery.

The engine hands every committed crisis transition and every turn's
telemetry to an :class:`EventSink`. Sinks own their delivery failures;
errors raised by a sink propagate to the caller of the engine.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, Union

from .models import CrisisLevel, CrisisTransitionEvent, TurnTelemetry

logger = logging.getLogger(__name__)

Event = Union[CrisisTransitionEvent, TurnTelemetry]


class EventSink(Protocol):
    """Protocol for event consumers."""

    def emit(self, event: Event) -> None:
        ...


class LoggingEventSink:
    """Write events to a stdlib logger with the payload in ``extra``.

    Escalations to ``high`` or ``critical`` are logged at WARNING, other
    transitions at INFO and telemetry at DEBUG.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def emit(self, event: Event) -> None:
        payload = event.to_dict()
        if isinstance(event, CrisisTransitionEvent):
            level = (
                logging.WARNING
                if event.to_level >= CrisisLevel.HIGH and event.reason == "escalation"
                else logging.INFO
            )
            self.log.log(
                level,
                "Crisis transition for session %s: %s -> %s (%s)",
                event.session_id,
                event.from_level.value,
                event.to_level.value,
                event.reason,
                extra={"event": payload},
            )
        else:
            self.log.debug(
                "Turn for session %s took %.1f ms (degraded=%s)",
                event.session_id,
                event.latency_ms,
                event.degraded,
                extra={"event": payload},
            )


class MemoryEventSink:
    """Keep emitted events in an in-process list; thread-safe."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def transitions(self, session_id: str | None = None) -> list[CrisisTransitionEvent]:
        return [
            e
            for e in self.events
            if isinstance(e, CrisisTransitionEvent)
            and (session_id is None or e.session_id == session_id)
        ]

    def telemetry(self) -> list[TurnTelemetry]:
        return [e for e in self.events if isinstance(e, TurnTelemetry)]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class FanoutEventSink:
    """Deliver each event to several sinks.

    Every sink receives the event even if an earlier one fails; the first
    failure is re-raised once all sinks have been tried.
    """

    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def emit(self, event: Event) -> None:
        first_error: Exception | None = None
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception as exc:
                logger.warning("Event sink %r failed: %s", sink, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
