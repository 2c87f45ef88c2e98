"""Orchestrator -- run one conversational turn through the fusion pipeline.

Pipeline::

    frame ──> extract ──> score ──> voice classify ─┐
                                                    ├─> fuse ─> commit ─> map / advise
    text  ──> lexical classify ─────────────────────┘

The voice and text branches run concurrently on a thread pool and are
awaited for at most the configured latency budget. Memory and crisis
state are only touched after fusion, under the session lock, so a turn
that fails before that point leaves the session unchanged.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Any

import numpy as np

from .config import FusionConfig
from .crisis_scorer import VoiceCrisisScorer
from .crisis_state import CrisisStateMachine
from .events import EventSink, LoggingEventSink
from .exceptions import InputError, StateError, TurnTimeoutError
from .fusion import FusionEngine
from .memory import SessionMemoryStore
from .models import (
    CrisisLevel,
    EmotionalState,
    InteractionResult,
    TurnTelemetry,
    VoiceAnalysis,
)
from .prosody_extractor import ProsodyExtractor
from .response_advisor import ResponseStyleAdvisor
from .text_classifier import LexicalEmotionClassifier, TextAnalysis
from .voice_classifier import RuleBasedVoiceClassifier, VoiceEmotionClassifier
from .voice_mapper import VoiceParameterMapper

logger = logging.getLogger(__name__)

VOICE = "voice"
TEXT = "text"


class Orchestrator:
    """Per-turn coordinator owning the session stores and the worker pool.

    Parameters
    ----------
    config:
        Engine settings; defaults to :class:`FusionConfig` from the environment.
    sink:
        Receives crisis transitions and per-turn telemetry. Defaults to
        :class:`LoggingEventSink`.
    executor:
        Pool for the voice and text branches. When omitted the orchestrator
        creates one and shuts it down in :meth:`close`.

    Usage::

        with Orchestrator() as engine:
            engine.open_session("s1")
            result = engine.process_turn("s1", frame=samples, transcript="hi")
    """

    def __init__(
        self,
        config: FusionConfig | None = None,
        sink: EventSink | None = None,
        *,
        extractor: ProsodyExtractor | None = None,
        voice_classifier: VoiceEmotionClassifier | None = None,
        text_classifier: LexicalEmotionClassifier | None = None,
        executor: ThreadPoolExecutor | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or FusionConfig()
        self.sink = sink or LoggingEventSink()
        self._clock = clock

        self.scorer = VoiceCrisisScorer(
            thresholds=self.config.crisis_thresholds,
            extractor=extractor or ProsodyExtractor(),
        )
        self.voice_classifier = voice_classifier or RuleBasedVoiceClassifier()
        self.text_classifier = text_classifier or LexicalEmotionClassifier()
        self.fusion = FusionEngine.from_config(self.config)
        self.memory = SessionMemoryStore.from_config(self.config, clock=clock)
        self.crisis = CrisisStateMachine.from_config(self.config, sink=self.sink, clock=clock)
        self.mapper = VoiceParameterMapper.from_config(self.config)
        self.advisor = ResponseStyleAdvisor()

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=8, thread_name_prefix="affect-fusion"
        )

    # -- Lifecycle ------------------------------------------------------------

    def __enter__(self) -> Orchestrator:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool if this orchestrator created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def open_session(self, session_id: str) -> None:
        self.memory.open(session_id)
        self.crisis.start(session_id)

    def end_session(self, session_id: str) -> CrisisLevel:
        """Forget *session_id* and return its last committed crisis level."""
        self.memory.close(session_id)
        return self.crisis.end(session_id)

    def acknowledge(self, session_id: str) -> bool:
        return self.crisis.acknowledge(session_id)

    def purge_expired(self, now: float | None = None) -> list[str]:
        """Drop idle sessions from memory and the crisis state machine."""
        removed = self.memory.purge_expired(now)
        for session_id in removed:
            if session_id in self.crisis:
                self.crisis.end(session_id)
        return removed

    # -- Turn processing ------------------------------------------------------

    def process_turn(
        self,
        session_id: str,
        frame: Sequence[float] | np.ndarray | None = None,
        transcript: str | None = None,
        now: float | None = None,
    ) -> InteractionResult:
        """Analyze one turn and commit it to the session.

        A blank transcript counts as absent. When a branch fails or misses
        the latency budget the turn is served from the remaining branch and
        flagged ``degraded``.

        The turn is committed to memory and crisis state before any event is
        delivered. A sink error on a crisis transition propagates after the
        commit, so the turn must not be replayed; telemetry sink errors are
        logged and the result is still returned.

        Raises
        ------
        InputError
            If both inputs are absent, or every branch failed.
        TurnTimeoutError
            If inputs were present but no branch finished within the budget.
        StateError
            If *session_id* was never opened or has been purged.
        """
        started = time.perf_counter()
        ts = self._clock() if now is None else now

        if transcript is not None and not isinstance(transcript, str):
            raise InputError(
                f"Transcript must be a string, got {type(transcript).__name__}"
            )
        has_voice = frame is not None
        has_text = transcript is not None and bool(transcript.strip())
        if not has_voice and not has_text:
            raise InputError("Turn has neither an audio frame nor a transcript")
        if session_id not in self.memory or session_id not in self.crisis:
            raise StateError("Unknown session", session_id=session_id)

        futures: dict[str, Future[Any]] = {}
        if has_voice:
            futures[VOICE] = self._executor.submit(self._voice_branch, frame)
        if has_text:
            futures[TEXT] = self._executor.submit(self.text_classifier.classify, transcript)

        done, _ = wait(futures.values(), timeout=self.config.latency_budget_seconds)

        results: dict[str, Any] = {}
        faults: list[str] = []
        timed_out = False
        for name, future in futures.items():
            if future not in done:
                future.cancel()
                timed_out = True
                faults.append(f"{name}:timeout")
                logger.warning(
                    "Dropping %s branch for session %s: exceeded %.0f ms budget",
                    name,
                    session_id,
                    self.config.latency_budget_ms,
                )
                continue
            try:
                results[name] = future.result()
            except Exception as exc:
                faults.append(f"{name}:error")
                logger.warning(
                    "Dropping %s branch for session %s: %s", name, session_id, exc
                )

        if not results:
            if timed_out:
                raise TurnTimeoutError(
                    "No modality completed in time", budget_ms=self.config.latency_budget_ms
                )
            raise InputError(f"Every modality failed: {', '.join(faults)}")

        voice_analysis: VoiceAnalysis | None = None
        voice_state: EmotionalState | None = None
        if VOICE in results:
            voice_analysis, voice_state = results[VOICE]
        text_analysis: TextAnalysis | None = results.get(TEXT)
        text_state = text_analysis.state if text_analysis is not None else None

        fused = self.fusion.fuse(voice_state, text_state)

        with self.memory.session(session_id) as handle:
            handle.record(fused, ts)
            context = handle.context(ts)
            committed = self.crisis.observe(session_id, fused.crisis_level, ts)
            behavioral = self.crisis.behavioral(session_id)
        state = replace(fused, emotional_stability=context.stability).clamped()

        # Rendering follows the committed level, not the single-turn reading.
        render_state = replace(state, crisis_level=committed)
        voice_params = self.mapper.map(render_state)
        response_style = self.advisor.advise(render_state, committed)

        latency_ms = (time.perf_counter() - started) * 1000.0
        modalities = tuple(name for name in (VOICE, TEXT) if name in results)
        degraded = bool(faults)
        logger.debug(
            "Turn for session %s: %s in %.1f ms (committed %s)",
            session_id,
            "+".join(modalities),
            latency_ms,
            committed.value,
        )

        telemetry = TurnTelemetry(
            session_id=session_id,
            timestamp=ts,
            latency_ms=latency_ms,
            modalities=modalities,
            degraded=degraded,
            faults=tuple(faults),
            crisis_level=committed,
            primary_emotion=state.primary_emotion,
            text_risk=text_analysis.scan.risk if text_analysis is not None else 0.0,
            behavioral_risk=behavioral.risk,
        )
        try:
            self.sink.emit(telemetry)
        except Exception:
            logger.exception("Telemetry sink failed for session %s", session_id)

        return InteractionResult(
            emotional_state=state,
            crisis_level=committed,
            voice_params=voice_params,
            response_style=response_style,
            voice_analysis=voice_analysis,
            behavioral=behavioral,
            degraded=degraded,
            faults=tuple(faults),
            latency_ms=latency_ms,
        )

    def fallback_result(self) -> InteractionResult:
        """Neutral result for callers recovering from any engine error."""
        return InteractionResult(
            emotional_state=EmotionalState.neutral(),
            crisis_level=CrisisLevel.NONE,
            voice_params=self.mapper.neutral(),
            response_style=self.advisor.default(),
            degraded=True,
            faults=("fallback",),
        )

    # -- Branches -------------------------------------------------------------

    def _voice_branch(
        self, frame: Sequence[float] | np.ndarray
    ) -> tuple[VoiceAnalysis, EmotionalState]:
        analysis = self.scorer.analyze(frame)
        return analysis, self.voice_classifier.classify(analysis)
