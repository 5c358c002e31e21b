"""Narrative pacing scheduler — timed story phases for one session.

The session length picks a fixed phase plan once, at construction:

  ≤ 30 min   hook 20% → action 50% → climax 30%
  ≤ 60 min   introduction 20% → development 40% → climax 30% → resolution 10%
  longer     introduction 15% → exploration 25% → rising_action 25%
             → climax 25% → resolution 10%

Phases are contiguous: start_offset(i) is the sum of the target durations
before it, and the last phase is open-ended. There is no background timer;
the session driver polls advance(), which moves forward to whichever phase
contains the current elapsed time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from construct_engine.models import (
    PhaseGuidance,
    PhaseRecord,
    SessionPhase,
    SessionStats,
    TimeRemaining,
    TransitionResult,
)

logger = logging.getLogger(__name__)

PhaseChangeCallback = Callable[[TransitionResult], None]

# (name, fraction, intensity, description)
_QUICK_PLAN = [
    ("hook", 0.2, "medium", "Establish immediate conflict or goal"),
    ("action", 0.5, "high", "Drive toward main objective"),
    ("climax", 0.3, "maximum", "Resolve central conflict"),
]
_STANDARD_PLAN = [
    ("introduction", 0.2, "low", "Set scene and introduce key elements"),
    ("development", 0.4, "medium", "Build tension and complexity"),
    ("climax", 0.3, "high", "Major confrontation or challenge"),
    ("resolution", 0.1, "medium", "Wrap up and consequences"),
]
_EXTENDED_PLAN = [
    ("introduction", 0.15, "low", "Rich world-building and character introduction"),
    ("exploration", 0.25, "medium", "Deep environment and lore exploration"),
    ("rising_action", 0.25, "medium-high", "Escalating challenges and reveals"),
    ("climax", 0.25, "high", "Epic confrontation or challenge"),
    ("resolution", 0.1, "low", "Satisfying conclusion and future hooks"),
]

PHASE_SUGGESTIONS: dict[str, list[str]] = {
    "hook": [
        "Present immediate danger or intrigue",
        "Introduce a time-sensitive element",
        "Give players a clear initial goal",
    ],
    "introduction": [
        "Establish the scene and atmosphere",
        "Introduce key NPCs or locations",
        "Present the main quest hook",
    ],
    "exploration": [
        "Reveal interesting environment details",
        "Present opportunities for character development",
        "Drop hints about future challenges",
    ],
    "development": [
        "Escalate existing conflicts",
        "Introduce complications",
        "Deepen character relationships",
    ],
    "rising_action": [
        "Increase stakes and tension",
        "Present difficult choices",
        "Reveal plot twists",
    ],
    "action": [
        "Keep combat dynamic and interesting",
        "Use environment in encounters",
        "Create urgency through time pressure",
    ],
    "climax": [
        "Make the final challenge epic",
        "Tie together previous events",
        "Give each player a moment to shine",
    ],
    "resolution": [
        "Provide satisfying conclusion",
        "Show consequences of choices",
        "Plant hooks for future sessions",
    ],
}

# (upper bound on phase progress, recommendation); the last entry catches the rest
PACING_RECOMMENDATIONS = [
    (0.3, "You have time to develop this phase fully. Focus on rich details and player engagement."),
    (0.7, "Maintain current pacing. Ensure key phase elements are being addressed."),
    (0.9, "Begin wrapping up this phase. Prepare for transition to next phase."),
    (None, "Quickly conclude current phase elements. Ready for phase transition."),
]


def build_phase_plan(session_minutes: float) -> list[SessionPhase]:
    """Choose the phase plan for a session length and lay out its offsets."""
    if session_minutes <= 30:
        plan = _QUICK_PLAN
    elif session_minutes <= 60:
        plan = _STANDARD_PLAN
    else:
        plan = _EXTENDED_PLAN

    total = session_minutes * 60
    phases: list[SessionPhase] = []
    offset = 0.0
    for name, fraction, intensity, description in plan:
        target = fraction * total
        phases.append(SessionPhase(
            name=name,
            fraction=fraction,
            intensity=intensity,
            description=description,
            start_offset=offset,
            target_duration=target,
        ))
        offset += target
    return phases


def phase_suggestions(phase_name: str) -> list[str]:
    return list(PHASE_SUGGESTIONS.get(phase_name, []))


def pacing_recommendation(phase: SessionPhase, time_remaining: float) -> str:
    """Recommendation for how far into the phase we are (1 - remaining/target)."""
    if phase.target_duration > 0:
        progress = 1 - time_remaining / phase.target_duration
    else:
        progress = 1.0
    for bound, text in PACING_RECOMMENDATIONS:
        if bound is None or progress < bound:
            return text
    return PACING_RECOMMENDATIONS[-1][1]


class PacingScheduler:
    """Tracks which narrative phase a session is in.

    Args:
        session_minutes: Total session length in minutes.
        clock:           Returns the current time in seconds. The session
                         starts at the clock's value on construction.
    """

    def __init__(
        self,
        session_minutes: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self.session_minutes = session_minutes
        self.total_time = session_minutes * 60
        self.phases: tuple[SessionPhase, ...] = tuple(build_phase_plan(session_minutes))
        self.session_start = clock()
        self.current_phase_index = 0
        self._phase_start_times: dict[int, float] = {0: self.session_start}
        self._phase_history: list[PhaseRecord] = []
        self._on_change: PhaseChangeCallback | None = None

    @property
    def current_phase(self) -> SessionPhase:
        return self.phases[self.current_phase_index]

    @property
    def phase_history(self) -> list[PhaseRecord]:
        return list(self._phase_history)

    def elapsed(self) -> float:
        return self._clock() - self.session_start

    def _phase_index_at(self, elapsed: float) -> int:
        index = 0
        for i, phase in enumerate(self.phases):
            if elapsed >= phase.start_offset:
                index = i
        return index

    def current_guidance(self) -> PhaseGuidance:
        phase = self.current_phase
        elapsed = self.elapsed()
        phase_remaining = phase.target_duration - (elapsed - phase.start_offset)
        session_remaining = self.total_time - elapsed
        return PhaseGuidance(
            phase=phase.name,
            intensity=phase.intensity,
            description=phase.description,
            time_remaining=TimeRemaining(
                phase=max(0, int(phase_remaining)),
                session=max(0, int(session_remaining)),
            ),
            suggestions=phase_suggestions(phase.name),
            pacing=pacing_recommendation(phase, phase_remaining),
        )

    def advance(self) -> TransitionResult:
        """Move to the phase containing the current elapsed time, if later."""
        now = self._clock()
        new_index = self._phase_index_at(now - self.session_start)
        if new_index <= self.current_phase_index:
            return TransitionResult(transitioned=False)

        old_phase = self.current_phase
        self._phase_history.append(PhaseRecord(
            phase=old_phase.name,
            actual_duration=now - self._phase_start_times[self.current_phase_index],
            target_duration=old_phase.target_duration,
        ))
        self.current_phase_index = new_index
        self._phase_start_times[new_index] = now
        new_phase = self.current_phase
        logger.info("Pacing transition %s → %s", old_phase.name, new_phase.name)

        result = TransitionResult(
            transitioned=True,
            from_phase=old_phase.name,
            to_phase=new_phase.name,
            guidance=self.current_guidance(),
        )
        if self._on_change is not None:
            self._on_change(result)
        return result

    def on_phase_change(self, callback: PhaseChangeCallback) -> None:
        """Register the transition observer, replacing any previous one."""
        self._on_change = callback

    def session_stats(self) -> SessionStats:
        elapsed = self.elapsed()
        return SessionStats(
            elapsed_time=elapsed,
            total_time=self.total_time,
            current_phase=self.current_phase.name,
            progress=elapsed / self.total_time * 100 if self.total_time else 100.0,
            phase_history=self.phase_history,
            time_remaining=max(0.0, self.total_time - elapsed),
        )
