"""Quest ledger — lifecycle of active and completed quests for one session.

State machine per quest:

    active ──(every objective index recorded)──▶ completed   (terminal)

On completion the quest leaves the active list, is appended to the completed
log and the history (both append-only), its XP is computed and a follow-on
quest is requested from the generator. The follow-on is returned, not
activated: whoever drives the ledger decides whether there is room for it
(see can_accept_quest()).

Statistics are folded from the completed log on every call; nothing is cached.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from construct_engine.models import (
    ActiveQuestSummary,
    Character,
    CompletionResult,
    HistoryEntry,
    ProgressDetails,
    ProgressEntry,
    ProgressResult,
    QuestInstance,
    QuestStatistics,
    QuestStatus,
    SessionConfig,
)

from .generator import QuestGenerator

logger = logging.getLogger(__name__)

MAX_ACTIVE_QUESTS = 3

BASE_XP: dict[str, int] = {
    "Easy": 300,
    "Medium": 750,
    "Hard": 1500,
}
DEFAULT_BASE_XP = 500
XP_PER_PROGRESS_ENTRY = 50

# Keeps progress timestamps strictly increasing when the clock does not move.
_TIMESTAMP_STEP = 1e-6


class QuestNotFoundError(LookupError):
    """Raised when a quest id is not in the active list."""


class ObjectiveOutOfRangeError(ValueError):
    """Raised when an objective index is outside the quest's objectives."""


class QuestIncompleteError(ValueError):
    """Raised when completion is requested before every objective is recorded."""


def calculate_quest_xp(quest: QuestInstance) -> int:
    """Base XP by difficulty plus 50 per progress entry (duplicates included)."""
    base = BASE_XP.get(quest.difficulty, DEFAULT_BASE_XP)
    return base + XP_PER_PROGRESS_ENTRY * len(quest.progress)


def _mode(counts: dict[str, int]) -> str | None:
    """Most frequent key; the first one counted wins ties."""
    if not counts:
        return None
    return max(counts, key=lambda k: counts[k])


class QuestLedger:
    def __init__(
        self,
        generator: QuestGenerator,
        character: Character,
        config: SessionConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._generator = generator
        self._character = character
        self._config = config
        self._clock = clock
        self._active: list[QuestInstance] = []
        self._completed: list[QuestInstance] = []
        self._history: list[HistoryEntry] = []
        self._last_stamp = float("-inf")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def active_quests(self) -> tuple[QuestInstance, ...]:
        return tuple(self._active)

    @property
    def completed_quests(self) -> tuple[QuestInstance, ...]:
        return tuple(q.model_copy(deep=True) for q in self._completed)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def get_quest(self, quest_id: str) -> QuestInstance:
        for quest in self._active:
            if quest.id == quest_id:
                return quest
        raise QuestNotFoundError(f"Quest not found: {quest_id}")

    def can_accept_quest(self) -> bool:
        return len(self._active) < MAX_ACTIVE_QUESTS

    def has_quest(self, quest_id: str) -> bool:
        """True if the id is active or already in the completed log."""
        return any(q.id == quest_id for q in (*self._active, *self._completed))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize_session(
        self, character: Character | None = None, config: SessionConfig | None = None
    ) -> list[QuestInstance]:
        """Generate the opening quest; it becomes the only active quest."""
        if character is not None:
            self._character = character
        if config is not None:
            self._config = config
        quest = await self._generator.generate(self._character, self._config)
        self._active = [quest]
        logger.info("Session initialized with quest %s (%r)", quest.id, quest.title)
        return list(self._active)

    def admit(self, quest: QuestInstance) -> None:
        """Add a quest to the active list. The cap is not checked here."""
        self._active.append(quest)
        logger.info("Quest %s (%r) admitted, %d active", quest.id, quest.title, len(self._active))

    async def record_progress(
        self, quest_id: str, objective_index: int, details: ProgressDetails
    ) -> ProgressResult | CompletionResult:
        """Record one objective completion; completes the quest when all are covered."""
        quest = self.get_quest(quest_id)
        if not 0 <= objective_index < len(quest.objectives):
            raise ObjectiveOutOfRangeError(
                f"Objective {objective_index} out of range for quest {quest_id} "
                f"({len(quest.objectives)} objectives)"
            )

        entry = ProgressEntry(
            objective_index=objective_index,
            description=details.description,
            timestamp=self._stamp(),
            xp_gained=details.xp_gained,
        )
        covered = set(quest.completed_objectives()) | {objective_index}
        if covered == set(range(len(quest.objectives))):
            return await self._complete(quest, entry)

        quest.progress.append(entry)
        return ProgressResult(message=f"Progress updated: {details.description}", quest=quest)

    async def complete_quest(self, quest_id: str) -> CompletionResult:
        quest = self.get_quest(quest_id)
        if not quest.is_complete():
            missing = sorted(set(range(len(quest.objectives))) - set(quest.completed_objectives()))
            raise QuestIncompleteError(f"Quest {quest_id} has unfinished objectives: {missing}")
        return await self._complete(quest)

    async def _complete(
        self, quest: QuestInstance, entry: ProgressEntry | None = None
    ) -> CompletionResult:
        """Finish `quest`, appending the pending `entry` first.

        The follow-on is generated before anything is mutated, so a failure
        there leaves the quest active and its progress unchanged.
        """
        next_quest = await self._generator.generate_next(quest, self._character, self._config)

        if entry is not None:
            quest.progress.append(entry)
        quest.status = "completed"
        quest.completed_at = self._stamp()
        xp = calculate_quest_xp(quest)

        self._active = [q for q in self._active if q.id != quest.id]
        self._completed.append(quest)
        self._history.append(HistoryEntry(
            quest_id=quest.id,
            type=quest.type,
            difficulty=quest.difficulty,
            completed_at=quest.completed_at,
            xp_gained=xp,
        ))
        logger.info("Quest %s (%r) completed for %d XP", quest.id, quest.title, xp)

        return CompletionResult(
            message=f"Quest completed: {quest.title}!",
            rewards=list(quest.rewards),
            xp_gained=xp,
            quest=quest.model_copy(deep=True),
            next_quest=next_quest,
        )

    def _stamp(self) -> float:
        now = self._clock()
        if now <= self._last_stamp:
            now = self._last_stamp + _TIMESTAMP_STEP
        self._last_stamp = now
        return now

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def average_completion_time(self) -> int:
        """Mean start→completion time in whole minutes, 0 with nothing completed."""
        if not self._completed:
            return 0
        total = sum(
            q.completed_at - q.start_time
            for q in self._completed
            if q.completed_at is not None
        )
        minutes = total / len(self._completed) / 60
        return int(minutes + 0.5)

    def statistics(self) -> QuestStatistics:
        by_type: dict[str, int] = {}
        by_difficulty: dict[str, int] = {}
        for quest in self._completed:
            by_type[quest.type] = by_type.get(quest.type, 0) + 1
            by_difficulty[quest.difficulty] = by_difficulty.get(quest.difficulty, 0) + 1

        return QuestStatistics(
            total_quests=len(self._active) + len(self._completed),
            active_quests=len(self._active),
            completed_quests=len(self._completed),
            completed_by_type=by_type,
            completed_by_difficulty=by_difficulty,
            most_completed_type=_mode(by_type),
            most_completed_difficulty=_mode(by_difficulty),
            average_completion_time=self.average_completion_time(),
            total_xp_from_quests=sum(calculate_quest_xp(q) for q in self._completed),
        )

    def status(self) -> QuestStatus:
        return QuestStatus(
            active_quests=[
                ActiveQuestSummary(
                    id=q.id,
                    title=q.title,
                    progress=len(q.progress) / len(q.objectives) * 100 if q.objectives else 0.0,
                    objectives=list(q.objectives),
                    completed_objectives=q.completed_objectives(),
                )
                for q in self._active
            ],
            next_quest_available=self.can_accept_quest(),
            quest_history=list(self._history),
            statistics=self.statistics(),
        )
