"""Session controller — owns one session's quest ledger and pacing scheduler.

A GameSession is constructed per play session and never shared. It wires the
generator, ledger and scheduler to the same clock, persists the session
record, and enforces the active-quest cap when follow-on quests are accepted.

Lifecycle:
  1. GameSession(...)          — nothing generated yet
  2. await start()             — opening quest, pacing plan, session record
  3. record_progress / complete_quest / accept_quest / poll  (repeatedly)
  4. end()                     — session record cleared
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence

from construct_engine import storage
from construct_engine.llm import NarrativeGateway
from construct_engine.models import (
    Character,
    CompletionResult,
    PhaseGuidance,
    ProgressDetails,
    ProgressResult,
    QuestDefinition,
    QuestInstance,
    SessionConfig,
    SessionStats,
    TransitionResult,
)
from construct_engine.pacing import PacingScheduler
from construct_engine.quests.generator import QuestGenerator, default_id_factory
from construct_engine.quests.ledger import QuestLedger

logger = logging.getLogger(__name__)


class QuestCapacityError(RuntimeError):
    """Raised when a quest is accepted while the active list is full."""


class DuplicateQuestError(ValueError):
    """Raised when a quest id is already active or completed in this session."""


class InvalidQuestError(ValueError):
    """Raised when an accepted quest is not a fresh, active quest."""


class SessionNotStartedError(RuntimeError):
    """Raised when pacing is used before start()."""


class GameSession:
    """One running session.

    Args:
        session_id:  Key for the persisted session record.
        character:   The player character.
        config:      Session setup (theme, difficulty, length).
        gateway:     Narrative gateway for quest flavor text.
        catalog:     Quest template catalog.
        rng:         Random source for template selection.
        id_factory:  Unique id source for quests, NPCs and locations.
        clock:       Current time in seconds, shared by ledger and scheduler.
        auto_accept: Admit follow-on quests automatically while there is room.
    """

    def __init__(
        self,
        session_id: str,
        character: Character,
        config: SessionConfig,
        gateway: NarrativeGateway,
        catalog: Sequence[QuestDefinition],
        *,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] = default_id_factory,
        clock: Callable[[], float] = time.time,
        auto_accept: bool = True,
    ) -> None:
        self.session_id = session_id
        self.character = character
        self.config = config
        self.auto_accept = auto_accept
        self._clock = clock
        self.generator = QuestGenerator(
            gateway, catalog, rng=rng, id_factory=id_factory, clock=clock,
        )
        self.ledger = QuestLedger(self.generator, character, config, clock=clock)
        self._scheduler: PacingScheduler | None = None

    @property
    def scheduler(self) -> PacingScheduler:
        if self._scheduler is None:
            raise SessionNotStartedError(f"Session {self.session_id} has not been started")
        return self._scheduler

    @property
    def started(self) -> bool:
        return self._scheduler is not None

    async def start(self) -> list[QuestInstance]:
        """Generate the opening quest, lay out the pacing plan and persist the record."""
        storage.initialize_session_state(
            self.session_id, self.config.model_dump(), start_time=self._clock(),
        )
        quests = await self.ledger.initialize_session()
        self._scheduler = PacingScheduler(self.config.session_time, clock=self._clock)
        storage.activate_session_state(self.session_id)
        logger.info(
            "Session %s started: %d min, theme=%s",
            self.session_id, self.config.session_time, self.config.theme,
        )
        return quests

    # ── Quests ───────────────────────────────────────────

    async def record_progress(
        self, quest_id: str, objective_index: int, details: ProgressDetails
    ) -> ProgressResult | CompletionResult:
        result = await self.ledger.record_progress(quest_id, objective_index, details)
        if isinstance(result, CompletionResult):
            self._maybe_accept(result)
        return result

    async def complete_quest(self, quest_id: str) -> CompletionResult:
        result = await self.ledger.complete_quest(quest_id)
        self._maybe_accept(result)
        return result

    def accept_quest(self, quest: QuestInstance) -> QuestInstance:
        """Admit a pending quest, enforcing the active-quest cap.

        Only fresh quests are admitted: active status, no progress, and an id
        this session has not seen.
        """
        if quest.status != "active" or quest.progress:
            raise InvalidQuestError(f"Quest {quest.id} is not a fresh active quest")
        if self.ledger.has_quest(quest.id):
            raise DuplicateQuestError(f"Quest {quest.id} is already part of session {self.session_id}")
        if not self.ledger.can_accept_quest():
            raise QuestCapacityError(
                f"Session {self.session_id} already has the maximum number of active quests"
            )
        self.ledger.admit(quest)
        return quest

    def _maybe_accept(self, result: CompletionResult) -> None:
        if not self.auto_accept or result.next_quest is None:
            return
        if self.ledger.can_accept_quest():
            self.ledger.admit(result.next_quest)
            result.next_quest_accepted = True
        else:
            logger.info(
                "Session %s at quest capacity, follow-on %s left pending",
                self.session_id, result.next_quest.id,
            )

    def recommendations(self, limit: int = 3) -> list[QuestDefinition]:
        return self.generator.recommendations(self.character, self.config.theme, limit)

    # ── Pacing ───────────────────────────────────────────

    def poll(self) -> TransitionResult:
        return self.scheduler.advance()

    def guidance(self) -> PhaseGuidance:
        return self.scheduler.current_guidance()

    def pacing_stats(self) -> SessionStats:
        return self.scheduler.session_stats()

    # ── Lifecycle ────────────────────────────────────────

    def summary(self) -> dict:
        return {
            "session_id": self.session_id,
            "character": self.character.model_dump(by_alias=True),
            "config": self.config.model_dump(),
            "active_quests": [q.model_dump() for q in self.ledger.active_quests],
            "guidance": self.guidance().model_dump() if self.started else None,
            "record": storage.get_session_state(self.session_id),
        }

    def end(self) -> None:
        storage.end_session(self.session_id)
        logger.info("Session %s ended", self.session_id)
