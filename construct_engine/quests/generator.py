"""Quest generation — template selection, enhancement, custom synthesis.

Flow for generate():
  1. Filter the catalog by suitability (level gate per difficulty AND quest
     type compatible with the session theme).
  2. Optional follow-on narrowing: exact difficulty required, quest type
     preferred.
  3. Non-empty → pick uniformly at random and enhance through the narrative
     gateway. Empty → synthesize a single-objective custom quest.
  4. Wrap the result as an active QuestInstance with NPCs and locations.

Gateway failures never abort generation: enhancement falls back to the raw
template description, synthesis to a fixed description.
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from collections.abc import Callable, Sequence

from construct_engine.llm import NarrativeGateway, NarrativeGatewayError
from construct_engine.models import (
    Character,
    QuestDefinition,
    QuestInstance,
    SessionConfig,
)
from construct_engine.prompts import (
    CUSTOM_QUEST_PROMPT,
    ENHANCE_QUEST_PROMPT,
    PromptError,
    render_prompt,
)

from .world import generate_locations, generate_npcs, is_theme_compatible

logger = logging.getLogger(__name__)

CUSTOM_QUEST_TITLE = "Custom Adventure"
CUSTOM_QUEST_OBJECTIVES = ["Complete the unique adventure"]
CUSTOM_QUEST_REWARDS = ["Experience points", "Treasure", "Story progression"]

NEXT_QUEST_TYPE: dict[str, str] = {
    "side": "main",
    "main": "side",
    "random": "side",
    "custom": "random",
}
DEFAULT_NEXT_QUEST_TYPE = "random"

# Hard is absorbing
NEXT_DIFFICULTY: dict[str, str] = {
    "Easy": "Medium",
    "Medium": "Hard",
    "Hard": "Hard",
}
DEFAULT_NEXT_DIFFICULTY = "Medium"


def default_id_factory() -> str:
    return uuid.uuid4().hex


def next_quest_type(previous_type: str) -> str:
    return NEXT_QUEST_TYPE.get(previous_type, DEFAULT_NEXT_QUEST_TYPE)


def next_difficulty(previous_difficulty: str) -> str:
    return NEXT_DIFFICULTY.get(previous_difficulty, DEFAULT_NEXT_DIFFICULTY)


def level_allows(level: int, difficulty: str) -> bool:
    """Easy ⇒ level ≤ 5, Medium ⇒ 3 ≤ level ≤ 10, Hard ⇒ level ≥ 7."""
    if difficulty == "Easy":
        return level <= 5
    if difficulty == "Medium":
        return 3 <= level <= 10
    if difficulty == "Hard":
        return level >= 7
    return True


def is_quest_suitable(character: Character, quest: QuestDefinition, theme: str) -> bool:
    level = character.level or 1
    return level_allows(level, quest.difficulty) and is_theme_compatible(quest.type, theme)


def select_template(
    candidates: Sequence[QuestDefinition], rng: random.Random
) -> QuestDefinition:
    """Pick one candidate uniformly at random from the given source."""
    return candidates[rng.randrange(len(candidates))]


def quest_score(character: Character, quest: QuestDefinition) -> int:
    """Suitability score used to rank recommendations."""
    score = max(0, 10 - abs(character.level - quest.recommended_level))
    if character.class_ in quest.suitable_classes:
        score += 5
    if character.background and character.background in quest.theme:
        score += 3
    return score


def personal_elements(quest: QuestDefinition, character: Character) -> list[str]:
    """Character-specific hooks added to an enhanced quest."""
    elements: list[str] = []
    if character.background:
        elements.append(
            f"Your {character.background} background suggests you might have connections here."
        )
    if character.class_ == "Cleric" and any("temple" in o for o in quest.objectives):
        elements.append("As a cleric, you feel a divine connection to this sacred place.")
    if character.class_ == "Rogue" and any("stealth" in o for o in quest.objectives):
        elements.append("Your rogue training prepares you perfectly for this mission.")
    return elements


class QuestGenerator:
    """Selects or synthesizes quests for one session.

    Args:
        gateway:    Narrative gateway used for enhancement and synthesis.
        catalog:    Template catalog (read-only, scanned by filter).
        rng:        Random source for template selection.
        id_factory: Produces unique ids for quests, NPCs and locations.
        clock:      Returns the current time in seconds.
    """

    def __init__(
        self,
        gateway: NarrativeGateway,
        catalog: Sequence[QuestDefinition],
        rng: random.Random | None = None,
        id_factory: Callable[[], str] = default_id_factory,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._catalog = tuple(catalog)
        self._rng = rng or random.Random()
        self._new_id = id_factory
        self._clock = clock

    @property
    def catalog(self) -> tuple[QuestDefinition, ...]:
        return self._catalog

    def suitable_templates(self, character: Character, theme: str) -> list[QuestDefinition]:
        return [q for q in self._catalog if is_quest_suitable(character, q, theme)]

    async def generate(
        self,
        character: Character,
        config: SessionConfig,
        *,
        quest_type: str | None = None,
        difficulty: str | None = None,
    ) -> QuestInstance:
        """Build an active quest for the character and session config."""
        candidates = self.suitable_templates(character, config.theme)
        if difficulty is not None:
            candidates = [q for q in candidates if q.difficulty == difficulty]
        if quest_type is not None:
            preferred = [q for q in candidates if q.type == quest_type]
            candidates = preferred or candidates

        if not candidates:
            logger.info(
                "No suitable template (theme=%s level=%d), synthesizing custom quest",
                config.theme, character.level,
            )
            definition = await self.create_custom_quest(
                character, config, difficulty=difficulty or config.difficulty,
            )
            description = definition.description
            elements: list[str] = []
        else:
            definition = select_template(candidates, self._rng)
            description, elements = await self.enhance_quest(definition, character, config)

        return QuestInstance(
            **definition.model_dump(exclude={"theme"}),
            theme=config.theme,
            id=self._new_id(),
            status="active",
            progress=[],
            start_time=self._clock(),
            npcs=generate_npcs(definition.type, self._new_id),
            locations=generate_locations(config.theme, self._new_id),
            enhanced_description=description,
            personal_elements=elements,
        )

    async def enhance_quest(
        self, quest: QuestDefinition, character: Character, config: SessionConfig
    ) -> tuple[str, list[str]]:
        """Return (enhanced_description, personal_elements) for a template."""
        try:
            prompt = render_prompt(ENHANCE_QUEST_PROMPT, {
                "character": character.model_dump(),
                "quest": quest.model_dump(),
                "objectives": ", ".join(quest.objectives),
            })
            text = await self._gateway.generate(
                prompt, config, character, [], stage="quest_enhancement",
            )
        except (NarrativeGatewayError, PromptError) as e:
            logger.warning("Quest enhancement failed for %r, using template text: %s", quest.title, e)
            return quest.description, []
        return text, personal_elements(quest, character)

    async def create_custom_quest(
        self, character: Character, config: SessionConfig, *, difficulty: str
    ) -> QuestDefinition:
        """Synthesize a single-objective custom quest through the gateway."""
        try:
            prompt = render_prompt(CUSTOM_QUEST_PROMPT, {
                "character": character.model_dump(),
                "config": config.model_dump(),
                "difficulty": difficulty,
            })
            description = await self._gateway.generate(
                prompt, config, character, [], stage="custom_quest",
            )
        except (NarrativeGatewayError, PromptError) as e:
            logger.warning("Custom quest synthesis failed, using fallback text: %s", e)
            description = f"An unexpected adventure awaits in the {config.theme} setting."
        return QuestDefinition(
            title=CUSTOM_QUEST_TITLE,
            description=description,
            type="custom",
            difficulty=difficulty,
            objectives=list(CUSTOM_QUEST_OBJECTIVES),
            rewards=list(CUSTOM_QUEST_REWARDS),
        )

    async def generate_next(
        self, previous: QuestInstance, character: Character, config: SessionConfig
    ) -> QuestInstance:
        """Generate the follow-on quest after `previous` completes.

        The type advances along the side/main cycle and the difficulty steps up
        (Hard stays Hard). The previous quest's theme is kept.
        """
        follow_config = config.model_copy(update={
            "theme": previous.theme or config.theme,
            "difficulty": next_difficulty(previous.difficulty),
        })
        return await self.generate(
            character,
            follow_config,
            quest_type=next_quest_type(previous.type),
            difficulty=follow_config.difficulty,
        )

    def recommendations(
        self, character: Character, theme: str, limit: int = 3
    ) -> list[QuestDefinition]:
        """Suitable templates ranked by quest_score, best first."""
        ranked = sorted(
            self.suitable_templates(character, theme),
            key=lambda q: quest_score(character, q),
            reverse=True,
        )
        return ranked[:limit]
