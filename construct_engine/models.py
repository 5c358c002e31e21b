"""Core domain models.

Quest templates, live quest instances, pacing phases and the result objects
returned by the ledger and the scheduler. Pydantic is used for validation and
serialisation at every data boundary (HTTP, MCP, session store).

All timestamps are float seconds from the injected clock.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

QuestState = Literal["active", "completed"]
Intensity = Literal["low", "medium", "medium-high", "high", "maximum"]


# ---------------------------------------------------------------------------
# Session inputs
# ---------------------------------------------------------------------------

class Character(BaseModel):
    """The player character a session is generated for."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    level: int = 1
    class_: str = Field(default="", alias="class")
    race: str = ""
    background: str = ""

    def summary(self) -> str:
        parts = [f"level {self.level}", self.race, self.class_]
        text = " ".join(p for p in parts if p)
        if self.name:
            text = f"{self.name}, {text}"
        if self.background:
            text += f" ({self.background} background)"
        return text


class SessionConfig(BaseModel):
    """Setup choices for one session."""

    theme: str = "Classic D&D"
    difficulty: str = "Medium"
    session_time: int = 30  # minutes


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------

class QuestDefinition(BaseModel):
    """A static, reusable quest blueprint from the template catalog."""

    title: str
    description: str
    objectives: list[str]
    difficulty: str  # unknown values fall back to default XP and cycle steps
    type: str  # unknown types are never theme-compatible
    rewards: list[str] = Field(default_factory=list)
    recommended_level: int = 1
    suitable_classes: list[str] = Field(default_factory=list)
    theme: str = ""


class ProgressEntry(BaseModel):
    objective_index: int
    description: str = ""
    timestamp: float
    xp_gained: int = 0


class NPC(BaseModel):
    id: str
    type: str
    name: str
    role: str
    disposition: str = "neutral"
    last_interaction: float | None = None


class Location(BaseModel):
    id: str
    name: str
    type: str
    description: str
    explored: bool = False
    discoveries: list[str] = Field(default_factory=list)
    connected_locations: list[str] = Field(default_factory=list)


class QuestInstance(QuestDefinition):
    """A live activation of a template within one session."""

    id: str
    status: QuestState = "active"
    progress: list[ProgressEntry] = Field(default_factory=list)
    start_time: float
    completed_at: float | None = None
    npcs: list[NPC] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)
    enhanced_description: str = ""
    personal_elements: list[str] = Field(default_factory=list)

    def completed_objectives(self) -> list[int]:
        return [p.objective_index for p in self.progress]

    def is_complete(self) -> bool:
        """True when every objective index has at least one progress entry."""
        return set(self.completed_objectives()) == set(range(len(self.objectives)))


class ProgressDetails(BaseModel):
    """What external gameplay reports when an objective is achieved."""

    description: str = ""
    xp_gained: int = 0


class ProgressResult(BaseModel):
    completed: Literal[False] = False
    message: str
    quest: QuestInstance


class CompletionResult(BaseModel):
    completed: Literal[True] = True
    message: str
    rewards: list[str]
    xp_gained: int
    quest: QuestInstance
    next_quest: QuestInstance | None = None
    next_quest_accepted: bool = False


class HistoryEntry(BaseModel):
    quest_id: str
    type: str
    difficulty: str
    completed_at: float
    xp_gained: int


class QuestStatistics(BaseModel):
    total_quests: int
    active_quests: int
    completed_quests: int
    completed_by_type: dict[str, int] = Field(default_factory=dict)
    completed_by_difficulty: dict[str, int] = Field(default_factory=dict)
    most_completed_type: str | None = None
    most_completed_difficulty: str | None = None
    average_completion_time: int = 0  # whole minutes
    total_xp_from_quests: int = 0


class ActiveQuestSummary(BaseModel):
    id: str
    title: str
    progress: float  # percent
    objectives: list[str]
    completed_objectives: list[int]


class QuestStatus(BaseModel):
    active_quests: list[ActiveQuestSummary]
    next_quest_available: bool
    quest_history: list[HistoryEntry]
    statistics: QuestStatistics


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------

class SessionPhase(BaseModel):
    name: str
    fraction: float
    intensity: Intensity
    description: str
    start_offset: float = 0.0  # seconds from session start
    target_duration: float = 0.0  # seconds


class PhaseRecord(BaseModel):
    """A finished phase: how long it actually ran against its target."""

    phase: str
    actual_duration: float
    target_duration: float


class TimeRemaining(BaseModel):
    phase: int  # whole seconds
    session: int


class PhaseGuidance(BaseModel):
    phase: str
    intensity: Intensity
    description: str
    time_remaining: TimeRemaining
    suggestions: list[str]
    pacing: str


class TransitionResult(BaseModel):
    transitioned: bool
    from_phase: str | None = None
    to_phase: str | None = None
    guidance: PhaseGuidance | None = None


class SessionStats(BaseModel):
    elapsed_time: float
    total_time: float
    current_phase: str
    progress: float  # percent
    phase_history: list[PhaseRecord]
    time_remaining: float
