"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, Field

from construct_engine.models import Character, QuestInstance, SessionConfig


class CreateSession(BaseModel):
    character: Character = Field(default_factory=Character)
    config: SessionConfig | None = None


class ProgressBody(BaseModel):
    objective_index: int
    description: str = ""
    xp_gained: int = 0


class AcceptQuestBody(BaseModel):
    quest: QuestInstance


class CheckConnectionBody(BaseModel):
    provider_url: str
    api_key: str = ""
