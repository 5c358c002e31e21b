"""Quest status, progress and completion endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from construct_engine.models import ProgressDetails
from construct_engine.quests import (
    ObjectiveOutOfRangeError,
    QuestIncompleteError,
    QuestNotFoundError,
)
from construct_engine.session import (
    DuplicateQuestError,
    GameSession,
    InvalidQuestError,
    QuestCapacityError,
)

from .deps import get_session
from .models import AcceptQuestBody, ProgressBody

router = APIRouter()


@router.get("/sessions/{session_id}/quests")
async def quest_status(session: GameSession = Depends(get_session)):
    """Active quests with progress, history and statistics."""
    return session.ledger.status()


@router.get("/sessions/{session_id}/quests/statistics")
async def quest_statistics(session: GameSession = Depends(get_session)):
    """Completion statistics folded from the completed-quest log."""
    return session.ledger.statistics()


@router.get("/sessions/{session_id}/quests/recommendations")
async def quest_recommendations(limit: int = 3, session: GameSession = Depends(get_session)):
    """Best-fitting templates for the session's character and theme."""
    return session.recommendations(limit)


@router.post("/sessions/{session_id}/quests/accept")
async def accept_quest(body: AcceptQuestBody, session: GameSession = Depends(get_session)):
    """Activate a pending follow-on quest if the session has room for it."""
    try:
        return session.accept_quest(body.quest)
    except InvalidQuestError as e:
        raise HTTPException(400, str(e))
    except (DuplicateQuestError, QuestCapacityError) as e:
        raise HTTPException(409, str(e))


@router.post("/sessions/{session_id}/quests/{quest_id}/progress")
async def record_progress(
    quest_id: str, body: ProgressBody, session: GameSession = Depends(get_session)
):
    """Record a completed objective; completes the quest when all are done."""
    details = ProgressDetails(description=body.description, xp_gained=body.xp_gained)
    try:
        return await session.record_progress(quest_id, body.objective_index, details)
    except QuestNotFoundError:
        raise HTTPException(404, "Quest not found")
    except ObjectiveOutOfRangeError as e:
        raise HTTPException(400, str(e))


@router.post("/sessions/{session_id}/quests/{quest_id}/complete")
async def complete_quest(quest_id: str, session: GameSession = Depends(get_session)):
    """Complete a quest whose objectives are all recorded."""
    try:
        return await session.complete_quest(quest_id)
    except QuestNotFoundError:
        raise HTTPException(404, "Quest not found")
    except QuestIncompleteError as e:
        raise HTTPException(409, str(e))
