"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings, check-connection), sessions
(create, get, end, pacing) and quests (status, statistics, recommendations,
progress, completion, accept). Quest and pacing resources are nested under
/api/sessions/{session_id}/.

Sessions live in the app's registry (app.state.sessions); each holds its own
quest ledger and pacing scheduler.
"""

from fastapi import APIRouter

from .quests import router as quests_router
from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(sessions_router)
router.include_router(quests_router)
