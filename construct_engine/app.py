import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from construct_engine import storage
from construct_engine.quests import load_catalog
from construct_engine.routes import router

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(data_dir: Path | None = None) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)

    app = FastAPI(title="Construct Engine")
    app.state.sessions = {}
    app.state.catalog = load_catalog(storage.presets_dir() / "quests.json")
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
