"""Quest template catalog — a static, read-only list of QuestDefinitions."""

import json
from pathlib import Path

from construct_engine.models import QuestDefinition

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent.parent / "presets" / "quests.json"


def load_catalog(path: Path | None = None) -> list[QuestDefinition]:
    """Read the template catalog. A missing file yields an empty catalog."""
    path = path or DEFAULT_CATALOG_PATH
    if not path.is_file():
        return []
    return [QuestDefinition.model_validate(t) for t in json.loads(path.read_text())]
