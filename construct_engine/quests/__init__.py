"""Quest generation and the per-session quest ledger."""

from .catalog import load_catalog  # noqa: F401
from .generator import (  # noqa: F401
    QuestGenerator,
    next_difficulty,
    next_quest_type,
    select_template,
)
from .ledger import (  # noqa: F401
    MAX_ACTIVE_QUESTS,
    ObjectiveOutOfRangeError,
    QuestIncompleteError,
    QuestLedger,
    QuestNotFoundError,
    calculate_quest_xp,
)
