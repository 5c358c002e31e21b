"""File-based JSON storage for session records and app settings.

Data layout:
  data/
    records/                   Key-value records, one JSON file per key
      session-state-<id>.json  {start_time, duration_minutes, is_active, config}
      timer-state-<id>.json    Client countdown state (cleared with the session)
    config.json                App settings (narrative backend, session defaults)
  presets/
    quests.json                Built-in read-only quest template catalog

Record keys are slugified into file names (see slugify()).

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates — llm_connection merged key-by-key,
scalars overwritten.
"""

# Re-export all public symbols so `from construct_engine import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    load,
    presets_dir,
    records_dir,
    remove,
    save,
    slugify,
)

from .sessions import (  # noqa: F401
    DEFAULT_DURATION_MINUTES,
    activate_session_state,
    clear_all_session_state,
    end_session,
    get_session_state,
    get_timer_state,
    has_active_session,
    initialize_session_state,
    save_timer_state,
)

from .config import (  # noqa: F401
    get_config,
    update_config,
)
