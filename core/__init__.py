"""TodoQuest core library — quest ledger, progression and ranking engines.

Public API re-exports for convenient imports:
    from core import QuestStore, level_from_xp, query_quests, ...
"""

# Workspace & configuration
from core.workspace import (
    workspace_root,
    state_path,
    config_path,
    hooks_config_path,
    log_path,
)
from core.config import Config, load_config, ensure_workspace
from core.log import setup_logging

# File I/O
from core.fileio import (
    read_text,
    read_json,
    read_yaml,
    move_aside,
    write_json_atomic,
    write_yaml_atomic,
)

# Time helpers
from core.timeutil import (
    start_of_day,
    day_bounds,
    fmt_date_input,
    parse_date_input,
    clamp,
    progress_pct,
)

# Progression
from core.progression import (
    LevelInfo,
    Award,
    level_from_xp,
    title_for_level,
    base_xp_for,
    award_completion,
)

# Ledger
from core.ledger import (
    make_default_state,
    find_quest,
    add_quest,
    update_quest,
    edit_quest,
    toggle_completion,
    delete_quest,
    undo,
    reset_all,
    factory_reset,
    save_settings,
    clean_tags,
    done_today_count,
)

# Query
from core.query import (
    FILTER_MODES,
    SORT_MODES,
    QueryParams,
    query_quests,
    run_query,
    smart_score,
)

# Persistence & container
from core.persistence import load_state, save_state
from core.store import QuestStore

# Models
from core.models import (
    Quest,
    Stats,
    Achievements,
    AchievementDef,
    ACHIEVEMENTS,
    Profile,
    Settings,
    UndoSnapshot,
    UIState,
    AppState,
)
