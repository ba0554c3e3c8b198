from . import postgres_connection
from .confession_operations import (
    delete_user_confessions,
    get_confession,
    get_user_confessions,
    mark_confession_decided,
    next_confession_number,
    revert_to_pending,
    save_confession,
)
from .constants import (
    CONFESSION_PREVIEW_CHARS,
    MY_CONFESSIONS_LIMIT,
    SUBMISSION_COOLDOWN_SECONDS,
)
from .database_schema import create_schema, truncate_all_tables
from .models import (
    AUTO_DECIDER,
    AdminSession,
    Confession,
    ConfessionStatus,
    SessionAction,
    Settings,
)
from .postgres_connection import close_pool, get_pool
from .rate_limit_operations import try_acquire_submission_slot
from .session_operations import close_session, open_session, peek_session
from .settings_operations import (
    add_admin,
    add_blacklist_word,
    get_settings,
    remove_admin,
    remove_blacklist_word,
    toggle_auto_post,
    update_settings,
)

__all__ = [
    "postgres_connection",
    "get_pool",
    "close_pool",
    "create_schema",
    "truncate_all_tables",
    # Models
    "AUTO_DECIDER",
    "AdminSession",
    "Confession",
    "ConfessionStatus",
    "SessionAction",
    "Settings",
    # Constants
    "CONFESSION_PREVIEW_CHARS",
    "MY_CONFESSIONS_LIMIT",
    "SUBMISSION_COOLDOWN_SECONDS",
    # Settings
    "get_settings",
    "update_settings",
    "toggle_auto_post",
    "add_admin",
    "remove_admin",
    "add_blacklist_word",
    "remove_blacklist_word",
    # Confessions
    "next_confession_number",
    "save_confession",
    "get_confession",
    "mark_confession_decided",
    "revert_to_pending",
    "get_user_confessions",
    "delete_user_confessions",
    # Sessions
    "open_session",
    "peek_session",
    "close_session",
    # Rate limits
    "try_acquire_submission_slot",
]
