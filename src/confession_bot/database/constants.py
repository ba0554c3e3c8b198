# Limits for the database operations, overridable under "limits" in config.yaml

from ..common.utils import get_limits_config

_limits = get_limits_config()

# Minimum delay between two submissions of the same user
SUBMISSION_COOLDOWN_SECONDS = float(_limits.get("submission_cooldown_seconds", 60))

# /myconfessions listing
MY_CONFESSIONS_LIMIT = int(_limits.get("my_confessions_limit", 50))
CONFESSION_PREVIEW_CHARS = int(_limits.get("confession_preview_chars", 120))
