"""User-facing messages.

Every text can be overridden under the ``texts`` key of config.yaml; the
defaults below are used otherwise. Placeholders use ``str.format`` syntax.
"""

from .utils import load_config

DEFAULT_TEXTS = {
    # Users
    "start": (
        "Welcome to Confession Bot!\n"
        "Send your confession anonymously. Use buttons or just send a message."
    ),
    "compose_prompt": (
        "Please type your confession and send it. It will remain anonymous."
    ),
    "empty_confession": "Please send a non-empty confession.",
    "rate_limited": "You are sending confessions too quickly. Please wait.",
    "blacklisted": "Your confession contains disallowed words and was rejected.",
    "received": "Received anonymously. Pending approval (ID #{number}).",
    "no_confessions": "You have no confessions.",
    "confessions_header": "Your confessions:",
    "confession_line": "#{number} - {status} - {text}",
    "data_deleted": "Your data has been deleted.",
    "action_received": "Action received.",
    # Admins
    "not_authorized": "Not authorized.",
    "admin_prompt": 'New Confession #{number}\nAnonymous:\n"{text}"',
    "admin_menu": "Admin Settings:",
    "settings_view": (
        "Settings:\nChannel: {channel}\nAuto-post: {auto_post}\n"
        "Admins: {admins}\nBlacklist: {blacklist}"
    ),
    "auto_post_toggled": "Auto-post set to {auto_post}",
    "channel_set": "Channel set to {channel}",
    "channel_prompt": (
        "Send the new channel username (e.g. @channel) or numeric chat id (-100...) now."
    ),
    "channel_changed": "Channel changed to {channel}",
    "channel_invalid": "Invalid channel. Send a single @username or numeric chat id.",
    "admins_prompt": "Send commands to manage admins:\nadd <telegram_id>\nremove <telegram_id>",
    "admin_added": "Added admin {admin_id}",
    "admin_removed": "Removed admin {admin_id}",
    "admins_invalid": "Invalid command. Use add <id> or remove <id>.",
    "blacklist_prompt": "Send commands:\nadd <word>\nremove <word>\nlist",
    "blacklist_list": "Blacklisted words: {words}",
    "blacklist_added": "Added to blacklist: {word}",
    "blacklist_removed": "Removed from blacklist: {word}",
    "blacklist_invalid": "Invalid blacklist command.",
    # Decisions
    "missing_id": "Missing id",
    "confession_not_found": "Confession not found",
    "channel_not_configured": "Channel not configured.",
    "already_decided": "Confession #{number} is already {status}.",
    "approved": "Approved #{number}",
    "rejected": "Rejected #{number}",
    "approved_prompt": '✅ Approved: Confession #{number}\n"{text}"',
    "rejected_prompt": '❌ Rejected: Confession #{number}\n"{text}"',
    # Buttons
    "button_approve": "✅ Approve",
    "button_reject": "❌ Reject",
    "button_settings": "⚙️ Settings",
    "button_send_confession": "✍️ Send Confession",
    "button_rules": "📌 Rules",
    "button_view_settings": "View Settings",
    "button_toggle_autopost": "Toggle Auto-Post",
    "button_change_channel": "Change Channel",
    "button_manage_admins": "Manage Admins",
    "button_blacklist": "Blacklist Words",
}


def get_text(key: str, **kwargs) -> str:
    overrides = load_config().get("texts", {}) or {}
    template = overrides.get(key, DEFAULT_TEXTS[key])
    return template.format(**kwargs) if kwargs else template


def format_bool(value: bool) -> str:
    return "true" if value else "false"
