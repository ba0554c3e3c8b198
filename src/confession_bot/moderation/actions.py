"""Button payloads.

Every inline button carries a ``callback_data`` string. Incoming payloads are
parsed once, here, into one of the action classes below; handlers dispatch on
the class and never compare payload strings themselves.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..common.texts import get_text
from ..database.models import SessionAction

logger = logging.getLogger(__name__)

# Plain (non-JSON) payload of the /start button
BEGIN_COMPOSING_PAYLOAD = "send_confession"


@dataclass(frozen=True, slots=True)
class BeginComposing:
    pass


@dataclass(frozen=True, slots=True)
class Approve:
    confession_id: Optional[int]


@dataclass(frozen=True, slots=True)
class Reject:
    confession_id: Optional[int]


@dataclass(frozen=True, slots=True)
class AdminMenu:
    pass


@dataclass(frozen=True, slots=True)
class ViewSettings:
    pass


@dataclass(frozen=True, slots=True)
class ToggleAutoPost:
    pass


@dataclass(frozen=True, slots=True)
class ChangeChannel:
    pass


@dataclass(frozen=True, slots=True)
class ManageAdmins:
    pass


@dataclass(frozen=True, slots=True)
class Blacklist:
    pass


@dataclass(frozen=True, slots=True)
class Acknowledge:
    raw: Optional[str]


CallbackAction = Union[
    BeginComposing,
    Approve,
    Reject,
    AdminMenu,
    ViewSettings,
    ToggleAutoPost,
    ChangeChannel,
    ManageAdmins,
    Blacklist,
    Acknowledge,
]

# Actions restricted to admins
ADMIN_MENU_ACTIONS = (
    AdminMenu,
    ViewSettings,
    ToggleAutoPost,
    ChangeChannel,
    ManageAdmins,
    Blacklist,
)

_SIMPLE_ACTIONS = {
    "admin_menu": AdminMenu,
    "view_settings": ViewSettings,
    "toggle_autopost": ToggleAutoPost,
    "change_channel": ChangeChannel,
    "manage_admins": ManageAdmins,
    "blacklist": Blacklist,
}

# Admin menu actions that continue with a free-text reply
SESSION_ACTIONS = {
    ChangeChannel: SessionAction.CHANGE_CHANNEL,
    ManageAdmins: SessionAction.MANAGE_ADMINS,
    Blacklist: SessionAction.BLACKLIST,
}


def _parse_confession_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def parse_callback_action(data: Optional[str]) -> CallbackAction:
    """
    Turns raw callback data into an action.

    JSON payloads look like ``{"action": "approve", "id": 7}``. Anything that
    is not a JSON object is treated as a bare action name.
    """
    if data == BEGIN_COMPOSING_PAYLOAD:
        return BeginComposing()

    try:
        payload = json.loads(data) if data else {}
    except (TypeError, ValueError):
        payload = {"action": data}
    if not isinstance(payload, dict):
        payload = {"action": data}

    action = payload.get("action")
    if action == "approve":
        return Approve(_parse_confession_id(payload.get("id")))
    if action == "reject":
        return Reject(_parse_confession_id(payload.get("id")))
    if action in _SIMPLE_ACTIONS:
        return _SIMPLE_ACTIONS[action]()

    logger.debug(f"Unrecognized callback payload: {data!r}")
    return Acknowledge(data)


def encode_action(action: str, **fields) -> str:
    return json.dumps({"action": action, **fields}, separators=(",", ":"))


def moderation_keyboard(number: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=get_text("button_approve"),
                    callback_data=encode_action("approve", id=number),
                ),
                InlineKeyboardButton(
                    text=get_text("button_reject"),
                    callback_data=encode_action("reject", id=number),
                ),
            ],
            [
                InlineKeyboardButton(
                    text=get_text("button_settings"),
                    callback_data=encode_action("admin_menu"),
                )
            ],
        ]
    )


def admin_menu_keyboard() -> InlineKeyboardMarkup:
    rows = [
        ("button_view_settings", "view_settings"),
        ("button_toggle_autopost", "toggle_autopost"),
        ("button_change_channel", "change_channel"),
        ("button_manage_admins", "manage_admins"),
        ("button_blacklist", "blacklist"),
    ]
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=get_text(label), callback_data=encode_action(action)
                )
            ]
            for label, action in rows
        ]
    )


def start_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=get_text("button_send_confession"),
                    callback_data=BEGIN_COMPOSING_PAYLOAD,
                )
            ],
            [
                InlineKeyboardButton(text=get_text("button_rules"), callback_data="rules"),
                InlineKeyboardButton(
                    text=get_text("button_settings"), callback_data="user_settings"
                ),
            ],
        ]
    )
