from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

AUTO_DECIDER = "auto"


class ConfessionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SessionAction(str, Enum):
    CHANGE_CHANNEL = "change_channel"
    MANAGE_ADMINS = "manage_admins"
    BLACKLIST = "blacklist"


@dataclass
class Settings:
    admins: set[int] = field(default_factory=set)
    channel_target: Optional[str] = None
    auto_post: bool = False
    blacklist: set[str] = field(default_factory=set)

    def is_admin(self, user_id: int | None) -> bool:
        return user_id is not None and user_id in self.admins

    def find_blacklisted(self, text: str) -> Optional[str]:
        """Returns the first blacklisted word contained in text, case-insensitively."""
        lowered = text.lower()
        for word in sorted(self.blacklist):
            if word and word in lowered:
                return word
        return None


@dataclass
class Confession:
    number: int
    text: str
    author_id: int
    has_media: bool = False
    status: ConfessionStatus = ConfessionStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    decided_by: Optional[str] = None

    @property
    def is_decided(self) -> bool:
        return self.status != ConfessionStatus.PENDING


@dataclass
class AdminSession:
    admin_id: int
    pending_action: SessionAction
    opened_at: Optional[datetime] = None
