from confession_bot.common.texts import format_bool, get_text
from confession_bot.common.utils import get_dotted_path, truncate
from confession_bot.database import Settings


def test_get_dotted_path():
    data = {"message": {"from": {"id": 1, "username": None}}}

    assert get_dotted_path(data, "message.from.id") == 1
    assert get_dotted_path(data, "message.from.username") is None
    assert get_dotted_path(data, "message.chat.id") is None
    assert get_dotted_path(data, "message.from.id.extra") is None


def test_truncate():
    assert truncate("abcdef", 3) == "abc"
    assert truncate("ab", 3) == "ab"
    assert truncate(None, 3) == ""


def test_get_text_formats_placeholders():
    assert get_text("received", number=4) == (
        "Received anonymously. Pending approval (ID #4)."
    )
    assert get_text("not_authorized") == "Not authorized."


def test_format_bool():
    assert format_bool(True) == "true"
    assert format_bool(False) == "false"


class TestBlacklistMatching:
    def test_case_insensitive_substring(self):
        settings = Settings(blacklist={"spammy"})

        assert settings.find_blacklisted("this is SPAMMY") == "spammy"
        assert settings.find_blacklisted("unspammyish") == "spammy"
        assert settings.find_blacklisted("all clean") is None

    def test_empty_blacklist(self):
        assert Settings().find_blacklisted("anything") is None


def test_is_admin():
    settings = Settings(admins={1})

    assert settings.is_admin(1)
    assert not settings.is_admin(2)
    assert not settings.is_admin(None)
