import logging
import os

from mixpanel import Mixpanel, MixpanelException

logger = logging.getLogger(__name__)


class SilentMixpanel:
    def track(self, distinct_id, event: str, properties: dict | None = None):
        pass


class SafeMixpanel:
    """Mixpanel client whose delivery failures are logged and dropped."""

    def __init__(self, token: str | None):
        self._client = Mixpanel(token) if token else None

    def track(self, distinct_id, event: str, properties: dict | None = None):
        if self._client is None:
            return
        try:
            self._client.track(str(distinct_id), event, properties or {})
        except MixpanelException as e:
            logger.warning(f"Mixpanel tracking failed for {event}: {e}")


mp = SafeMixpanel(os.getenv("MIXPANEL_PROJECT_TOKEN"))


def mute_mp_for_tests():
    global mp
    mp = SilentMixpanel()
