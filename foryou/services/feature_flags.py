"""
Feature flag service implementation.
Controls whether viewer-specific ranking terms apply.
"""
from typing import Optional

from foryou.config import get_settings
from foryou.models.interfaces import FeatureFlagService


class ConfigBasedFeatureFlagService(FeatureFlagService):
    """Feature flag service backed by application settings."""

    def is_personalization_enabled(self, viewer_id: Optional[str]) -> bool:
        """
        Follow boost and affinity only apply to an identified viewer while
        personalization is on and the kill switch is off.
        """
        if self.is_kill_switch_active():
            return False

        if not get_settings().PERSONALIZATION_ENABLED:
            return False

        return bool(viewer_id)

    def is_kill_switch_active(self) -> bool:
        return get_settings().KILL_SWITCH_ACTIVE
