"""
Notification settings with explicit defaults.

Tenant settings and client preferences are stored as loose JSON. They are
resolved here field by field, so a partial or nested override never drops
the defaults of its siblings.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...config import NO_SHOW_MAX_SUGGESTIONS, NO_SHOW_SEARCH_DAYS

NO_SHOW_RESCHEDULE = "no_show_reschedule"


def _section(raw: Optional[Mapping[str, Any]], key: str) -> Mapping[str, Any]:
    value = (raw or {}).get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class NoShowRescheduleSettings:
    enabled: bool = True
    max_suggestions: int = NO_SHOW_MAX_SUGGESTIONS
    search_days: int = NO_SHOW_SEARCH_DAYS

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> "NoShowRescheduleSettings":
        raw = raw or {}
        defaults = cls()
        return cls(
            enabled=bool(raw.get("enabled", defaults.enabled)),
            max_suggestions=_positive_int(raw.get("max_suggestions"), defaults.max_suggestions),
            search_days=_positive_int(raw.get("search_days"), defaults.search_days),
        )


@dataclass(frozen=True)
class NotificationSettings:
    """A barbershop's notification configuration"""

    no_show_reschedule: NoShowRescheduleSettings = NoShowRescheduleSettings()

    @classmethod
    def from_barbershop_settings(cls, settings: Optional[Mapping[str, Any]]) -> "NotificationSettings":
        config = _section(settings, "notification_config")
        return cls(no_show_reschedule=NoShowRescheduleSettings.from_raw(_section(config, NO_SHOW_RESCHEDULE)))


@dataclass(frozen=True)
class ClientNotificationPreferences:
    enabled: bool = True
    no_show_reschedule: bool = True

    @classmethod
    def from_client(cls, client) -> "ClientNotificationPreferences":
        types = client.notification_types if isinstance(client.notification_types, Mapping) else {}
        return cls(
            enabled=client.notification_enabled is not False,
            # Only an explicit False opts out
            no_show_reschedule=types.get(NO_SHOW_RESCHEDULE) is not False,
        )


def _positive_int(value: Any, default: int) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default
