"""Store configuration for pyvdesk."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyvdesk.exceptions import VdeskConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise VdeskConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store and dashboard configuration.

    Parameters
    ----------
    notification_cap : int
        Maximum number of entries kept in the notification log. The
        oldest entries are evicted first once the cap is exceeded.
    recent_activity_limit : int
        Number of violations shown in the recent activity feed.
    pending_approvals_limit : int
        Number of pending violations shown in the approval alerts list.
    deadline_window_days : int
        Days after a violation is captured before its fine falls due.
    deadline_limit : int
        Number of upcoming deadlines shown on the dashboard.
    recent_notifications_limit : int
        Number of notifications shown in the dashboard notification feed.
    data_path : str or None
        JSON file used by :class:`pyvdesk.persistence.JsonFilePersistence`.
        ``None`` keeps the store purely in memory.
    autosave : bool
        Hand every successful mutation to the configured saver.
    """

    notification_cap: int = 50
    recent_activity_limit: int = 8
    pending_approvals_limit: int = 5
    deadline_window_days: int = 30
    deadline_limit: int = 5
    recent_notifications_limit: int = 5
    data_path: str | None = None
    autosave: bool = True

    def __post_init__(self) -> None:
        if self.notification_cap < 1:
            raise VdeskConfigError(f"notification_cap must be positive, got {self.notification_cap}")
        if self.deadline_window_days < 1:
            raise VdeskConfigError(f"deadline_window_days must be positive, got {self.deadline_window_days}")
        for name in (
            "recent_activity_limit",
            "pending_approvals_limit",
            "deadline_limit",
            "recent_notifications_limit",
        ):
            if getattr(self, name) < 0:
                raise VdeskConfigError(f"{name} must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads the optional ``VDESK_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        StoreConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_INT_MAP = {
            "VDESK_NOTIFICATION_CAP": "notification_cap",
            "VDESK_RECENT_ACTIVITY_LIMIT": "recent_activity_limit",
            "VDESK_PENDING_APPROVALS_LIMIT": "pending_approvals_limit",
            "VDESK_DEADLINE_WINDOW_DAYS": "deadline_window_days",
            "VDESK_DEADLINE_LIMIT": "deadline_limit",
            "VDESK_RECENT_NOTIFICATIONS_LIMIT": "recent_notifications_limit",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        path_env = env.get("VDESK_DATA_PATH")
        if path_env and "data_path" not in overrides:
            config_kwargs["data_path"] = path_env

        if "autosave" not in overrides:
            config_kwargs["autosave"] = _env_bool(env.get("VDESK_AUTOSAVE"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
