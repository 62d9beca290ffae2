"""Store change events.

Every successful store mutation emits exactly one :class:`StoreChange`
to the store's listeners. Only the store creates them.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

#: Scope of changes to the notification log.
NOTIFICATIONS_SCOPE = "notifications"
#: Scope of a change that touched the whole store (load/reset).
ALL_SCOPE = "*"


class CollectionId(StrEnum):
    """Collections registered by default."""

    USERS = "users"
    VIOLATIONS = "violations"
    VEHICLES = "vehicles"
    FINES = "fines"


class ChangeAction(StrEnum):
    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
    PUSHED = "pushed"
    READ = "read"
    LOADED = "loaded"
    RESET = "reset"


class StoreChange(BaseModel):
    """Identity of what a mutation changed."""

    model_config = ConfigDict(frozen=True)

    scope: str = Field(..., description="Collection id, 'notifications', or '*'")
    action: ChangeAction
    key: str | None = Field(default=None, description="Record or notification id, if a single one changed")
    version: int = Field(..., description="Store version after the mutation")

    @property
    def is_notification_change(self) -> bool:
        return self.scope == NOTIFICATIONS_SCOPE

    def touches(self, scope: str) -> bool:
        """Whether this change affects *scope*."""
        return self.scope in (scope, ALL_SCOPE)
