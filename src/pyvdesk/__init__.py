"""pyvdesk - Observable domain store for a vehicle-violation tracking dashboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvdesk")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvdesk.binding import BindingState, ViewBinding
from pyvdesk.config import StoreConfig
from pyvdesk.exceptions import (
    BindingStateError,
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    VdeskConfigError,
    VdeskError,
)
from pyvdesk.models import (
    Fine,
    Notification,
    NotificationCategory,
    NotificationSource,
    PaymentStatus,
    Record,
    RegistrationStatus,
    User,
    UserRole,
    Vehicle,
    Violation,
    ViolationStatus,
)
from pyvdesk.persistence import JsonFilePersistence, MemoryPersistence, StoreData
from pyvdesk.state import ChangeAction, CollectionId, DomainStore, StoreChange, StoreSnapshot
from pyvdesk.views import counts_by_collection, dashboard_summary, recent_notifications

__all__ = [
    "__version__",
    "BindingState",
    "BindingStateError",
    "ChangeAction",
    "CollectionId",
    "DomainStore",
    "DuplicateKeyError",
    "Fine",
    "InvalidArgumentError",
    "JsonFilePersistence",
    "MemoryPersistence",
    "NotFoundError",
    "Notification",
    "NotificationCategory",
    "NotificationSource",
    "PaymentStatus",
    "PersistenceError",
    "Record",
    "RegistrationStatus",
    "StoreChange",
    "StoreConfig",
    "StoreData",
    "StoreSnapshot",
    "User",
    "UserRole",
    "VdeskConfigError",
    "VdeskError",
    "Vehicle",
    "ViewBinding",
    "Violation",
    "ViolationStatus",
    "counts_by_collection",
    "dashboard_summary",
    "recent_notifications",
]
