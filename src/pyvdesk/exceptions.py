"""Custom exception hierarchy for pyvdesk."""

from __future__ import annotations


class VdeskError(Exception):
    """Base exception for all pyvdesk errors."""


class VdeskConfigError(VdeskError):
    """Invalid or missing configuration."""


class DuplicateKeyError(VdeskError):
    """A record with the same key already exists in the collection.

    The mutation is rejected and the store is left unchanged.
    """

    def __init__(self, message: str, *, collection: str = "", key: str = "") -> None:
        self.collection = collection
        self.key = key
        super().__init__(message)


class NotFoundError(VdeskError):
    """The addressed collection, record, or notification does not exist."""

    def __init__(self, message: str, *, scope: str = "", key: str = "") -> None:
        self.scope = scope
        self.key = key
        super().__init__(message)


class InvalidArgumentError(VdeskError):
    """A view or workflow call was given an argument it cannot act on."""


class BindingStateError(VdeskError):
    """A view binding was used outside its lifecycle.

    Bindings are single-use: once unsubscribed, a new binding must be
    created to resume deliveries.
    """


class PersistenceError(VdeskError):
    """A loader or saver collaborator failed to read or write store data."""
