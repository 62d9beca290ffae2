"""Record merge and notification eviction policy.

This module contains no store bookkeeping; it only decides what a
replacement record or a trimmed log looks like.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pyvdesk.exceptions import InvalidArgumentError
from pyvdesk.models import Notification, Record

TRecord = TypeVar("TRecord", bound=Record)


def index_of(records: tuple[Record, ...], key: str) -> int:
    """Position of the record with *key*, or ``-1``."""
    for index, record in enumerate(records):
        if record.key == key:
            return index
    return -1


def normalize_patch(model_cls: type[Record], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase or snake_case patch keys to field names.

    Raises :class:`InvalidArgumentError` for keys the model does not
    define and for attempts to change the record key.
    """
    normalized: dict[str, Any] = {}
    for raw_key, value in patch.items():
        field_name = model_cls.field_name_for(raw_key)
        if field_name is None:
            raise InvalidArgumentError(f"{model_cls.__name__} has no field {raw_key!r}")
        if field_name == "id":
            raise InvalidArgumentError("the record key cannot be changed by a patch")
        normalized[field_name] = value
    return normalized


def merge_record(record: TRecord, patch: Mapping[str, Any]) -> TRecord:
    """Return a validated copy of *record* with *patch* applied.

    Keys in the patch overwrite. The original record is left untouched.
    """
    model_cls = type(record)
    merged = record.model_dump()
    merged.update(normalize_patch(model_cls, patch))
    return model_cls.model_validate(merged)


def trim_log(log: tuple[Notification, ...], cap: int) -> tuple[Notification, ...]:
    """Keep the *cap* most recent entries of a most-recent-first log."""
    if len(log) <= cap:
        return log
    return log[:cap]
