"""Value coercion applied before anything is handed to the client.

Every argument is sent in its string form so backends that serialize numbers
and booleans differently behave the same. Callers parse replies back to the
type they expect.
"""

from __future__ import annotations

import hashlib
from typing import Any, Iterable

WireValue = str | bytes
KeyT = str | bytes


def to_wire(value: Any) -> WireValue:
    """Coerce a single value to the form sent to the backend.

    str and bytes pass through unchanged; everything else goes through str().
    """

    if isinstance(value, (str, bytes)):
        return value
    return str(value)


def to_wire_all(values: Iterable[Any] | None) -> list[WireValue]:
    """Coerce a sequence of values, treating None as empty."""

    return [to_wire(v) for v in values or ()]


def require_key(key: KeyT, *, name: str = "key") -> KeyT:
    """Validate that a key is a non-empty str or bytes.

    Bytes keys come back from clients built with decode_responses=False and
    are sent as-is.

    Raises:
        ValueError: If key is empty or of another type.
    """

    if not isinstance(key, (str, bytes)) or not key:
        raise ValueError(f"{name} must be a non-empty str or bytes")
    return key


def require_keys(keys: Iterable[KeyT], *, name: str = "keys") -> list[KeyT]:
    """Validate a non-empty sequence of non-empty keys."""

    checked = [require_key(k, name=name) for k in keys]
    if not checked:
        raise ValueError(f"{name} must contain at least one key")
    return checked


def hash_key(key: KeyT) -> str:
    """Hash a key for logging without exposing identifiers."""
    raw = key if isinstance(key, bytes) else key.encode()
    return hashlib.sha256(raw).hexdigest()[:16]
