"""Decoding of the ``subsonic-response`` JSON envelope.

Servers in the Subsonic family disagree on which keys they include, and a
single-element list is sometimes sent as a bare object. Every lookup here
treats nested fields as optional.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .exceptions import SubsonicError, error_for_code

ENVELOPE_KEY = "subsonic-response"


@dataclass(frozen=True)
class Success:
    """Envelope with ``status == "ok"``; payload is the envelope object."""

    payload: Dict[str, Any]


@dataclass(frozen=True)
class Failure:
    """Anything other than a successful envelope.

    Attributes:
        reason: Human-readable description for logs
        error: Typed server error when the server sent an error code
    """

    reason: str
    error: Optional[SubsonicError] = None


Envelope = Union[Success, Failure]


def decode_envelope(data: Any) -> Envelope:
    """Classify a decoded JSON body as Success or Failure.

    Examples:
        >>> decode_envelope({"subsonic-response": {"status": "ok", "version": "1.16.1"}})
        Success(payload={'status': 'ok', 'version': '1.16.1'})
        >>> decode_envelope([]).reason
        'response is not a Subsonic envelope'
    """
    envelope = data.get(ENVELOPE_KEY) if isinstance(data, dict) else None
    if not isinstance(envelope, dict):
        return Failure("response is not a Subsonic envelope")

    status = envelope.get("status")
    if status == "ok":
        return Success(envelope)

    if status == "failed":
        error = envelope.get("error")
        error = error if isinstance(error, dict) else {}
        code = error.get("code", 0)
        message = error.get("message", "Unknown error")
        exc = error_for_code(code if isinstance(code, int) else 0, str(message))
        return Failure(str(exc), exc)

    return Failure(f"unexpected status {status!r}")


def dig(mapping: Any, *keys: str) -> Any:
    """Follow ``keys`` through nested dicts, returning None on any gap.

    Example:
        >>> dig({"album": {"song": [1]}}, "album", "song")
        [1]
        >>> dig({"album": None}, "album", "song") is None
        True
    """
    current = mapping
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def as_list(value: Any) -> List[Dict[str, Any]]:
    """Normalize a list-valued field that may be missing or a bare object."""
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if isinstance(value, dict):
        return [value]
    return []
