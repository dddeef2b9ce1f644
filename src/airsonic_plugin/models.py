"""Data models for the Airsonic plugin."""

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


def _text(value: Any) -> Optional[str]:
    """Return ``value`` if it is a non-empty string, else None."""
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class Credentials:
    """Server address and login handed over by the host.

    Attributes:
        url: Server address, with or without scheme
        username: Subsonic username
        password: Subsonic password (never logged)
    """

    url: str
    username: str
    password: str = field(repr=False)

    def is_complete(self) -> bool:
        """Return True when address, username and password are all non-empty."""
        return bool(self.url and self.username and self.password)

    def normalized(self) -> "Credentials":
        """Return a copy whose address carries a scheme and no trailing slash.

        Example:
            >>> Credentials("music.local:4040/", "admin", "pw").normalized().url
            'http://music.local:4040'
        """
        url = self.url.strip()
        if not url.startswith(("http://", "https://")):
            url = f"http://{url}"
        return Credentials(url=url.rstrip("/"), username=self.username, password=self.password)

    def fingerprint(self) -> str:
        """SHA-256 digest of the normalized triple, used as the session cache key.

        The triple is JSON-encoded before hashing so that field boundaries
        cannot shift between values.
        """
        normalized = self.normalized()
        encoded = json.dumps([normalized.url, normalized.username, normalized.password])
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class AuthScheme(str, Enum):
    """Authentication scheme accepted by the server."""

    TOKEN = "token"
    PASSWORD = "password"


@dataclass(frozen=True)
class Session:
    """Negotiated server capabilities for the active credentials.

    Attributes:
        negotiated_version: Protocol version sent as ``v`` on every request
        server_kind: Server implementation reported in the ping (e.g. "airsonic")
        reported_server_version: Server software version, or "unknown"
        supports_extended_capabilities: True for OpenSubsonic servers
        auth_scheme: TOKEN or PASSWORD
    """

    negotiated_version: str
    server_kind: str
    reported_server_version: str
    supports_extended_capabilities: bool
    auth_scheme: AuthScheme

    @classmethod
    def from_ping(
        cls, payload: Mapping[str, Any], auth_scheme: AuthScheme, fallback_version: str
    ) -> "Session":
        """Build a Session from a successful ping envelope.

        Args:
            payload: The ``subsonic-response`` object of the ping
            auth_scheme: Scheme that produced the successful ping
            fallback_version: Version used when the ping reports none
        """
        version = _text(payload.get("version"))
        return cls(
            negotiated_version=version or fallback_version,
            server_kind=_text(payload.get("type")) or "airsonic",
            reported_server_version=_text(payload.get("serverVersion")) or version or "unknown",
            supports_extended_capabilities=bool(payload.get("openSubsonic", False)),
            auth_scheme=auth_scheme,
        )

    def to_status(self) -> Dict[str, Any]:
        """Render the connected server status reported to the host."""
        return {
            "connected": True,
            "version": self.negotiated_version,
            "type": self.server_kind,
            "serverVersion": self.reported_server_version,
            "openSubsonic": self.supports_extended_capabilities,
            "authMethod": self.auth_scheme.value,
        }


@dataclass
class PagedResult:
    """One page of normalized items.

    Attributes:
        is_end: True when no further page exists
        data: Normalized items on this page
    """

    is_end: bool
    data: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "PagedResult":
        return cls(is_end=True, data=[])

    def to_dict(self) -> Dict[str, Any]:
        return {"isEnd": self.is_end, "data": list(self.data)}


@dataclass
class TopListSection:
    """A labelled group of top-list entries."""

    title: str
    data: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "data": list(self.data)}
