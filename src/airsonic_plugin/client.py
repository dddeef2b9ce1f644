"""Async HTTP request adapter for Subsonic-family servers."""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from .auth import create_auth_params, strategy_for
from .config import (
    CLIENT_NAME,
    LEGACY_SEARCH_CUTOFF,
    REQUEST_TIMEOUT,
    RESPONSE_FORMAT,
    credentials_from_user_variables,
)
from .exceptions import NegotiationError, SubsonicNotFoundError
from .logger import silence_http_loggers
from .models import Credentials, Session
from .response import Success, decode_envelope
from .session import SessionCache, SessionNegotiator, describe_error

logger = logging.getLogger(__name__)

silence_http_loggers()

UserVariables = Callable[[], Optional[Mapping[str, str]]]


def version_at_least(version: Any, minimum: Tuple[int, ...]) -> bool:
    """Compare a dotted protocol version against ``minimum``.

    Unparseable versions compare as older than everything.

    Examples:
        >>> version_at_least("1.16.1", (1, 4))
        True
        >>> version_at_least("1.3.0", (1, 4))
        False
        >>> version_at_least("garbage", (1, 4))
        False
    """
    if not isinstance(version, str) or not version:
        return False
    try:
        parts = tuple(int(part) for part in version.strip().split("."))
    except ValueError:
        return False
    return parts >= minimum


class SubsonicClient:
    """Authenticated request adapter for a Subsonic-family server.

    Credentials are read from the host on every call, so a configuration
    change is picked up by the next request and triggers renegotiation.

    Attributes:
        user_variables: Zero-argument callable returning the host's url,
            username and password mapping
        client_name: Value of the ``c`` parameter
        http: httpx.AsyncClient for all requests
        cache: SessionCache shared with the negotiator
        negotiator: SessionNegotiator for the active credentials

    Example:
        >>> client = SubsonicClient(lambda: {
        ...     "url": "music.example.com",
        ...     "username": "john",
        ...     "password": "secret",
        ... })
        >>> payload = await client.call("getAlbum", {"id": "42"})
        >>> await client.aclose()
    """

    def __init__(
        self,
        user_variables: UserVariables,
        http_client: Optional[httpx.AsyncClient] = None,
        client_name: str = CLIENT_NAME,
    ):
        self.user_variables = user_variables
        self.client_name = client_name
        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(follow_redirects=True)
        self.cache = SessionCache()
        self.negotiator = SessionNegotiator(self.http, self.cache, client_name)

    def credentials(self) -> Optional[Credentials]:
        """Return normalized credentials, or None if any field is missing."""
        credentials = credentials_from_user_variables(self.user_variables())
        if not credentials.is_complete():
            return None
        return credentials.normalized()

    async def session(self) -> Optional[Session]:
        """Ensure a negotiated session exists for the current credentials.

        Returns:
            Session, or None if configuration is incomplete or negotiation failed
        """
        credentials = self.credentials()
        if credentials is None:
            logger.debug("Server address, username or password not configured")
            return None
        try:
            return await self.negotiator.ensure_session(credentials)
        except NegotiationError as e:
            logger.error(f"Unable to connect to server: {e}")
            return None

    def _build_params(
        self, credentials: Credentials, session: Session, **kwargs
    ) -> Dict[str, str]:
        """Build query parameters with authentication and API version.

        TOKEN sessions get a fresh salt and token on every call. Endpoint
        parameters override the base set; None values are dropped.
        """
        strategy = strategy_for(session.auth_scheme)
        params = create_auth_params(
            strategy.auth_params(credentials), session.negotiated_version, self.client_name
        )

        for key, value in kwargs.items():
            if value is not None:
                params[key] = str(value)

        return params

    async def call(
        self, endpoint: str, params: Optional[Mapping[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Issue an authenticated GET to ``{address}/rest/{endpoint}``.

        Args:
            endpoint: REST endpoint name (e.g. "getAlbum")
            params: Endpoint-specific query parameters

        Returns:
            The ``subsonic-response`` object on success. None when configuration
            is incomplete, negotiation fails, the transport fails, the body is
            not JSON, or the server reports a failed status.
        """
        credentials = self.credentials()
        if credentials is None:
            return None

        session = await self.session()
        if session is None:
            return None

        url = f"{credentials.url}/rest/{endpoint}"
        query = self._build_params(credentials, session, **dict(params or {}))

        logger.debug(f"Requesting {endpoint}")
        try:
            response = await self.http.get(url, params=query, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Request {endpoint} failed: {describe_error(e)}")
            return None

        result = decode_envelope(data)
        if isinstance(result, Success):
            return result.payload

        if isinstance(result.error, SubsonicNotFoundError):
            # Lookups such as getLyrics report absence this way
            logger.debug(f"Request {endpoint}: {result.reason}")
        else:
            logger.warning(f"Request {endpoint} failed: {result.reason}")
        return None

    def search_endpoint(self, session: Optional[Session]) -> str:
        """Pick search3 for servers at or above the cutoff version, else search2."""
        if session is not None and version_at_least(
            session.negotiated_version, LEGACY_SEARCH_CUTOFF
        ):
            return "search3"
        return "search2"

    async def stream_url(self, track_id: str) -> Optional[str]:
        """Build a direct streaming URL for a track without downloading it.

        The URL carries the authentication parameters so the host's player
        can fetch it straight from the server.

        Args:
            track_id: Unique identifier for the track

        Returns:
            Complete streaming URL with authentication, or None if no session

        Example:
            >>> await client.stream_url("12345")
            'http://music.example.com/rest/stream?u=john&c=MusicFree&v=1.16.1&f=json&id=12345&s=...&t=...'
        """
        credentials = self.credentials()
        if credentials is None:
            return None

        session = await self.session()
        if session is None:
            return None

        strategy = strategy_for(session.auth_scheme)
        auth = strategy.auth_params(credentials)
        query = {
            "u": auth.pop("u"),
            "c": self.client_name,
            "v": session.negotiated_version,
            "f": RESPONSE_FORMAT,
            "id": track_id,
            **auth,
        }

        logger.debug(f"Generated stream URL for track {track_id}")
        return f"{credentials.url}/rest/stream?{urlencode(query)}"

    async def aclose(self):
        """Close the HTTP client if this adapter created it."""
        if self._owns_http:
            await self.http.aclose()
            logger.debug("Closed Subsonic client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
