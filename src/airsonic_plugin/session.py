"""Server capability negotiation and the cached session.

For a server that has never been seen before the negotiator learns, once per
credential set, which protocol version it speaks and which authentication
scheme it accepts. The result is cached against a fingerprint of the
credentials so that every later call reuses it without touching the network.
"""

import logging
from typing import Iterable, List, Optional

import httpx

from .auth import DEFAULT_STRATEGIES, create_auth_params
from .config import (
    CLIENT_NAME,
    DEFAULT_API_VERSION,
    DISCOVERY_API_VERSION,
    PROBE_TIMEOUT,
    RESPONSE_FORMAT,
)
from .exceptions import NegotiationError
from .models import AuthScheme, Credentials, Session
from .response import Envelope, Failure, Success, decode_envelope, dig

logger = logging.getLogger(__name__)


def ping_url(credentials: Credentials) -> str:
    return f"{credentials.normalized().url}/rest/ping"


def describe_error(error: Exception) -> str:
    """Describe a transport or decoding error without the request URL.

    httpx status errors quote the full URL, and with it the
    authentication parameters.
    """
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    if isinstance(error, httpx.HTTPError):
        return type(error).__name__
    return f"{type(error).__name__}: {error}"


class SessionCache:
    """Holds at most one Session and the fingerprint it was negotiated for.

    Attributes:
        fingerprint: Fingerprint of the credentials behind ``session``
        session: Cached Session, or None
    """

    def __init__(self):
        self.fingerprint: Optional[str] = None
        self.session: Optional[Session] = None

    def get(self) -> Optional[Session]:
        return self.session

    def invalidate_if_changed(self, credentials: Credentials) -> bool:
        """Drop the cached session when ``credentials`` differ from the cached ones.

        Returns:
            True if a cached session was discarded
        """
        if self.fingerprint == credentials.fingerprint():
            return False
        had_session = self.session is not None
        self.clear()
        return had_session

    def store(self, credentials: Credentials, session: Session) -> None:
        self.fingerprint = credentials.fingerprint()
        self.session = session

    def clear(self) -> None:
        self.fingerprint = None
        self.session = None


class SessionNegotiator:
    """Negotiate and cache a Session for the active credentials.

    Attributes:
        http: Shared httpx.AsyncClient
        cache: SessionCache written on successful negotiation only
        client_name: Value of the ``c`` parameter
        strategies: Authentication strategies, tried in order
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: SessionCache,
        client_name: str = CLIENT_NAME,
        strategies: Optional[Iterable] = None,
    ):
        self.http = http
        self.cache = cache
        self.client_name = client_name
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    async def ensure_session(self, credentials: Credentials) -> Session:
        """Return the cached Session, negotiating a new one if needed.

        Args:
            credentials: Complete credentials from the host

        Returns:
            Session for ``credentials``

        Raises:
            NegotiationError: If the server accepted none of the strategies.
                Nothing is cached, so the next call probes again.
        """
        credentials = credentials.normalized()

        if self.cache.invalidate_if_changed(credentials):
            logger.info("Server configuration changed, renegotiating session")

        cached = self.cache.get()
        if cached is not None:
            return cached

        logger.debug(f"Negotiating session with {credentials.url}")
        discovered = await self.discover_version(credentials)
        version = discovered or DEFAULT_API_VERSION

        attempts: List[str] = []
        for strategy in self.strategies:
            params = create_auth_params(
                strategy.auth_params(credentials), version, self.client_name
            )
            result = await self._ping(credentials, params)

            if isinstance(result, Success):
                session = Session.from_ping(result.payload, strategy.scheme, version)
                self.cache.store(credentials, session)
                logger.info(
                    f"Connected to {session.server_kind} {session.reported_server_version} "
                    f"(API {session.negotiated_version}, {session.auth_scheme.value} auth)"
                )
                if session.auth_scheme == AuthScheme.PASSWORD and credentials.url.startswith(
                    "http://"
                ):
                    logger.warning(
                        "Server only accepts password authentication over plain HTTP. "
                        "Credentials will be transmitted insecurely."
                    )
                return session

            logger.info(
                f"{strategy.scheme.value.capitalize()} authentication failed: {result.reason}"
            )
            attempts.append(f"{strategy.scheme.value}: {result.reason}")

        raise NegotiationError(attempts)

    async def discover_version(self, credentials: Credentials) -> Optional[str]:
        """Ask the server for its protocol version without authenticating.

        Servers report ``version`` on every envelope, including the error
        returned for a request without credentials.

        Returns:
            Reported version string, or None if it could not be learned
        """
        params = {"c": self.client_name, "v": DISCOVERY_API_VERSION, "f": RESPONSE_FORMAT}
        try:
            response = await self.http.get(
                ping_url(credentials), params=params, timeout=PROBE_TIMEOUT
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Version discovery failed: {describe_error(e)}")
            return None

        version = dig(data, "subsonic-response", "version")
        if isinstance(version, str) and version:
            logger.debug(f"Server reports API version {version}")
            return version
        return None

    async def _ping(self, credentials: Credentials, params: dict) -> Envelope:
        try:
            response = await self.http.get(
                ping_url(credentials), params=params, timeout=PROBE_TIMEOUT
            )
            response.raise_for_status()
            return decode_envelope(response.json())
        except (httpx.HTTPError, ValueError) as e:
            return Failure(describe_error(e))
