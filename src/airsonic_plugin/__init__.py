"""Airsonic / Subsonic music source plugin."""

__version__ = "0.1.0"

from .auth import create_auth_params, generate_token, verify_token
from .client import SubsonicClient, version_at_least
from .exceptions import (
    ClientVersionTooOldError,
    NegotiationError,
    ServerVersionTooOldError,
    SubsonicAuthenticationError,
    SubsonicAuthorizationError,
    SubsonicError,
    SubsonicNotFoundError,
    SubsonicParameterError,
    SubsonicTrialError,
    SubsonicVersionError,
    TokenAuthenticationNotSupportedError,
)
from .models import AuthScheme, Credentials, PagedResult, Session, TopListSection
from .plugin import AirsonicPlugin
from .session import SessionCache, SessionNegotiator

__all__ = [
    # Plugin
    "AirsonicPlugin",
    # Request adapter and negotiation
    "SubsonicClient",
    "SessionCache",
    "SessionNegotiator",
    "version_at_least",
    # Models
    "AuthScheme",
    "Credentials",
    "PagedResult",
    "Session",
    "TopListSection",
    # Authentication
    "generate_token",
    "verify_token",
    "create_auth_params",
    # Exceptions
    "NegotiationError",
    "SubsonicError",
    "SubsonicAuthenticationError",
    "TokenAuthenticationNotSupportedError",
    "ClientVersionTooOldError",
    "ServerVersionTooOldError",
    "SubsonicAuthorizationError",
    "SubsonicNotFoundError",
    "SubsonicParameterError",
    "SubsonicTrialError",
    "SubsonicVersionError",
]
