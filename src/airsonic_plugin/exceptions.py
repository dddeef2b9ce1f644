"""Exception classes for the Airsonic plugin."""

from typing import List


class SubsonicError(Exception):
    """Base exception for all Subsonic API errors.

    Attributes:
        code: Subsonic error code
        message: Error message from server
    """

    def __init__(self, code: int, message: str):
        """Initialize Subsonic error.

        Args:
            code: Subsonic error code (0, 10, 20, 30, 40, 41, 42, 43, 44, 50, 60, 70)
            message: Human-readable error message
        """
        self.code = code
        self.message = message
        super().__init__(f"Subsonic Error {code}: {message}")


class SubsonicAuthenticationError(SubsonicError):
    """Wrong username or password (error codes 40, 41)."""


class TokenAuthenticationNotSupportedError(SubsonicError):
    """Token authentication not supported (code 42)."""


class ClientVersionTooOldError(SubsonicError):
    """Client must upgrade (code 43)."""


class ServerVersionTooOldError(SubsonicError):
    """Server must upgrade (code 44)."""


class SubsonicAuthorizationError(SubsonicError):
    """User not authorized for requested action (error code 50)."""


class SubsonicNotFoundError(SubsonicError):
    """Requested resource not found (error code 70)."""


class SubsonicVersionError(SubsonicError):
    """API version incompatibility (error codes 20, 30)."""


class SubsonicParameterError(SubsonicError):
    """Required parameter missing (error code 10)."""


class SubsonicTrialError(SubsonicError):
    """Trial period expired (error code 60)."""


_ERRORS_BY_CODE = {
    10: SubsonicParameterError,
    20: SubsonicVersionError,
    30: SubsonicVersionError,
    40: SubsonicAuthenticationError,
    41: SubsonicAuthenticationError,
    42: TokenAuthenticationNotSupportedError,
    43: ClientVersionTooOldError,
    44: ServerVersionTooOldError,
    50: SubsonicAuthorizationError,
    60: SubsonicTrialError,
    70: SubsonicNotFoundError,
}


def error_for_code(code: int, message: str) -> SubsonicError:
    """Build the typed exception for a Subsonic error code.

    Unknown codes map to the SubsonicError base class.

    Example:
        >>> type(error_for_code(40, "Wrong username or password")).__name__
        'SubsonicAuthenticationError'
    """
    return _ERRORS_BY_CODE.get(code, SubsonicError)(code, message)


class NegotiationError(Exception):
    """No authentication strategy was accepted by the server.

    Attributes:
        attempts: One "scheme: reason" entry per strategy tried, in order
    """

    def __init__(self, attempts: List[str]):
        self.attempts = attempts
        detail = "; ".join(attempts) if attempts else "no strategies attempted"
        super().__init__(f"Session negotiation failed ({detail})")
