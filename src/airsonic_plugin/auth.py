"""Subsonic API authentication strategies.

Subsonic-family servers accept one of two credential forms, and do not
advertise which one in advance:

    TOKEN:    u={username}&s={salt}&t=md5(password + salt)
    PASSWORD: u={username}&p={password}

The negotiator tries DEFAULT_STRATEGIES in order against ``ping`` and the
request adapter then builds every request with the strategy that succeeded.

Authentication Flow (TOKEN):
    1. Generate cryptographically secure random salt (16 hex characters)
    2. Concatenate password + salt
    3. Calculate MD5 hash of concatenated string
    4. Send token (MD5 hash), salt, and username

Security Notes:
    - Salt is regenerated for every request, tokens are never reused
    - MD5 is used per Subsonic spec (not for cryptographic security, but obfuscation)
    - The PASSWORD form sends the password in clear; transport security is the
      server's responsibility
"""

import hashlib
import secrets
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .config import CLIENT_NAME, RESPONSE_FORMAT
from .models import AuthScheme, Credentials


@dataclass(frozen=True)
class AuthToken:
    """Salted token for one request.

    Attributes:
        token: MD5(password + salt)
        salt: Random salt string
        username: Username for this token
    """

    token: str
    salt: str
    username: str

    def to_auth_params(self) -> Dict[str, str]:
        """Convert to authentication query parameters.

        Returns:
            Dict with u (username), s (salt), t (token)
        """
        return {"u": self.username, "s": self.salt, "t": self.token}


def generate_token(username: str, password: str, salt: Optional[str] = None) -> AuthToken:
    """Generate Subsonic authentication token using MD5 salt+hash method.

    Args:
        username: Subsonic username
        password: Subsonic password
        salt: Optional pre-generated salt. If None, generates a new 16 hex char salt.
              Primarily for testing purposes.

    Returns:
        AuthToken with a 32 char lowercase hex token

    Example:
        >>> auth = generate_token("admin", "sesame", salt="c19b2d")
        >>> auth.token
        '26719a1196d2a940705a59634eb18eab'
    """
    if salt is None:
        # 8 random bytes -> 16 hex characters
        salt = secrets.token_hex(8)

    token = hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()
    return AuthToken(token=token, salt=salt, username=username)


def verify_token(password: str, token: str, salt: str) -> bool:
    """Verify that a token matches the expected MD5(password + salt).

    Example:
        >>> auth = generate_token("admin", "sesame", salt="c19b2d")
        >>> verify_token("sesame", auth.token, auth.salt)
        True
        >>> verify_token("sesame", "invalid", auth.salt)
        False
    """
    expected_token = hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()
    return secrets.compare_digest(token, expected_token)


class TokenAuth:
    """Salted-token authentication (u, s, t)."""

    scheme = AuthScheme.TOKEN

    def auth_params(self, credentials: Credentials) -> Dict[str, str]:
        return generate_token(credentials.username, credentials.password).to_auth_params()


class PasswordAuth:
    """Clear-text password authentication (u, p)."""

    scheme = AuthScheme.PASSWORD

    def auth_params(self, credentials: Credentials) -> Dict[str, str]:
        return {"u": credentials.username, "p": credentials.password}


# Probe order: prefer the scheme that keeps the password off the wire
DEFAULT_STRATEGIES: Tuple = (TokenAuth(), PasswordAuth())


def strategy_for(scheme: AuthScheme):
    """Return the default strategy implementing ``scheme``."""
    for strategy in DEFAULT_STRATEGIES:
        if strategy.scheme == scheme:
            return strategy
    raise ValueError(f"Unsupported authentication scheme: {scheme}")


def create_auth_params(
    auth_params: Dict[str, str],
    api_version: str,
    client_name: str = CLIENT_NAME,
    response_format: str = RESPONSE_FORMAT,
) -> Dict[str, str]:
    """Create complete authentication query parameters for Subsonic API requests.

    Args:
        auth_params: Scheme-specific parameters from a strategy
        api_version: Subsonic API version
        client_name: Client application identifier
        response_format: Response format (default: "json")

    Returns:
        Dictionary of query parameters containing the scheme fields plus
        v (API version), c (client name) and f (response format)
    """
    return {
        **auth_params,
        "c": client_name,
        "v": api_version,
        "f": response_format,
    }
