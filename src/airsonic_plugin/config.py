"""Configuration constants and credential loading.

The host hands the plugin exactly three user variables: server address,
username and password. Nothing else is configurable from the host. The
command line reads the same three values from environment variables.
"""
import os
from typing import Mapping, Optional

from .models import Credentials

# Host user-variable keys
URL_KEY = "url"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"

CLIENT_NAME = "MusicFree"
RESPONSE_FORMAT = "json"

# Fallback when the server does not report its protocol version
DEFAULT_API_VERSION = "1.16.1"
# Version sent with the unauthenticated version-discovery ping
DISCOVERY_API_VERSION = "1.1.0"
# search3 is used from this protocol version on, search2 below it
LEGACY_SEARCH_CUTOFF = (1, 4)

PAGE_SIZE = 25
TOP_LIST_SIZE = 20

PROBE_TIMEOUT = 10.0
REQUEST_TIMEOUT = 15.0


def credentials_from_user_variables(variables: Optional[Mapping[str, str]]) -> Credentials:
    """Build Credentials from the host's user-variable mapping.

    Missing keys become empty strings; callers check ``is_complete()``.
    """
    variables = variables or {}
    return Credentials(
        url=variables.get(URL_KEY) or "",
        username=variables.get(USERNAME_KEY) or "",
        password=variables.get(PASSWORD_KEY) or "",
    )


def credentials_from_environment() -> Credentials:
    """Load credentials from environment variables (NO .env files).

    Reads AIRSONIC_URL, AIRSONIC_USERNAME and AIRSONIC_PASSWORD.

    Returns:
        Credentials, possibly incomplete
    """
    return Credentials(
        url=os.getenv("AIRSONIC_URL", ""),
        username=os.getenv("AIRSONIC_USERNAME", ""),
        password=os.getenv("AIRSONIC_PASSWORD", ""),
    )
