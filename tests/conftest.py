"""
Pytest configuration for the airsonic-plugin test suite.

Puts the src directory on the Python path and provides an in-memory
Subsonic server served through httpx.MockTransport, so no test touches
the network.
"""
import hashlib
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from airsonic_plugin.client import SubsonicClient  # noqa: E402
from airsonic_plugin.plugin import AirsonicPlugin  # noqa: E402

Route = Union[Dict[str, Any], Callable[[httpx.Request], httpx.Response], Exception]


class FakeSubsonicServer:
    """Minimal Subsonic server answering from canned payloads.

    Attributes:
        version: Protocol version reported on every envelope
        accept: Authentication schemes the server accepts ("token", "password")
        routes: Endpoint name -> payload dict merged into an ok envelope,
            a callable returning an httpx.Response, or an exception to raise
        requests: Every request received, in order
    """

    def __init__(
        self,
        version: str = "1.16.1",
        accept=("token", "password"),
        username: str = "testuser",
        password: str = "testpass",
        server_type: str = "airsonic",
        open_subsonic: bool = False,
        server_version: Optional[str] = None,
    ):
        self.version = version
        self.accept = set(accept)
        self.username = username
        self.password = password
        self.server_type = server_type
        self.open_subsonic = open_subsonic
        self.server_version = server_version
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []
        self.fail_token_transport = False

    # Envelope helpers

    def envelope(self, status: str = "ok", **payload) -> Dict[str, Any]:
        body = {"status": status, "version": self.version, "type": self.server_type}
        if self.open_subsonic:
            body["openSubsonic"] = True
        if self.server_version:
            body["serverVersion"] = self.server_version
        body.update(payload)
        return {"subsonic-response": body}

    def error(self, code: int, message: str) -> httpx.Response:
        return httpx.Response(
            200, json=self.envelope("failed", error={"code": code, "message": message})
        )

    # Request inspection

    def endpoint_of(self, request: httpx.Request) -> str:
        return request.url.path.rsplit("/", 1)[-1]

    def requests_to(self, endpoint: str) -> List[httpx.Request]:
        return [r for r in self.requests if self.endpoint_of(r) == endpoint]

    # Dispatch

    def _authenticated(self, params: httpx.QueryParams) -> bool:
        if params.get("u") != self.username:
            return False
        if "t" in params:
            expected = hashlib.md5(f"{self.password}{params.get('s')}".encode("utf-8")).hexdigest()
            return "token" in self.accept and params.get("t") == expected
        if "p" in params:
            return "password" in self.accept and params.get("p") == self.password
        return False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        endpoint = self.endpoint_of(request)

        if endpoint == "ping" and self.fail_token_transport and "t" in params:
            raise httpx.ConnectError("connection reset", request=request)

        if "u" not in params:
            return self.error(10, "Required parameter is missing.")

        if not self._authenticated(params):
            if "t" in params and "token" not in self.accept:
                return self.error(41, "Token authentication not supported for LDAP users.")
            return self.error(40, "Wrong username or password.")

        if endpoint == "ping":
            return httpx.Response(200, json=self.envelope())

        route = self.routes.get(endpoint)
        if route is None:
            return self.error(70, "The requested data was not found.")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return httpx.Response(200, json=self.envelope(**route))


def make_song(song_id: str, **fields) -> Dict[str, Any]:
    song = {
        "id": song_id,
        "title": f"Song {song_id}",
        "artist": "The Band",
        "album": "The Album",
        "duration": 200,
        "coverArt": f"mf-{song_id}",
    }
    song.update(fields)
    return song


def make_album(album_id: str, **fields) -> Dict[str, Any]:
    album = {
        "id": album_id,
        "name": f"Album {album_id}",
        "artist": "The Band",
        "artistId": "ar-1",
        "songCount": 10,
        "coverArt": f"al-{album_id}",
    }
    album.update(fields)
    return album


@pytest.fixture
def server() -> FakeSubsonicServer:
    """Fake server accepting both authentication schemes."""
    return FakeSubsonicServer()


@pytest.fixture
def user_variables() -> Dict[str, str]:
    """Mutable host configuration; tests edit it to simulate user changes."""
    return {"url": "music.example.com", "username": "testuser", "password": "testpass"}


@pytest.fixture
def http_client(server: FakeSubsonicServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(server.handler))


@pytest.fixture
def client(user_variables, http_client) -> SubsonicClient:
    return SubsonicClient(lambda: user_variables, http_client=http_client)


@pytest.fixture
def plugin(client) -> AirsonicPlugin:
    return AirsonicPlugin(client=client)
