"""Host-facing Airsonic plugin.

Every operation degrades to its empty shape instead of raising: an empty
PagedResult, an empty list, or None.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from . import __version__
from .client import SubsonicClient, UserVariables
from .config import PAGE_SIZE, TOP_LIST_SIZE, PASSWORD_KEY, URL_KEY, USERNAME_KEY
from .models import PagedResult, TopListSection
from .response import as_list, dig
from .transform import (
    format_album_item,
    format_artist_item,
    format_music_item,
    format_top_list_item,
)

logger = logging.getLogger(__name__)

# Search type -> (result key, count parameter, offset parameter, formatter)
SEARCH_TYPES = {
    "music": ("song", "songCount", "songOffset", format_music_item),
    "album": ("album", "albumCount", "albumOffset", format_album_item),
    "artist": ("artist", "artistCount", "artistOffset", format_artist_item),
}

# albumList2 type -> section title
TOP_LISTS = (
    ("newest", "Newest Albums"),
    ("recent", "Recently Played"),
    ("random", "Random Albums"),
)


class AirsonicPlugin:
    """Music source plugin for Airsonic and other Subsonic-compatible servers.

    Attributes:
        client: SubsonicClient handling negotiation and requests
    """

    platform = "Airsonic Advanced"
    version = __version__
    description = (
        "Airsonic Advanced and Subsonic-compatible servers, "
        "with automatic server version and authentication detection"
    )
    user_variables = (
        {"key": URL_KEY, "name": "Server address"},
        {"key": USERNAME_KEY, "name": "Username"},
        {"key": PASSWORD_KEY, "name": "Password"},
    )
    supported_search_type = tuple(SEARCH_TYPES)

    def __init__(
        self,
        user_variables: Optional[UserVariables] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        client: Optional[SubsonicClient] = None,
    ):
        if client is None:
            if user_variables is None:
                raise ValueError("Either user_variables or client must be provided")
            client = SubsonicClient(user_variables, http_client=http_client)
        self.client = client

    async def get_server_status(self) -> Dict[str, Any]:
        """Negotiate (or reuse) the session and describe the server."""
        session = await self.client.session()
        if session is None:
            return {"connected": False, "error": "Unable to connect to server"}
        return session.to_status()

    async def init(self) -> Dict[str, Any]:
        """Test the server connection when the plugin is loaded."""
        status = await self.get_server_status()
        if not status["connected"]:
            logger.warning(f"Server connection failed: {status['error']}")
        return status

    async def search(self, query: str, page: int, type: str) -> PagedResult:
        """Search songs, albums or artists, one page of PAGE_SIZE at a time.

        Args:
            query: Search text
            page: 1-based page number
            type: "music", "album" or "artist"
        """
        if type not in SEARCH_TYPES:
            logger.warning(f"Unsupported search type: {type}")
            return PagedResult.empty()
        result_key, count_param, offset_param, formatter = SEARCH_TYPES[type]

        # Negotiate first so the endpoint choice sees the server's version
        session = await self.client.session()
        if session is None:
            return PagedResult.empty()

        endpoint = self.client.search_endpoint(session)
        payload = await self.client.call(
            endpoint,
            {
                "query": query,
                count_param: PAGE_SIZE,
                offset_param: (max(page, 1) - 1) * PAGE_SIZE,
            },
        )

        result_container = "searchResult3" if endpoint == "search3" else "searchResult2"
        search_result = dig(payload, result_container)
        if not isinstance(search_result, dict):
            return PagedResult.empty()

        items = as_list(search_result.get(result_key))
        return PagedResult(
            is_end=len(items) < PAGE_SIZE,
            data=[formatter(item) for item in items],
        )

    async def _album_songs(self, album_id: Any) -> Optional[List[Dict[str, Any]]]:
        payload = await self.client.call("getAlbum", {"id": album_id})
        album = dig(payload, "album")
        if not isinstance(album, dict):
            return None
        return as_list(album.get("song"))

    async def get_album_info(self, album_item: Mapping[str, Any], page: int = 1) -> PagedResult:
        """Fetch all tracks of an album. Albums are never paginated."""
        songs = await self._album_songs(album_item.get("id"))
        if songs is None:
            return PagedResult.empty()
        return PagedResult(is_end=True, data=[format_music_item(song) for song in songs])

    async def get_artist_works(
        self, artist_item: Mapping[str, Any], page: int, type: str
    ) -> PagedResult:
        """List an artist's albums (type="album") or all their tracks (type="music").

        Tracks are gathered album by album, in the order the server lists
        the albums. An album whose detail cannot be fetched contributes no
        tracks and does not stop the others.
        """
        if type not in ("album", "music"):
            logger.warning(f"Unsupported artist works type: {type}")
            return PagedResult.empty()

        payload = await self.client.call("getArtist", {"id": artist_item.get("id")})
        artist = dig(payload, "artist")
        if not isinstance(artist, dict):
            return PagedResult.empty()
        albums = as_list(artist.get("album"))

        if type == "album":
            return PagedResult(is_end=True, data=[format_album_item(album) for album in albums])

        tracks: List[Dict[str, Any]] = []
        for album in albums:
            songs = await self._album_songs(album.get("id"))
            if songs is None:
                logger.warning(f"Skipping album {album.get('id')}: details unavailable")
                continue
            tracks.extend(format_music_item(song) for song in songs)

        logger.info(f"Collected {len(tracks)} tracks from {len(albums)} albums")
        return PagedResult(is_end=True, data=tracks)

    async def get_top_lists(self) -> List[TopListSection]:
        """Newest, recently played and random albums, as three sections.

        A section whose fetch fails is returned empty.
        """
        try:
            sections = []
            for list_type, title in TOP_LISTS:
                payload = await self.client.call(
                    "getAlbumList2", {"type": list_type, "size": TOP_LIST_SIZE}
                )
                albums = as_list(dig(payload, "albumList2", "album"))
                sections.append(
                    TopListSection(title=title, data=[format_top_list_item(a) for a in albums])
                )
            return sections
        except Exception:
            logger.exception("Failed to fetch top lists")
            return []

    async def get_top_list_detail(self, top_list_item: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the top-list entry with its album's tracks under ``musicList``."""
        album_info = await self.get_album_info({"id": top_list_item.get("id")}, 1)
        return {**top_list_item, "musicList": album_info.data}

    async def get_media_source(self, music_item: Mapping[str, Any]) -> Optional[Dict[str, str]]:
        """Resolve a direct, authenticated stream URL for a track."""
        url = await self.client.stream_url(music_item.get("id"))
        if url is None:
            return None
        return {"url": url}

    async def get_lyric(self, music_item: Mapping[str, Any]) -> Optional[Dict[str, str]]:
        """Look up lyrics by artist and title. Returns None when the server has none."""
        payload = await self.client.call(
            "getLyrics",
            {"artist": music_item.get("artist"), "title": music_item.get("title")},
        )
        lyrics = dig(payload, "lyrics")
        if not isinstance(lyrics, dict):
            return None

        text = lyrics.get("value")
        if not text:
            return None
        return {"rawLrc": text}

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
