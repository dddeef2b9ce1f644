"""Transform Subsonic response objects into the host's item shapes.

Each formatter copies a fixed set of fields and renames a few of them.
Fields the server did not send are left out of the result rather than
filled with placeholders.
"""

from typing import Any, Dict, Iterable, Mapping, Tuple

# (host field, Subsonic field)
MUSIC_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("title", "title"),
    ("artist", "artist"),
    ("album", "album"),
    ("duration", "duration"),
    ("artwork", "coverArt"),
    ("albumId", "albumId"),
    ("artistId", "artistId"),
    ("track", "track"),
    ("year", "year"),
    ("genre", "genre"),
    ("bitRate", "bitRate"),
    ("size", "size"),
    ("suffix", "suffix"),
    ("contentType", "contentType"),
    ("path", "path"),
)

ALBUM_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("artist", "artist"),
    ("artwork", "coverArt"),
    ("artistId", "artistId"),
    ("songCount", "songCount"),
    ("duration", "duration"),
    ("created", "created"),
    ("year", "year"),
    ("genre", "genre"),
)

ARTIST_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("name", "name"),
    ("avatar", "artistImageUrl"),
    ("albumCount", "albumCount"),
    ("starred", "starred"),
)


def _project(item: Mapping[str, Any], fields: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    return {target: item[source] for target, source in fields if source in item}


def format_music_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Project a Subsonic ``song``/``child`` object onto a host music item.

    Examples:
        >>> format_music_item({"id": "1", "title": "Song", "coverArt": "al-3"})
        {'id': '1', 'title': 'Song', 'artwork': 'al-3'}
    """
    return _project(item, MUSIC_FIELDS)


def format_album_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Project a Subsonic album onto a host album item.

    ID3 albums carry ``name``; folder-based albums returned by search2 carry
    ``title`` instead.
    """
    album = _project(item, ALBUM_FIELDS)
    if "name" in item:
        album["title"] = item["name"]
    elif "title" in item:
        album["title"] = item["title"]
    return album


def format_artist_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    return _project(item, ARTIST_FIELDS)


def format_top_list_item(album: Mapping[str, Any]) -> Dict[str, Any]:
    """Project an ``albumList2`` entry onto a host top-list entry.

    Examples:
        >>> format_top_list_item({"id": "7", "name": "Blue", "artist": "Joni", "songCount": 10})
        {'id': '7', 'title': 'Blue', 'description': 'Joni - 10 songs'}
    """
    entry = _project(album, (("id", "id"), ("title", "name"), ("coverImg", "coverArt")))

    parts = []
    if album.get("artist") is not None:
        parts.append(str(album["artist"]))
    if album.get("songCount") is not None:
        parts.append(f"{album['songCount']} songs")
    if parts:
        entry["description"] = " - ".join(parts)

    return entry
