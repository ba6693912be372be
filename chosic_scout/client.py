"""
Suggestions and playlists from chosic.com.

chosic.com has no public API, so requests go to its AJAX endpoint and its
playlist generator page through public CORS relays. Both operations always
return something: when the live path fails for any reason the static tables in
fallback.py are filtered by the query instead. The result's ``source`` field
says which one happened.
"""
from typing import List, Optional
from urllib.parse import urlencode

from pydantic import TypeAdapter

from .config import settings
from .errors import ChosicError, ParseError, ResponseFormatError
from .extractor import extract_songs
from .fallback import fallback_songs, fallback_suggestions
from .logger import logger
from .relays import ProxyRotator
from .schemas import PlaylistResult, SearchOptions, Song, Suggestion, SuggestionResult

_suggestion_list = TypeAdapter(List[Suggestion])


def build_playlist_url(options: SearchOptions) -> str:
    if options.type in ("genre", "category"):
        params = {"genre": options.genre or options.query}
    else:
        params = {"q": options.query, "type": options.type}
    return f"{settings.PLAYLIST_URL}?{urlencode(params)}"


class ChosicClient:
    def __init__(self, rotator: Optional[ProxyRotator] = None):
        self.rotator = rotator or ProxyRotator()

    async def _live_suggestions(self, query: str, type: str) -> List[Suggestion]:
        r = await self.rotator.fetch(
            settings.SUGGESTIONS_URL,
            method="POST",
            data={"action": "get_suggestions", "q": query, "type": type},
        )
        content_type = r.headers.get("content-type", "")
        if "json" not in content_type.lower():
            # chosic answers with an HTML error page when it rejects the call
            raise ResponseFormatError(f"expected JSON, got {content_type or 'no content type'}")

        try:
            data = r.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON in suggestions response: {e}") from e
        if not isinstance(data, list):
            return []
        try:
            return _suggestion_list.validate_python(data)
        except ValueError as e:
            raise ParseError(f"unexpected suggestion shape: {e}") from e

    async def fetch_suggestions(self, query: str, type: str) -> SuggestionResult:
        if len(query) < settings.MIN_QUERY_LENGTH:
            return SuggestionResult(source="live", suggestions=[])

        try:
            suggestions = await self._live_suggestions(query, type)
        except ChosicError as e:
            logger.warning(f"Suggestions for query='{query}' type={type} failed ({e}); using fallback table.")
            return SuggestionResult(source="fallback", suggestions=fallback_suggestions(query, type))
        except Exception as e:
            logger.error(f"Suggestions for query={query!r} type={type} raised {e!r}; using fallback table.")
            return SuggestionResult(source="fallback", suggestions=fallback_suggestions(query, type))

        logger.info(f"chosic returned {len(suggestions)} suggestions for query='{query}'")
        return SuggestionResult(source="live", suggestions=suggestions)

    async def _live_playlist(self, options: SearchOptions) -> List[Song]:
        r = await self.rotator.fetch(build_playlist_url(options))
        songs = extract_songs(r.text)
        if not songs:
            raise ResponseFormatError("no songs found in playlist page")
        return songs

    async def generate_playlist(self, options: SearchOptions) -> PlaylistResult:
        try:
            songs = await self._live_playlist(options)
        except ChosicError as e:
            logger.warning(f"Playlist for query='{options.query}' type={options.type} failed ({e}); using fallback songs.")
            return PlaylistResult(
                source="fallback",
                songs=fallback_songs(options.query, settings.PLAYLIST_FALLBACK_LIMIT),
            )
        except Exception as e:
            logger.error(f"Playlist for query={options.query!r} type={options.type} raised {e!r}; using fallback songs.")
            return PlaylistResult(
                source="fallback",
                songs=fallback_songs(options.query, settings.PLAYLIST_FALLBACK_LIMIT),
            )

        return PlaylistResult(source="live", songs=songs)


_default_client: Optional[ChosicClient] = None


def get_default_client() -> ChosicClient:
    global _default_client
    if _default_client is None:
        _default_client = ChosicClient()
    return _default_client


async def get_suggestions(query: str, type: str) -> List[Suggestion]:
    result = await get_default_client().fetch_suggestions(query, type)
    return result.suggestions


async def generate_playlist(options: SearchOptions) -> List[Song]:
    result = await get_default_client().generate_playlist(options)
    return result.songs
