"""Static data served when chosic.com cannot be reached."""
from typing import Dict, List, Tuple

from .schemas import Song, Suggestion

FALLBACK_SUGGESTIONS: Dict[str, Tuple[Suggestion, ...]] = {
    "song": (
        Suggestion(value="Bohemian Rhapsody", label="Bohemian Rhapsody - Queen"),
        Suggestion(value="Imagine", label="Imagine - John Lennon"),
        Suggestion(value="Hotel California", label="Hotel California - Eagles"),
        Suggestion(value="Stairway to Heaven", label="Stairway to Heaven - Led Zeppelin"),
        Suggestion(value="Sweet Child O Mine", label="Sweet Child O Mine - Guns N Roses"),
    ),
    "artist": (
        Suggestion(value="The Beatles", label="The Beatles"),
        Suggestion(value="Queen", label="Queen"),
        Suggestion(value="Led Zeppelin", label="Led Zeppelin"),
        Suggestion(value="Pink Floyd", label="Pink Floyd"),
        Suggestion(value="The Rolling Stones", label="The Rolling Stones"),
    ),
}


def _song(id: str, title: str, artist: str, video_id: str) -> Song:
    return Song(
        id=id,
        title=title,
        artist=artist,
        videoUrl=f"https://www.youtube.com/watch?v={video_id}",
        videoId=video_id,
    )


FALLBACK_SONGS: Tuple[Song, ...] = (
    _song("1", "Bohemian Rhapsody", "Queen", "fJ9rUzIMcZQ"),
    _song("2", "Imagine", "John Lennon", "YkgkThdzX-8"),
    _song("3", "Hotel California", "Eagles", "BciS5krYL80"),
    _song("4", "Stairway to Heaven", "Led Zeppelin", "QkF3oxziUI4"),
    _song("5", "Sweet Child O Mine", "Guns N Roses", "1w7OgIMMRc4"),
)


def fallback_suggestions(query: str, type: str) -> List[Suggestion]:
    needle = query.lower()
    return [
        s
        for s in FALLBACK_SUGGESTIONS.get(type, ())
        if needle in s.value.lower() or needle in s.label.lower()
    ]


def fallback_songs(query: str, limit: int) -> List[Song]:
    needle = query.lower()
    matches = [s for s in FALLBACK_SONGS if needle in s.title.lower() or needle in s.artist.lower()]
    return matches[:limit]
