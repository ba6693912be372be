"""
Turn chosic.com playlist-generator HTML into Song records.

The selectors and the video id pattern live in ExtractionRules so a markup
change on the remote side only needs a new rules instance.
"""
import re
from dataclasses import dataclass
from typing import List, Pattern

from bs4 import BeautifulSoup

from .logger import logger
from .schemas import Song


@dataclass(frozen=True)
class ExtractionRules:
    item_selector: str
    title_selector: str
    artist_selector: str
    link_selector: str
    video_id_pattern: Pattern[str]


DEFAULT_RULES = ExtractionRules(
    item_selector=".pl-item",
    title_selector=".song-title",
    artist_selector=".artist-name",
    link_selector='a[href*="youtube.com"]',
    video_id_pattern=re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)"),
)


def extract_video_id(url: str, rules: ExtractionRules = DEFAULT_RULES) -> str:
    m = rules.video_id_pattern.search(url)
    return m.group(1) if m else ""


def extract_songs(html: str, rules: ExtractionRules = DEFAULT_RULES) -> List[Song]:
    try:
        soup = BeautifulSoup(html, "html.parser")
        items = soup.select(rules.item_selector)
    except Exception as e:
        logger.warning(f"Could not parse playlist HTML: {e}")
        return []

    songs: List[Song] = []
    # index counts matched items, not emitted songs
    for index, item in enumerate(items):
        title_el = item.select_one(rules.title_selector)
        artist_el = item.select_one(rules.artist_selector)
        link_el = item.select_one(rules.link_selector)
        if title_el is None or artist_el is None or link_el is None:
            continue

        title = title_el.get_text().strip()
        artist = artist_el.get_text().strip()
        video_url = link_el.get("href") or ""
        video_id = extract_video_id(video_url, rules)

        if title and artist and video_id:
            songs.append(
                Song(
                    id=f"{index}-{video_id}",
                    title=title,
                    artist=artist,
                    videoUrl=video_url,
                    videoId=video_id,
                )
            )

    logger.info(f"Extracted {len(songs)} songs from {len(items)} playlist items")
    return songs
