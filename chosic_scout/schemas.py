from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SearchType = Literal["song", "artist", "genre", "category"]

# "live" when chosic.com answered, "fallback" when the static tables were used
FetchSource = Literal["live", "fallback"]


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class Song(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    artist: str
    videoUrl: str
    videoId: str


class SearchOptions(BaseModel):
    query: str = Field(..., description="Free-text seed (song, artist or genre name)")
    type: SearchType = Field("song", description="Which playlist generator branch to use")
    genre: Optional[str] = Field(None, description="Explicit genre; overrides query for genre/category searches")


class SuggestionResult(BaseModel):
    source: FetchSource
    suggestions: List[Suggestion]


class PlaylistResult(BaseModel):
    source: FetchSource
    songs: List[Song]


class RelayStatus(BaseModel):
    name: str
    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class RelayConfig(BaseModel):
    name: str
    # "{url}" is replaced by the percent-encoded target, "{raw_url}" by the target as-is
    template: str
    # Human-facing page some relays require a visit to before they serve requests
    activation_url: Optional[str] = None
