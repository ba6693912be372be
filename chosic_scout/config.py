from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import RelayConfig


DEFAULT_RELAYS: List[RelayConfig] = [
    RelayConfig(name="allorigins", template="https://api.allorigins.win/raw?url={url}"),
    RelayConfig(name="corsproxy", template="https://corsproxy.io/?url={url}"),
    RelayConfig(name="codetabs", template="https://api.codetabs.com/v1/proxy/?quest={url}"),
    RelayConfig(
        name="cors-anywhere",
        template="https://cors-anywhere.herokuapp.com/{raw_url}",
        activation_url="https://cors-anywhere.herokuapp.com/corsdemo",
    ),
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote endpoints
    SUGGESTIONS_URL: str = Field(default="https://www.chosic.com/wp-admin/admin-ajax.php")
    PLAYLIST_URL: str = Field(default="https://www.chosic.com/playlist-generator/")

    # Relays, tried in order starting from the last one that worked.
    # A single entry reproduces the old single-proxy setup.
    # Env value is JSON, e.g. RELAYS='[{"name":"x","template":"https://x/?u={url}"}]'
    RELAYS: List[RelayConfig] = Field(default_factory=lambda: list(DEFAULT_RELAYS))
    RELAY_PROBE_URL: str = Field(default="https://httpbin.org/get")
    ACTIVATION_STAGGER_SECONDS: float = Field(default=0.5)

    # Tuning
    REQUESTS_TIMEOUT: int = Field(default=10)
    MIN_QUERY_LENGTH: int = Field(default=2)
    PLAYLIST_FALLBACK_LIMIT: int = Field(default=10)

    LOG_LEVEL: str = Field(default="INFO")


settings = Settings()
