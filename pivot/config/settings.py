from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from pivot.domain.errors import ConfigError

DEFAULT_DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"
DEFAULT_DATAMUSE_API_URL = "https://api.datamuse.com"


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _parse_channel_ids(raw: str | None) -> frozenset[int]:
    if not raw:
        return frozenset()
    ids: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if part:
            ids.add(_parse_int("PIVOT_CHANNEL_IDS", part))
    return frozenset(ids)


@dataclass(frozen=True)
class Settings:
    """
    Global application settings loaded from environment variables.

    This class should remain dependency-free and side-effect free
    except for loading environment variables.
    """

    # Environment
    env: str
    log_level: str

    # Discord
    discord_token: str
    discord_guild_id: int | None
    pivot_channel_ids: frozenset[int]

    # Lexical providers
    dictionary_api_url: str
    datamuse_api_url: str
    http_timeout_seconds: float

    # Offline word source (optional)
    word_list_path: Path | None

    @classmethod
    def load(cls) -> "Settings":
        """
        Load settings from environment variables.
        """

        # Load .env for local development
        load_dotenv()

        env = os.getenv("ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        discord_token = os.getenv("DISCORD_TOKEN")
        if not discord_token:
            raise ConfigError("DISCORD_TOKEN is required")

        discord_guild_id_raw = os.getenv("DISCORD_GUILD_ID")
        discord_guild_id = (
            _parse_int("DISCORD_GUILD_ID", discord_guild_id_raw) if discord_guild_id_raw else None
        )

        pivot_channel_ids = _parse_channel_ids(os.getenv("PIVOT_CHANNEL_IDS"))

        dictionary_api_url = os.getenv("DICTIONARY_API_URL", DEFAULT_DICTIONARY_API_URL).rstrip("/")
        datamuse_api_url = os.getenv("DATAMUSE_API_URL", DEFAULT_DATAMUSE_API_URL).rstrip("/")

        timeout_raw = os.getenv("HTTP_TIMEOUT_SECONDS", "10")
        try:
            http_timeout_seconds = float(timeout_raw)
        except ValueError as e:
            raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}") from e

        word_list_raw = os.getenv("WORD_LIST_PATH")
        word_list_path = Path(word_list_raw) if word_list_raw else None

        return cls(
            env=env,
            log_level=log_level,
            discord_token=discord_token,
            discord_guild_id=discord_guild_id,
            pivot_channel_ids=pivot_channel_ids,
            dictionary_api_url=dictionary_api_url,
            datamuse_api_url=datamuse_api_url,
            http_timeout_seconds=http_timeout_seconds,
            word_list_path=word_list_path,
        )
