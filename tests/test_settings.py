from pathlib import Path

import pytest

from pivot.config import settings as settings_module
from pivot.config.settings import DEFAULT_DATAMUSE_API_URL, Settings
from pivot.domain.errors import ConfigError

ENV_VARS = [
    "ENV", "LOG_LEVEL", "DISCORD_TOKEN", "DISCORD_GUILD_ID", "PIVOT_CHANNEL_IDS",
    "DICTIONARY_API_URL", "DATAMUSE_API_URL", "HTTP_TIMEOUT_SECONDS", "WORD_LIST_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(settings_module, "load_dotenv", lambda *a, **kw: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DISCORD_TOKEN", "token")


def test_defaults():
    s = Settings.load()
    assert s.env == "development"
    assert s.log_level == "INFO"
    assert s.discord_guild_id is None
    assert s.pivot_channel_ids == frozenset()
    assert s.datamuse_api_url == DEFAULT_DATAMUSE_API_URL
    assert s.http_timeout_seconds == 10.0
    assert s.word_list_path is None


def test_token_is_required(monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN")
    with pytest.raises(ConfigError):
        Settings.load()


def test_parses_ids_urls_and_paths(monkeypatch):
    monkeypatch.setenv("DISCORD_GUILD_ID", "42")
    monkeypatch.setenv("PIVOT_CHANNEL_IDS", "1, 2,,3")
    monkeypatch.setenv("DATAMUSE_API_URL", "http://localhost:8080/")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("WORD_LIST_PATH", "words.txt")

    s = Settings.load()

    assert s.discord_guild_id == 42
    assert s.pivot_channel_ids == frozenset({1, 2, 3})
    assert s.datamuse_api_url == "http://localhost:8080"
    assert s.http_timeout_seconds == 2.5
    assert s.word_list_path == Path("words.txt")


@pytest.mark.parametrize(
    "name, value",
    [("DISCORD_GUILD_ID", "abc"), ("PIVOT_CHANNEL_IDS", "1,x"), ("HTTP_TIMEOUT_SECONDS", "soon")],
)
def test_bad_values_raise_config_error(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError):
        Settings.load()
