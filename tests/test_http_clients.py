"""HTTP clients against a local aiohttp server standing in for the real APIs."""

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer

from pivot.domain.errors import ProviderError
from pivot.services.lexical_cache import LexicalCache
from pivot.services.lexical_gateway import LexicalGateway
from pivot.services.providers import DatamuseClient, DictionaryApiClient


async def dictionary_entry(request: web.Request) -> web.Response:
    word = request.match_info["word"]
    if word == "gold":
        return web.json_response([
            {"word": "gold", "phonetic": "/gold/", "meanings": [
                {"partOfSpeech": "noun", "definitions": [{"definition": "A yellow metal."}]},
            ]},
        ])
    if word == "boom":
        return web.Response(status=500, text="oops")
    return web.json_response({"title": "No Definitions Found"}, status=404)


async def datamuse_words(request: web.Request) -> web.Response:
    q = request.query
    if "rel_syn" in q:
        return web.json_response([{"word": "gilded"}, {"word": "aureate"}])
    if "ml" in q:
        return web.json_response([{"word": "golden"}, {"word": "gilded"}, {"word": "yellow metal"}])
    if q.get("md") == "d":
        return web.json_response([{"word": q["sp"], "defs": ["n\tA thing."]}])
    if q.get("md") == "f":
        n = len(q["sp"])
        return web.json_response([
            {"word": "c" * n, "tags": ["f:5.0"]},
            {"word": "z" * n, "tags": ["f:1.0"]},
        ])
    if q.get("sp") == "garbage":
        return web.Response(text="not json")
    return web.json_response([{"word": q.get("sp", "")}])


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_get("/entries/en/{word}", dictionary_entry)
    app.router.add_get("/words", datamuse_words)
    srv = LocalServer(app)
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture
async def http():
    async with aiohttp.ClientSession() as session:
        yield session


def base(server: LocalServer, path: str = "") -> str:
    return str(server.make_url(path))


async def test_dictionary_hit_and_miss(server, http):
    client = DictionaryApiClient(session=http, base_url=base(server, "/entries/en"))

    hit = await client.fetch_entry("gold")
    assert hit is not None and hit.first_sense()[1].definition == "A yellow metal."
    assert await client.fetch_entry("nope") is None


async def test_dictionary_server_error_is_provider_error(server, http):
    client = DictionaryApiClient(session=http, base_url=base(server, "/entries/en"))
    with pytest.raises(ProviderError):
        await client.fetch_entry("boom")


async def test_datamuse_queries(server, http):
    client = DatamuseClient(session=http, base_url=base(server))

    assert await client.synonyms("gold") == ["gilded", "aureate"]
    assert await client.means_like("gold") == ["golden", "gilded", "yellow metal"]
    assert await client.definitions("gold") == ["n\tA thing."]
    assert await client.spelled_like("cold") == ["cold"]
    assert await client.words_of_length(4) == [("cccc", 5.0), ("zzzz", 1.0)]


async def test_datamuse_bad_json_is_provider_error(server, http):
    client = DatamuseClient(session=http, base_url=base(server))
    with pytest.raises(ProviderError):
        await client.spelled_like("garbage")


async def test_unreachable_provider_is_provider_error(http):
    client = DatamuseClient(session=http, base_url="http://127.0.0.1:9")
    with pytest.raises(ProviderError):
        await client.synonyms("gold")


async def test_gateway_over_http(server, http):
    gw = LexicalGateway(
        dictionary=DictionaryApiClient(session=http, base_url=base(server, "/entries/en")),
        related=DatamuseClient(session=http, base_url=base(server)),
        cache=LexicalCache(),
    )

    assert await gw.check_validity("gold") is True
    # dictionary 500 -> spelling search echoes the word back
    assert await gw.check_validity("boom") is True
    assert await gw.get_synonyms("gold") == frozenset({"gilded", "aureate", "golden"})
    d = await gw.get_definition("nope")
    assert d.first_sense()[1].definition == "A thing."
