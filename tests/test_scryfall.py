"""Tests for navigators/scryfall.py module."""

from unittest.mock import Mock

import pytest
import requests

from navigators.scryfall import (
    REASON_DISALLOWED_DOMAIN,
    REASON_TIMEOUT,
    REASON_TOO_LARGE,
    REASON_UPSTREAM,
    ImageFetchError,
    ScryfallClient,
    collect_card_arts,
)
from utils.constants import MAX_IMAGE_SIZE_BYTES

ART_URL = "https://cards.scryfall.io/art_crop/front/1/sol.jpg"

SOL_RING_PRINTS = [
    {
        "id": "print-1",
        "set": "c21",
        "artist": "Mike Bierek",
        "image_uris": {"art_crop": "https://cards.scryfall.io/art_crop/front/a/sol1.jpg"},
    },
    {
        "id": "print-2",
        "set": "lea",
        "artist": "Mark Tedin",
        "image_uris": {"art_crop": "https://cards.scryfall.io/art_crop/front/b/sol2.jpg"},
    },
]

DELVER_PRINT = {
    "id": "delver-1",
    "set": "isd",
    "artist": "Nils Hamm",
    "card_faces": [
        {"image_uris": {"art_crop": "https://cards.scryfall.io/art_crop/front/d/delver.jpg"}},
        {
            "artist": "Someone Else",
            "image_uris": {"art_crop": "https://cards.scryfall.io/art_crop/back/d/delver.jpg"},
        },
    ],
}


def _response(status=200, payload=None, headers=None, chunks=None):
    resp = Mock()
    resp.status_code = status
    resp.ok = status < 400
    resp.headers = headers or {}
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    resp.iter_content.return_value = iter(chunks or [])
    return resp


@pytest.fixture
def session():
    fake = Mock()
    fake.headers = {}
    return fake


@pytest.fixture
def client(session):
    return ScryfallClient(session=session, api_base="https://api.test", request_delay=0)


# ============= Art collection =============


def test_collect_card_arts_dedupes_and_upper_cases_sets():
    options = collect_card_arts(SOL_RING_PRINTS + [SOL_RING_PRINTS[0]])

    assert [o.print_id for o in options] == ["print-1", "print-2"]
    assert [o.set_code for o in options] == ["C21", "LEA"]


def test_collect_card_arts_reads_every_face():
    options = collect_card_arts([DELVER_PRINT])

    assert len(options) == 2
    assert options[0].artist == "Nils Hamm"
    assert options[1].artist == "Someone Else"
    assert {o.print_id for o in options} == {"delver-1"}


def test_collect_card_arts_skips_cards_without_art():
    assert collect_card_arts([{"id": "x", "set": "abc"}, "junk"]) == []


# ============= API =============


def test_client_sets_identifying_headers(client, session):
    assert session.headers["User-Agent"]
    assert "application/json" in session.headers["Accept"]


def test_search_arts_returns_options(client, session):
    session.get.return_value = _response(payload={"object": "list", "data": SOL_RING_PRINTS})

    options = client.search_arts("Sol Ring")

    assert len(options) == 2
    params = session.get.call_args.kwargs["params"]
    assert params["q"] == '!"Sol Ring"'
    assert params["unique"] == "art"


def test_search_arts_follows_next_page(client, session):
    session.get.side_effect = [
        _response(
            payload={
                "object": "list",
                "data": SOL_RING_PRINTS[:1],
                "has_more": True,
                "next_page": "https://api.test/cards/search?page=2",
            }
        ),
        _response(payload={"object": "list", "data": SOL_RING_PRINTS[1:], "has_more": False}),
    ]

    options = client.search_arts("Sol Ring")

    assert [o.print_id for o in options] == ["print-1", "print-2"]
    assert session.get.call_args.args[0] == "https://api.test/cards/search?page=2"


def test_search_arts_stops_at_page_limit(session):
    client = ScryfallClient(session=session, api_base="https://api.test", request_delay=0, max_pages=2)
    session.get.return_value = _response(
        payload={
            "object": "list",
            "data": SOL_RING_PRINTS,
            "has_more": True,
            "next_page": "https://api.test/cards/search?page=n",
        }
    )

    client.search_arts("Sol Ring")

    assert session.get.call_count == 2


@pytest.mark.parametrize(
    "response",
    [
        _response(status=404, payload={"object": "error", "details": "No cards found"}),
        _response(status=200, payload={"object": "error", "details": "bad"}),
        _response(status=500, payload={"object": "list", "data": SOL_RING_PRINTS}),
        _response(status=200, payload=None),
        _response(status=200, payload=["not", "a", "dict"]),
    ],
)
def test_search_arts_upstream_failures_return_empty(client, session, response):
    session.get.return_value = response

    assert client.search_arts("Sol Ring") == []


def test_search_arts_transport_error_returns_empty(client, session):
    session.get.side_effect = requests.ConnectionError("down")

    assert client.search_arts("Sol Ring") == []


def test_autocomplete_requires_two_characters(client, session):
    assert client.autocomplete("S") == []
    session.get.assert_not_called()


def test_autocomplete_returns_names(client, session):
    session.get.return_value = _response(payload={"object": "catalog", "data": ["Sol Ring", "Soltari"]})

    assert client.autocomplete("Sol") == ["Sol Ring", "Soltari"]


# ============= Images =============


def test_fetch_image_rejects_other_domains(client, session):
    with pytest.raises(ImageFetchError) as excinfo:
        client.fetch_image_bytes("https://evil.example.com/art.jpg")

    assert excinfo.value.reason == REASON_DISALLOWED_DOMAIN
    session.head.assert_not_called()


def test_fetch_image_returns_body(client, session):
    session.head.return_value = _response(headers={"content-length": "6"})
    session.get.return_value = _response(chunks=[b"abc", b"def"])

    assert client.fetch_image_bytes(ART_URL) == b"abcdef"


def test_fetch_image_rejects_large_content_length(client, session):
    session.head.return_value = _response(headers={"content-length": str(MAX_IMAGE_SIZE_BYTES + 1)})

    with pytest.raises(ImageFetchError) as excinfo:
        client.fetch_image_bytes(ART_URL)

    assert excinfo.value.reason == REASON_TOO_LARGE
    session.get.assert_not_called()


def test_fetch_image_rejects_oversized_stream(client, session):
    chunk = b"x" * (1024 * 1024)
    session.head.return_value = _response()
    session.get.return_value = _response(chunks=[chunk] * 11)

    with pytest.raises(ImageFetchError) as excinfo:
        client.fetch_image_bytes(ART_URL)

    assert excinfo.value.reason == REASON_TOO_LARGE


def test_fetch_image_timeout(client, session):
    session.head.side_effect = requests.Timeout("slow")

    with pytest.raises(ImageFetchError) as excinfo:
        client.fetch_image_bytes(ART_URL)

    assert excinfo.value.reason == REASON_TIMEOUT


def test_fetch_image_upstream_error(client, session):
    session.head.return_value = _response()
    session.get.return_value = _response(status=503)

    with pytest.raises(ImageFetchError) as excinfo:
        client.fetch_image_bytes(ART_URL)

    assert excinfo.value.reason == REASON_UPSTREAM
