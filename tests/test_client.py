from __future__ import annotations

import pytest
import requests
from conftest import NOT_JSON, FakeHTTP, FakeResponse, gtx_payload

from gtx_translator.client import GtxClient, chunk_words
from gtx_translator.errors import NetworkError, ParseError


def test_translate_joins_segments_and_sends_gtx_params() -> None:
    http = FakeHTTP(lambda params: FakeResponse(gtx_payload("Hola. ", "Adiós.")))
    client = GtxClient(session=http)

    assert client.translate("Hello. Goodbye.", "en", "es") == "Hola. Adiós."
    assert http.calls == [{"client": "gtx", "sl": "en", "tl": "es", "dt": "t", "q": "Hello. Goodbye."}]


def test_translate_raises_network_error_on_http_failure() -> None:
    client = GtxClient(session=FakeHTTP(lambda params: FakeResponse(None, status_code=503)))
    with pytest.raises(NetworkError) as excinfo:
        client.translate("Hello", "en", "fr")
    assert excinfo.value.status_code == 503


def test_translate_raises_network_error_on_transport_failure() -> None:
    client = GtxClient(session=FakeHTTP(lambda params: requests.exceptions.Timeout("timed out")))
    with pytest.raises(NetworkError):
        client.translate("Hello", "en", "fr")


@pytest.mark.parametrize("payload", [NOT_JSON, {"sentences": []}, [], [None], [[["ok"], 5]]])
def test_translate_raises_parse_error_on_unexpected_shape(payload) -> None:
    client = GtxClient(session=FakeHTTP(lambda params: FakeResponse(payload)))
    with pytest.raises(ParseError):
        client.translate("Hello", "en", "fr")


def test_detect_language_reads_third_element() -> None:
    http = FakeHTTP(lambda params: FakeResponse(gtx_payload("Good morning", detected="de")))
    detection = GtxClient(session=http).detect_language("Guten Morgen")

    assert http.calls[0]["sl"] == "auto"
    assert detection.language == "de"
    assert detection.language_name == "German"
    assert detection.confidence == 50


def test_detect_language_without_code_is_parse_error() -> None:
    client = GtxClient(session=FakeHTTP(lambda params: FakeResponse([[["x", "y"]]])))
    with pytest.raises(ParseError):
        client.detect_language("bonjour")


def test_alternatives_adds_chunked_translation_for_longer_text() -> None:
    http = FakeHTTP(lambda params: FakeResponse(gtx_payload(params["q"].upper())))
    results = GtxClient(session=http).alternatives("one two three four five", "en", "fr")

    assert [alt.method for alt in results] == ["Primary", "Chunked"]
    assert results[0].text == "ONE TWO THREE FOUR FIVE"
    assert results[1].text == "ONE TWO THREE FOUR FIVE"
    assert sorted(call["q"] for call in http.calls[1:]) == ["four five", "one two three"]


def test_alternatives_short_text_only_primary() -> None:
    results = GtxClient(session=FakeHTTP()).alternatives("hi there", "en", "fr")
    assert [alt.method for alt in results] == ["Primary"]


def test_chunk_words_splits_in_halves() -> None:
    assert chunk_words("a b c d") == ["a b", "c d"]
    assert chunk_words("a b c d e") == ["a b c", "d e"]
