from __future__ import annotations

from pathlib import Path

import threading

import pytest
from conftest import FakeClock, FakeResponse, gtx_payload

from gtx_translator.errors import NetworkError, RateLimitExceeded, UnsupportedInput
from gtx_translator.rate_limiter import RateLimiter
from gtx_translator.session import MAX_INPUT_CHARS, clip_input, load_text_file, text_stats


def test_translate_records_memory_history_and_scores(make_session):
    session = make_session(handler=lambda params: FakeResponse(gtx_payload("Hola.")))

    result = session.translate("Hello.", "en", "es")

    assert result.translation == "Hola."
    assert result.quality == 100 and result.stars == 5
    assert result.pronunciation == "hola."
    assert result.detection is None
    assert session.memory.entries[0].target == "Hola."
    assert session.history.entries[0].output == "Hola."
    assert session.current is result


def test_auto_source_adds_detection(make_session, http):
    session = make_session(handler=lambda params: FakeResponse(gtx_payload("Hello", detected="fr")))

    result = session.translate("Bonjour", "auto", "en")

    assert result.detection.language == "fr"
    assert result.detection.language_name == "French"
    assert len(http.calls) == 2


def test_blank_text_is_ignored(make_session, http):
    session = make_session()
    assert session.translate("   ") is None
    assert http.calls == []


def test_rate_limit_denies_without_network(make_session, http):
    clock = FakeClock()
    session = make_session(limiter=RateLimiter(max_calls=1, window=60.0, clock=clock))
    session.translate("one", "en", "fr")

    with pytest.raises(RateLimitExceeded):
        session.translate("two", "en", "fr")
    assert [call["q"] for call in http.calls] == ["one"]

    clock.advance(61)
    assert session.translate("two", "en", "fr").translation == "fr::two"


def test_network_failure_propagates_and_retry_repeats(make_session, network_down):
    session = make_session(handler=network_down)
    with pytest.raises(NetworkError):
        session.translate("Hello", "en", "de")
    assert session.history.entries == []

    session.client.session.handler = lambda params: FakeResponse(gtx_payload("Hallo"))
    assert session.retry().translation == "Hallo"


def test_stale_response_is_discarded(make_session):
    session = make_session()
    holder = {}

    def handler(params):
        if params["q"] == "first":
            # a newer request starts while the first is still in flight
            holder["newer"] = session.translate("second", "en", "fr")
        return FakeResponse(gtx_payload(f"fr::{params['q']}"))

    session.client.session.handler = handler
    first = session.translate("first", "en", "fr")

    assert first.stale is True
    assert holder["newer"].stale is False
    assert first.sequence < holder["newer"].sequence
    assert [entry.input for entry in session.history.entries] == ["second"]
    assert session.current.text == "second"


def test_detect_language_degrades_to_unknown(make_session, network_down):
    session = make_session(handler=network_down)
    detection = session.detect_language("hola")
    assert (detection.language, detection.confidence, detection.language_name) == ("unknown", 0, "Unknown")


def test_swap_languages(make_session):
    session = make_session()
    with pytest.raises(ValueError):
        session.swap_languages()
    session.select_languages("en", "ja")
    assert session.swap_languages() == ("ja", "en")
    assert session.selected_languages == ("ja", "en")
    assert session.history.recent_languages[0].name == "Japanese"


def test_toggle_favorite_requires_translation(make_session):
    session = make_session()
    with pytest.raises(ValueError):
        session.toggle_favorite()
    session.translate("Hi", "en", "es")
    assert session.toggle_favorite() is True
    assert session.toggle_favorite() is False


def test_batch_uses_client(make_session):
    session = make_session()
    session.batch.enqueue(["a", "b"], "en", "it")
    results = session.batch.run()
    assert [item.result for item in results] == ["it::a", "it::b"]


def test_text_stats_and_clipping():
    stats = text_stats("Hello world. How are you? Fine!")
    assert (stats.characters, stats.words, stats.sentences) == (31, 6, 3)
    assert (text_stats("   ").words, text_stats("   ").sentences) == (0, 0)
    assert len(clip_input("x" * (MAX_INPUT_CHARS + 10))) == MAX_INPUT_CHARS


def test_load_text_file(tmp_path: Path):
    txt = tmp_path / "note.txt"
    txt.write_text("bonjour", encoding="utf-8")
    assert load_text_file(txt) == "bonjour"
    with pytest.raises(UnsupportedInput):
        load_text_file(tmp_path / "doc.pdf")


def test_auto_source_is_charged_for_detection(make_session, http):
    session = make_session(limiter=RateLimiter(max_calls=3, window=60.0, clock=FakeClock()))
    session.translate("Bonjour", "auto", "en")

    with pytest.raises(RateLimitExceeded):
        session.translate("Salut", "auto", "en")
    assert len(http.calls) == 2
    assert session.translate("Salut", "fr", "en").translation == "en::Salut"


def test_alternatives_charge_every_request(make_session, http):
    session = make_session(limiter=RateLimiter(max_calls=4, window=60.0, clock=FakeClock()))
    session.alternatives("one two three four", "en", "de")
    assert len(http.calls) == 3
    assert session.limiter.remaining() == 1

    with pytest.raises(RateLimitExceeded):
        session.alternatives("one two three four", "en", "de")
    assert [alt.method for alt in session.alternatives("short", "en", "de")] == ["Primary"]


def test_detect_language_is_rate_limited(make_session, http):
    session = make_session(limiter=RateLimiter(max_calls=1, window=60.0, clock=FakeClock()))
    session.detect_language("hola")
    with pytest.raises(RateLimitExceeded):
        session.detect_language("hola")
    assert len(http.calls) == 1


def test_translate_waits_for_state_lock(make_session):
    session = make_session()
    done = threading.Event()

    def work():
        session.translate("Hello", "en", "fr")
        done.set()

    with session.state_lock:
        worker = threading.Thread(target=work)
        worker.start()
        assert not done.wait(0.2)
        assert session.history.entries == []
    worker.join(timeout=5)

    assert done.is_set()
    assert session.history.entries[0].output == "fr::Hello"
