from __future__ import annotations

import pytest

from gtx_translator.scoring import (
    detect_scripts,
    detection_confidence,
    pronunciation,
    quality_score,
    register_pronunciation,
    stars,
)


def test_matching_profile_scores_full_marks() -> None:
    assert quality_score("Hello.", "Hola.") == 100


def test_quality_bonuses_are_independent() -> None:
    # length and word ratios out of range; punctuation and capitals match
    assert quality_score("Hi", "Hello there my friend") == 80
    # nothing matches except punctuation count
    assert quality_score("ok", "a much much longer lowercase reply") == 75
    assert quality_score("Ok", "no") == 95


def test_empty_input_scores_zero() -> None:
    assert quality_score("", "Hola") == 0
    assert quality_score("Hello", "") == 0


@pytest.mark.parametrize(
    ("score", "expected"),
    [(100, 5), (90, 5), (89, 4), (75, 4), (74, 3), (60, 3), (59, 2), (45, 2), (44, 1), (0, 1)],
)
def test_stars(score: int, expected: int) -> None:
    assert stars(score) == expected


def test_detect_scripts() -> None:
    assert detect_scripts("hello") == ["latin"]
    assert detect_scripts("hello привет") == ["latin", "cyrillic"]
    assert detect_scripts("مرحبا 你好") == ["arabic", "cjk"]
    assert detect_scripts("123 !?") == []


def test_detection_confidence() -> None:
    assert detection_confidence("short") == 50
    assert detection_confidence("a" * 50) == 70
    assert detection_confidence("a" * 150) == 80
    assert detection_confidence("a" * 400) == 90
    assert detection_confidence("hi привет") == 35


def test_pronunciation_tables_and_fallback() -> None:
    assert pronunciation("Nation", "en") == "naʃun"
    assert pronunciation("The church", "en") == "θe tʃurtʃ"
    assert pronunciation("Llama niño", "es") == "yama ninyo"
    assert pronunciation("Beau roi", "fr") == "bo rwa"
    assert pronunciation("Schach", "de") == "ʃaχ"
    assert pronunciation("こんにちは", "ja") == "[こんにちは]"
    assert pronunciation("Hola", "xx") == "[Hola]"


def test_register_pronunciation_adds_strategy() -> None:
    register_pronunciation("it", [("gli", "ʎi")])
    assert pronunciation("Figli", "it") == "fiʎi"
