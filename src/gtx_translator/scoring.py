"""Heuristic scorers: translation quality, detection confidence and pronunciation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

QUALITY_BASE = 70
CONFIDENCE_BASE = 70

_PUNCTUATION = re.compile(r"[.,!?;:]")
_WHITESPACE = re.compile(r"\s+")

# (name, first code point, last code point)
SCRIPT_RANGES: tuple[tuple[str, int, int], ...] = (
    ("latin", 0x0041, 0x007A),
    ("cyrillic", 0x0400, 0x04FF),
    ("arabic", 0x0600, 0x06FF),
    ("cjk", 0x4E00, 0x9FFF),
)


def _word_count(text: str) -> int:
    return len(_WHITESPACE.split(text))


def quality_score(original: str, translation: str) -> int:
    """Score a translation 0-100 from shape similarity with its source."""
    if not original or not translation:
        return 0
    score = QUALITY_BASE

    length_ratio = len(translation) / len(original)
    if 0.5 < length_ratio < 2:
        score += 10

    word_ratio = _word_count(translation) / _word_count(original)
    if 0.6 < word_ratio < 1.5:
        score += 10

    original_punct = len(_PUNCTUATION.findall(original))
    translation_punct = len(_PUNCTUATION.findall(translation))
    if abs(original_punct - translation_punct) <= 2:
        score += 5

    if original[0].isupper() and translation[0].isupper():
        score += 5

    return min(100, score)


def stars(score: int) -> int:
    if score >= 90:
        return 5
    if score >= 75:
        return 4
    if score >= 60:
        return 3
    if score >= 45:
        return 2
    return 1


def detect_scripts(text: str) -> list[str]:
    found: list[str] = []
    for char in text:
        code = ord(char)
        for name, start, end in SCRIPT_RANGES:
            if start <= code <= end and name not in found:
                found.append(name)
    return found


def detection_confidence(text: str) -> int:
    confidence = CONFIDENCE_BASE
    if len(text) > 100:
        confidence += 10
    if len(text) > 300:
        confidence += 10
    if len(text) < 20:
        confidence -= 20
    if len(detect_scripts(text)) > 1:
        confidence -= 15
    return max(0, min(100, confidence))


@dataclass(slots=True, frozen=True)
class SubstitutionTable:
    """Ordered regex substitutions applied to the lower-cased text."""

    rules: Sequence[tuple[str, str]]

    def __call__(self, text: str) -> str:
        result = text.lower()
        for pattern, replacement in self.rules:
            result = re.sub(pattern, replacement, result)
        return result


def bracketed(text: str) -> str:
    return f"[{text}]"


PRONUNCIATION_TABLES: dict[str, SubstitutionTable] = {
    "en": SubstitutionTable((("tion", "shun"), ("th", "θ"), ("ch", "tʃ"), ("sh", "ʃ"))),
    "es": SubstitutionTable((("ll", "y"), ("ñ", "ny"))),
    "fr": SubstitutionTable((("eau", "o"), ("oi", "wa"))),
    "de": SubstitutionTable((("sch", "ʃ"), ("ch", "χ"))),
}


def register_pronunciation(language: str, rules: Sequence[tuple[str, str]]) -> None:
    PRONUNCIATION_TABLES[language] = SubstitutionTable(tuple(rules))


def pronunciation(text: str, language: str) -> str:
    table = PRONUNCIATION_TABLES.get(language)
    if table is None:
        return bracketed(text)
    return table(text)
