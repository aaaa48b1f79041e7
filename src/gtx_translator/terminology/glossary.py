from __future__ import annotations

import csv
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class GlossaryEntry:
    term: str
    translation: str
    source_lang: str
    target_lang: str
    created_at: str = field(default_factory=_now)

    def matches_pair(self, source_lang: str, target_lang: str) -> bool:
        return self.source_lang == source_lang and self.target_lang == target_lang

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "GlossaryEntry":
        return cls(
            term=payload["term"],
            translation=payload["translation"],
            source_lang=payload["source_lang"],
            target_lang=payload["target_lang"],
            created_at=payload.get("created_at") or _now(),
        )


def apply_glossary(text: str, entries: Iterable[GlossaryEntry], source_lang: str, target_lang: str) -> str:
    """Replace whole-word, case-insensitive occurrences of each term.

    Entries are applied in the order given, each pass working on the output
    of the previous one.
    """
    result = text
    for entry in entries:
        if not entry.term or not entry.matches_pair(source_lang, target_lang):
            continue
        pattern = re.compile(rf"\b{re.escape(entry.term)}\b", re.IGNORECASE)
        result = pattern.sub(lambda _match, value=entry.translation: value, result)
    return result


def read_glossary_csv(path: str | Path, source_lang: str, target_lang: str) -> list[GlossaryEntry]:
    entries: list[GlossaryEntry] = []
    with Path(path).open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        required = {"term", "translation"}
        if not required.issubset(reader.fieldnames or []):
            raise ValueError(f"Glossary CSV must include headers {required}, got {reader.fieldnames}")
        for row in reader:
            term = (row.get("term") or "").strip()
            translation = (row.get("translation") or "").strip()
            if not term or not translation:
                continue
            entries.append(GlossaryEntry(term=term, translation=translation, source_lang=source_lang, target_lang=target_lang))
    return entries
