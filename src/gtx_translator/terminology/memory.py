from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Iterator

from rapidfuzz import fuzz

from ..storage import KeyValueStore
from .glossary import GlossaryEntry, apply_glossary

logger = logging.getLogger(__name__)

MEMORY_KEY = "translation_memory"
GLOSSARY_KEY = "glossary"
MAX_MEMORY_ENTRIES = 500


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class MemoryEntry:
    source: str
    target: str
    source_lang: str
    target_lang: str
    frequency: int = 1
    last_used: str = field(default_factory=_now)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source.lower(), self.source_lang, self.target_lang)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "MemoryEntry":
        return cls(
            source=payload["source"],
            target=payload["target"],
            source_lang=payload["source_lang"],
            target_lang=payload["target_lang"],
            frequency=int(payload.get("frequency", 1)),
            last_used=payload.get("last_used") or _now(),
        )


class TranslationMemory:
    """Translation memory plus forced-term glossary, persisted in a key-value store.

    Both lists are written back after every mutation.
    """

    def __init__(self, store: KeyValueStore, *, max_entries: int = MAX_MEMORY_ENTRIES) -> None:
        self.store = store
        self.max_entries = max_entries
        self.entries: list[MemoryEntry] = [MemoryEntry.from_dict(item) for item in store.get(MEMORY_KEY, [])]
        self.glossary: list[GlossaryEntry] = [GlossaryEntry.from_dict(item) for item in store.get(GLOSSARY_KEY, [])]
        logger.info(f"Loaded {len(self.entries)} memory entries and {len(self.glossary)} glossary entries")

    def save(self) -> None:
        self.store.update(
            {
                MEMORY_KEY: [entry.to_dict() for entry in self.entries],
                GLOSSARY_KEY: [entry.to_dict() for entry in self.glossary],
            }
        )

    def _find(self, source: str, source_lang: str, target_lang: str) -> MemoryEntry | None:
        key = (source.lower(), source_lang, target_lang)
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def add_to_memory(self, source: str, target: str, source_lang: str, target_lang: str) -> MemoryEntry:
        existing = self._find(source, source_lang, target_lang)
        if existing is not None:
            # Position is kept; only usage metadata moves.
            existing.frequency += 1
            existing.last_used = _now()
            entry = existing
        else:
            entry = MemoryEntry(source=source, target=target, source_lang=source_lang, target_lang=target_lang)
            self.entries.insert(0, entry)
            del self.entries[self.max_entries :]
        self.save()
        return entry

    def search_memory(self, query: str, source_lang: str, target_lang: str) -> list[MemoryEntry]:
        needle = query.lower()
        hits = [
            entry
            for entry in self.entries
            if needle in entry.source.lower() and entry.source_lang == source_lang and entry.target_lang == target_lang
        ]
        return sorted(hits, key=lambda entry: entry.frequency, reverse=True)

    def similar(
        self, text: str, source_lang: str, target_lang: str, *, limit: int = 5, threshold: float = 80.0
    ) -> list[MemoryEntry]:
        candidates: list[tuple[float, MemoryEntry]] = []
        for entry in self.entries:
            if entry.source_lang != source_lang or entry.target_lang != target_lang:
                continue
            score = fuzz.token_set_ratio(text, entry.source)
            if score >= threshold:
                candidates.append((score, entry))
        candidates.sort(key=lambda pair: pair[0], reverse=True)
        return [entry for _, entry in candidates[:limit]]

    def recent(self, limit: int = 50) -> list[MemoryEntry]:
        return self.entries[:limit]

    def add_to_glossary(self, term: str, translation: str, source_lang: str, target_lang: str) -> GlossaryEntry:
        entry = GlossaryEntry(term=term, translation=translation, source_lang=source_lang, target_lang=target_lang)
        self.glossary.insert(0, entry)
        self.save()
        return entry

    def import_glossary(self, entries: list[GlossaryEntry]) -> int:
        self.glossary[:0] = reversed(entries)
        self.save()
        return len(entries)

    def remove_glossary(self, index: int) -> GlossaryEntry:
        if not 0 <= index < len(self.glossary):
            raise IndexError(f"No glossary entry at position {index}")
        entry = self.glossary.pop(index)
        self.save()
        return entry

    def apply_glossary(self, text: str, source_lang: str, target_lang: str) -> str:
        return apply_glossary(text, self.glossary, source_lang, target_lang)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[MemoryEntry]:
        return iter(self.entries)
