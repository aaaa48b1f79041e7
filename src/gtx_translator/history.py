from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"
FAVORITES_KEY = "favorites"
RECENT_LANGUAGES_KEY = "recent_languages"
INPUT_LANGUAGE_KEY = "input_language"
OUTPUT_LANGUAGE_KEY = "output_language"
DARK_MODE_KEY = "dark_mode"

MAX_HISTORY = 100
MAX_RECENT_LANGUAGES = 5


@dataclass(slots=True)
class HistoryEntry:
    input: str
    output: str
    source_lang: str
    target_lang: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "HistoryEntry":
        return cls(**{key: payload[key] for key in ("input", "output", "source_lang", "target_lang", "timestamp")})

    def same_pair(self, other: "HistoryEntry") -> bool:
        return self.input == other.input and self.output == other.output


@dataclass(slots=True, frozen=True)
class RecentLanguage:
    code: str
    name: str


class History:
    """Translation history, favorites, recent target languages and UI preferences."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.entries = [HistoryEntry.from_dict(item) for item in store.get(HISTORY_KEY, [])]
        self.favorites = [HistoryEntry.from_dict(item) for item in store.get(FAVORITES_KEY, [])]
        self.recent_languages = [RecentLanguage(**item) for item in store.get(RECENT_LANGUAGES_KEY, [])]

    def _save_history(self) -> None:
        self.store.set(HISTORY_KEY, [entry.to_dict() for entry in self.entries])

    def _save_favorites(self) -> None:
        self.store.set(FAVORITES_KEY, [entry.to_dict() for entry in self.favorites])

    def add(self, entry: HistoryEntry) -> None:
        self.entries.insert(0, entry)
        del self.entries[MAX_HISTORY:]
        self._save_history()

    def filter(self, search: str = "", language: str | None = None, *, oldest_first: bool = False) -> list[HistoryEntry]:
        results = list(self.entries)
        needle = search.lower()
        if needle:
            results = [e for e in results if needle in e.input.lower() or needle in e.output.lower()]
        if language and language != "all":
            results = [e for e in results if language in (e.source_lang, e.target_lang)]
        if oldest_first:
            results.reverse()
        return results

    def languages(self) -> list[str]:
        seen: list[str] = []
        for entry in self.entries:
            for code in (entry.source_lang, entry.target_lang):
                if code not in seen:
                    seen.append(code)
        return seen

    def delete(self, index: int) -> HistoryEntry:
        if not 0 <= index < len(self.entries):
            raise IndexError(f"No history entry at position {index}")
        removed = self.entries.pop(index)
        self._save_history()
        return removed

    def clear(self) -> None:
        self.entries = []
        self._save_history()
        logger.info("History cleared")

    def is_favorite(self, entry: HistoryEntry) -> bool:
        return any(fav.same_pair(entry) for fav in self.favorites)

    def toggle_favorite(self, entry: HistoryEntry) -> bool:
        if self.is_favorite(entry):
            self.favorites = [fav for fav in self.favorites if not fav.same_pair(entry)]
            favorited = False
        else:
            self.favorites.append(entry)
            favorited = True
        self._save_favorites()
        return favorited

    def delete_favorite(self, index: int) -> HistoryEntry:
        if not 0 <= index < len(self.favorites):
            raise IndexError(f"No favorite at position {index}")
        removed = self.favorites.pop(index)
        self._save_favorites()
        return removed

    def add_recent_language(self, code: str, name: str) -> None:
        remaining = [lang for lang in self.recent_languages if lang.code != code]
        self.recent_languages = [RecentLanguage(code=code, name=name), *remaining][:MAX_RECENT_LANGUAGES]
        self.store.set(RECENT_LANGUAGES_KEY, [asdict(lang) for lang in self.recent_languages])

    def selected_languages(self, default_source: str, default_target: str) -> tuple[str, str]:
        return (
            self.store.get(INPUT_LANGUAGE_KEY, default_source),
            self.store.get(OUTPUT_LANGUAGE_KEY, default_target),
        )

    def select_languages(self, source_lang: str, target_lang: str) -> None:
        self.store.update({INPUT_LANGUAGE_KEY: source_lang, OUTPUT_LANGUAGE_KEY: target_lang})

    @property
    def dark_mode(self) -> bool:
        return bool(self.store.get(DARK_MODE_KEY, False))

    @dark_mode.setter
    def dark_mode(self, enabled: bool) -> None:
        self.store.set(DARK_MODE_KEY, bool(enabled))
