from __future__ import annotations

import itertools
import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path

from .batch_runner import BatchTranslator
from .client import Alternative, Detection, GtxClient, alternatives_requests
from .errors import NetworkError, ParseError, RateLimitExceeded, UnsupportedInput
from .history import History, HistoryEntry
from .languages import AUTO, language_name
from .rate_limiter import RateLimiter
from .scoring import pronunciation, quality_score, stars
from .settings import Settings, get_settings
from .storage import KeyValueStore
from .terminology import TranslationMemory

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 5000
TEXT_SUFFIXES = {".txt"}

UNKNOWN_DETECTION = Detection(language="unknown", confidence=0, language_name="Unknown")


@dataclass(slots=True)
class TranslationResult:
    text: str
    translation: str
    source_lang: str
    target_lang: str
    sequence: int
    stale: bool = False
    quality: int = 0
    stars: int = 1
    pronunciation: str = ""
    detection: Detection | None = None


@dataclass(slots=True, frozen=True)
class TextStats:
    characters: int
    words: int
    sentences: int


def text_stats(text: str) -> TextStats:
    stripped = text.strip()
    words = len(stripped.split()) if stripped else 0
    sentences = len([s for s in re.split(r"[.!?]+", text) if s.strip()]) if stripped else 0
    return TextStats(characters=len(text), words=words, sentences=sentences)


def clip_input(text: str) -> str:
    if len(text) > MAX_INPUT_CHARS:
        logger.warning(f"Input of {len(text)} characters truncated to {MAX_INPUT_CHARS}")
        return text[:MAX_INPUT_CHARS]
    return text


def load_text_file(path: str | Path) -> str:
    path = Path(path)
    if path.suffix.lower() not in TEXT_SUFFIXES:
        raise UnsupportedInput(f"Unsupported file type {path.suffix or '(none)'}. Use .txt files.")
    return path.read_text(encoding="utf-8")


class TranslatorSession:
    """Application context: owns persisted state and the collaborators that act on it.

    Sync API endpoints run on a thread pool, so the steps that change memory,
    history and ``current`` hold ``state_lock``. Network calls happen outside it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: KeyValueStore | None = None,
        client: GtxClient | None = None,
        limiter: RateLimiter | None = None,
        batch: BatchTranslator | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store if store is not None else KeyValueStore(self.settings.store_path)
        self.client = client or GtxClient(endpoint=self.settings.endpoint, timeout=self.settings.timeout)
        self.limiter = limiter or RateLimiter(self.settings.rate_limit_max, self.settings.rate_limit_window)
        self.memory = TranslationMemory(self.store)
        self.history = History(self.store)
        self.batch = batch or BatchTranslator(self.client, delay=self.settings.batch_delay)
        self.current: TranslationResult | None = None
        self.state_lock = threading.RLock()
        self._last_request: tuple[str, str, str] | None = None
        self._sequence = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def selected_languages(self) -> tuple[str, str]:
        return self.history.selected_languages(self.settings.default_source_lang, self.settings.default_target_lang)

    def _issue(self) -> int:
        with self._lock:
            self._latest = next(self._sequence)
            return self._latest

    def _is_latest(self, sequence: int) -> bool:
        with self._lock:
            return sequence == self._latest

    def _charge(self, calls: int) -> None:
        if not self.limiter.allow(calls):
            raise RateLimitExceeded(retry_after=self.limiter.retry_after())

    def _stale(self, result: TranslationResult) -> TranslationResult:
        logger.warning(f"Discarding stale translation #{result.sequence}; a newer request was issued")
        result.stale = True
        return result

    def translate(self, text: str, source_lang: str | None = None, target_lang: str | None = None) -> TranslationResult | None:
        text = clip_input(text).strip()
        if not text:
            return None
        default_source, default_target = self.selected_languages
        source_lang = source_lang or default_source
        target_lang = target_lang or default_target
        self._last_request = (text, source_lang, target_lang)

        # auto-detected sources cost a second request for the detection
        self._charge(2 if source_lang == AUTO else 1)

        sequence = self._issue()
        translation = self.client.translate(text, source_lang, target_lang)
        result = TranslationResult(
            text=text,
            translation=translation,
            source_lang=source_lang,
            target_lang=target_lang,
            sequence=sequence,
        )
        if not self._is_latest(sequence):
            return self._stale(result)
        detection = self._detect(text) if source_lang == AUTO else None

        with self.state_lock:
            if not self._is_latest(sequence):
                return self._stale(result)
            self.memory.add_to_memory(text, translation, source_lang, target_lang)
            result.quality = quality_score(text, translation)
            result.stars = stars(result.quality)
            result.pronunciation = pronunciation(translation, target_lang)
            result.detection = detection
            self.history.add(
                HistoryEntry(input=text, output=translation, source_lang=source_lang, target_lang=target_lang)
            )
            self.current = result
        return result

    def retry(self) -> TranslationResult | None:
        if self._last_request is None:
            return None
        return self.translate(*self._last_request)

    def _detect(self, text: str) -> Detection:
        try:
            return self.client.detect_language(text)
        except (NetworkError, ParseError) as exc:
            logger.warning(f"Language detection failed: {exc}")
            return UNKNOWN_DETECTION

    def detect_language(self, text: str) -> Detection:
        self._charge(1)
        return self._detect(text)

    def alternatives(self, text: str, source_lang: str, target_lang: str) -> list[Alternative]:
        self._charge(alternatives_requests(text))
        return self.client.alternatives(text, source_lang, target_lang)

    def select_languages(self, source_lang: str, target_lang: str) -> None:
        with self.state_lock:
            self.history.select_languages(source_lang, target_lang)
            self.history.add_recent_language(target_lang, language_name(target_lang))

    def swap_languages(self) -> tuple[str, str]:
        with self.state_lock:
            source_lang, target_lang = self.selected_languages
            if source_lang == AUTO:
                raise ValueError("Cannot swap with auto-detect")
            self.history.select_languages(target_lang, source_lang)
        return target_lang, source_lang

    def toggle_favorite(self) -> bool:
        with self.state_lock:
            if self.current is None:
                raise ValueError("No translation to save")
            entry = HistoryEntry(
                input=self.current.text,
                output=self.current.translation,
                source_lang=self.current.source_lang,
                target_lang=self.current.target_lang,
            )
            return self.history.toggle_favorite(entry)
