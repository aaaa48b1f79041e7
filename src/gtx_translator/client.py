from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import NetworkError, ParseError
from .languages import AUTO, language_name
from .scoring import detection_confidence
from .settings import DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; gtx-translator/0.1)"


@dataclass(slots=True, frozen=True)
class Detection:
    language: str
    confidence: int
    language_name: str


@dataclass(slots=True, frozen=True)
class Alternative:
    text: str
    confidence: int
    method: str


def _join_segments(payload: Any) -> str:
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], list):
        raise ParseError("Response is not a list of translated segments")
    fragments: list[str] = []
    for segment in payload[0]:
        if not isinstance(segment, list) or not segment:
            raise ParseError(f"Unexpected segment shape: {segment!r}")
        fragment = segment[0]
        if fragment is None:
            continue
        if not isinstance(fragment, str):
            raise ParseError(f"Unexpected fragment type: {type(fragment).__name__}")
        fragments.append(fragment)
    return "".join(fragments)


def chunk_words(text: str, parts: int = 2) -> list[str]:
    words = text.split(" ")
    size = -(-len(words) // parts)
    return [" ".join(words[i : i + size]) for i in range(0, len(words), size)]


def _wants_chunks(text: str) -> bool:
    return len(text) > 10 and len(text.split(" ")) > 3


def alternatives_requests(text: str) -> int:
    """Number of HTTP requests ``GtxClient.alternatives`` issues for ``text``."""
    return 1 + len(chunk_words(text)) if _wants_chunks(text) else 1


@dataclass
class GtxClient:
    """Thin wrapper over the public ``translate_a/single`` endpoint.

    One request per call: no retry and no caching. Failures surface as
    :class:`NetworkError` or :class:`ParseError`.
    """

    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 10.0
    session: requests.Session | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update({"User-Agent": USER_AGENT})

    def _request(self, text: str, source_lang: str, target_lang: str) -> Any:
        params = {"client": "gtx", "sl": source_lang, "tl": target_lang, "dt": "t", "q": text}
        logger.debug(f"GET {self.endpoint} sl={source_lang} tl={target_lang} chars={len(text)}")
        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Translation request failed: {exc}") from exc
        if not response.ok:
            raise NetworkError(f"Translation failed with HTTP {response.status_code}", status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError("Translation response is not valid JSON") from exc

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        return _join_segments(self._request(text, source_lang, target_lang))

    def detect_language(self, text: str) -> Detection:
        payload = self._request(text, AUTO, "en")
        if not isinstance(payload, list) or len(payload) < 3 or not isinstance(payload[2], str):
            raise ParseError("Response does not carry a detected language code")
        code = payload[2]
        return Detection(language=code, confidence=detection_confidence(text), language_name=language_name(code))

    def alternatives(self, text: str, source_lang: str, target_lang: str) -> list[Alternative]:
        main = self.translate(text, source_lang, target_lang)
        results = [Alternative(text=main, confidence=95, method="Primary")]
        if _wants_chunks(text):
            chunks = chunk_words(text)
            with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
                translated = list(pool.map(lambda chunk: self.translate(chunk, source_lang, target_lang), chunks))
            results.append(Alternative(text=" ".join(translated), confidence=85, method="Chunked"))
        return results
