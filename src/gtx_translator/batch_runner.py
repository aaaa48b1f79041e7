from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterator, Protocol, Sequence

logger = logging.getLogger(__name__)

BATCH_DELAY = 0.5

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"

ProgressCallback = Callable[[int, int], None]
CompleteCallback = Callable[[list["BatchItem"]], None]


class Translator(Protocol):
    def translate(self, text: str, source_lang: str, target_lang: str) -> str: ...


@dataclass(slots=True)
class BatchItem:
    text: str
    source_lang: str
    target_lang: str
    status: str = PENDING
    result: str | None = None
    error: str | None = None


def split_lines(raw: str) -> list[str]:
    return [line for line in raw.splitlines() if line.strip()]

class BatchTranslator:
    """Sequential translation queue with fixed pacing between items.

    Items run one at a time; a failure marks that item and the run continues.
    The queue cannot be replaced while a run is in progress.
    """

    def __init__(
        self,
        translator: Translator,
        *,
        delay: float = BATCH_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.translator = translator
        self.delay = delay
        self._sleep = sleep
        self.queue: list[BatchItem] = []
        self.results: list[BatchItem] = []
        self.is_processing = False
        self._lock = threading.Lock()

    @staticmethod
    def _items(texts: Sequence[str], source_lang: str, target_lang: str) -> list[BatchItem]:
        return [BatchItem(text=text, source_lang=source_lang, target_lang=target_lang) for text in texts]

    def enqueue(self, texts: Sequence[str], source_lang: str, target_lang: str) -> list[BatchItem]:
        with self._lock:
            if self.is_processing:
                raise RuntimeError("Batch is already running")
            self.queue = self._items(texts, source_lang, target_lang)
            self.results = []
            return [replace(item) for item in self.queue]

    def _claim(self, items: list[BatchItem] | None = None) -> list[BatchItem]:
        with self._lock:
            if self.is_processing:
                raise RuntimeError("Batch is already running")
            if items is not None:
                self.queue = items
            self.is_processing = True
            self.results = []
            return list(self.queue)

    def _process(self, queue: list[BatchItem]) -> Iterator[BatchItem]:
        total = len(queue)
        logger.info(f"Starting batch of {total} items")
        try:
            for idx, item in enumerate(queue, start=1):
                try:
                    item.result = self.translator.translate(item.text, item.source_lang, item.target_lang)
                    item.status = COMPLETED
                except Exception as exc:
                    item.status = FAILED
                    item.error = str(exc)
                    logger.warning(f"Batch item {idx}/{total} failed: {exc}")
                snapshot = replace(item)
                self.results.append(snapshot)
                yield snapshot
                self._sleep(self.delay)
        finally:
            self.is_processing = False
        logger.info(f"Batch finished: {self.completed_count} completed, {self.failed_count} failed")

    def _consume(
        self,
        stream: Iterator[BatchItem],
        total: int,
        on_progress: ProgressCallback | None,
        on_complete: CompleteCallback | None,
    ) -> list[BatchItem]:
        results = []
        for done, item in enumerate(stream, start=1):
            results.append(item)
            if on_progress:
                on_progress(done, total)
        if on_complete:
            on_complete(results)
        return results

    def iter_run(self) -> Iterator[BatchItem]:
        """Process the queue lazily, yielding a snapshot of each finished item."""
        yield from self._process(self._claim())

    def run(
        self,
        on_progress: ProgressCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> list[BatchItem]:
        return self._consume(self.iter_run(), len(self.queue), on_progress, on_complete)

    def submit(
        self,
        texts: Sequence[str],
        source_lang: str,
        target_lang: str,
        on_progress: ProgressCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> list[BatchItem]:
        """Enqueue and run in one step; the queue is claimed before any other caller can replace it."""
        queue = self._claim(self._items(texts, source_lang, target_lang))
        return self._consume(self._process(queue), len(queue), on_progress, on_complete)

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.results if item.status == COMPLETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for item in self.results if item.status == FAILED)
