"""Export batch results and single translations as JSON, CSV or TSV text."""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from typing import Iterable

from .batch_runner import BatchItem

EXPORT_EXTENSIONS = {
    "json": ".json",
    "csv": ".csv",
    "tsv": ".tsv",
    # Older exports were labelled .xlsx although the payload was always TSV.
    "xlsx": ".tsv",
    "txt": ".txt",
}

EXPORT_MEDIA_TYPES = {
    ".json": "application/json",
    ".csv": "text/csv",
    ".tsv": "text/tab-separated-values",
    ".txt": "text/plain",
}


def export_extension(fmt: str) -> str:
    return EXPORT_EXTENSIONS.get(fmt.lower(), ".tsv")


def _rows(items: Iterable[BatchItem]) -> list[dict[str, str]]:
    return [
        {"original": item.text, "translation": item.result or "Failed", "status": item.status}
        for item in items
    ]


def _to_csv(rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def export_results(items: Iterable[BatchItem], fmt: str = "json") -> str:
    """Serialize processed batch items.

    ``json`` gives a pretty array of {original, translation, status}, ``csv``
    a quoted table with a header row, anything else tab-joined
    original/translation lines.
    """
    rows = _rows(items)
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(rows, ensure_ascii=False, indent=2)
    if fmt == "csv":
        table = [["Original", "Translation", "Status"]]
        table.extend([row["original"], row["translation"], row["status"]] for row in rows)
        return _to_csv(table)
    return "\n".join(f"{row['original']}\t{row['translation']}" for row in rows)


def export_translation(original: str, translation: str, source_lang: str, target_lang: str, fmt: str = "txt") -> str:
    fmt = fmt.lower()
    if fmt == "json":
        payload = {
            "original": original,
            "translation": translation,
            "source_lang": source_lang,
            "target_lang": target_lang,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)
    if fmt == "csv":
        return _to_csv([["Original", "Translation"], [original, translation]])
    if fmt in {"tsv", "xlsx"}:
        return f"Original\tTranslation\n{original}\t{translation}"
    return translation
