from __future__ import annotations

import json

from gtx_translator.batch_runner import BatchItem
from gtx_translator.export import export_extension, export_results, export_translation


def _items() -> list[BatchItem]:
    return [
        BatchItem(text='He said "hi"', source_lang="en", target_lang="es", status="completed", result='Él dijo "hola"'),
        BatchItem(text="broken", source_lang="en", target_lang="es", status="failed", error="HTTP 500"),
    ]


def test_csv_doubles_embedded_quotes() -> None:
    lines = export_results(_items(), "csv").split("\n")

    assert lines[0] == '"Original","Translation","Status"'
    assert lines[1] == '"He said ""hi""","Él dijo ""hola""","completed"'
    assert lines[2] == '"broken","Failed","failed"'


def test_json_is_pretty_printed() -> None:
    text = export_results(_items(), "json")

    assert text.startswith('[\n  {\n    "original"')
    assert json.loads(text)[1] == {"original": "broken", "translation": "Failed", "status": "failed"}


def test_default_is_tab_separated_pairs() -> None:
    assert export_results(_items(), "tsv") == 'He said "hi"\tÉl dijo "hola"\nbroken\tFailed'
    assert export_results(_items(), "anything") == export_results(_items(), "tsv")


def test_extensions_never_claim_spreadsheet() -> None:
    assert export_extension("json") == ".json"
    assert export_extension("xlsx") == ".tsv"
    assert export_extension("unknown") == ".tsv"


def test_export_single_translation() -> None:
    assert export_translation("Hi", "Hola", "en", "es") == "Hola"
    assert export_translation('a "b"', "c", "en", "es", "csv") == '"Original","Translation"\n"a ""b""","c"'
    assert export_translation("Hi", "Hola", "en", "es", "tsv") == "Original\tTranslation\nHi\tHola"
    assert json.loads(export_translation("Hi", "Hola", "en", "es", "json"))["target_lang"] == "es"
