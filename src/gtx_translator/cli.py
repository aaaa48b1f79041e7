from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .batch_runner import split_lines
from .errors import TranslatorError
from .export import EXPORT_EXTENSIONS, export_extension, export_results, export_translation
from .session import TranslatorSession, load_text_file, text_stats
from .terminology import read_glossary_csv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[logging.StreamHandler()],
)

app = typer.Typer(help="Translate text through the public gtx endpoint.")


def build_session() -> TranslatorSession:
    return TranslatorSession()


def _fail(exc: Exception) -> NoReturn:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _progress_echo(done: int, total: int) -> None:
    typer.echo(f"[{done}/{total}] processed")


@app.command()
def translate(
    text: Optional[str] = typer.Argument(None, help="Text to translate."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, readable=True, help="Read the text from a .txt file."),
    source_lang: Optional[str] = typer.Option(None, "--source-lang", "-s", help="Source language code, or 'auto'."),
    target_lang: Optional[str] = typer.Option(None, "--target-lang", "-t", help="Target language code."),
    glossary: bool = typer.Option(False, "--glossary", "-g", help="Apply glossary substitutions to the result."),
    export_format: Optional[str] = typer.Option(None, "--export", help="Save the result as json, csv, tsv or txt."),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Defaults to translation.<lang><ext>."),
) -> None:
    """Translate a text and record it in memory and history."""
    session = build_session()
    if export_format is not None and export_format.lower() not in EXPORT_EXTENSIONS:
        raise typer.BadParameter(f"Unknown export format {export_format}.")
    try:
        if file is not None:
            text = load_text_file(file)
        if not text:
            raise typer.BadParameter("Provide TEXT or --file.")
        result = session.translate(text, source_lang, target_lang)
    except TranslatorError as exc:
        _fail(exc)
    if result is None:
        typer.echo("Nothing to translate.")
        raise typer.Exit(code=1)

    output = result.translation
    if glossary:
        output = session.memory.apply_glossary(output, result.source_lang, result.target_lang)
    typer.echo(output)
    typer.echo(f"Quality: {result.quality}% ({'*' * result.stars})")
    typer.echo(f"Pronunciation: {result.pronunciation}")
    if result.detection is not None:
        typer.echo(f"Detected: {result.detection.language_name} ({result.detection.confidence}%)")

    if export_format is not None:
        target = output_path or Path(f"translation.{result.target_lang}{export_extension(export_format)}")
        body = export_translation(result.text, output, result.source_lang, result.target_lang, export_format)
        target.write_text(body, encoding="utf-8")
        typer.echo(f"Saved to {target}")


@app.command()
def stats(
    text: Optional[str] = typer.Argument(None, help="Text to count."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, readable=True, help="Read the text from a .txt file."),
) -> None:
    """Count characters, words and sentences."""
    try:
        if file is not None:
            text = load_text_file(file)
    except TranslatorError as exc:
        _fail(exc)
    counts = text_stats(text or "")
    typer.echo(f"{counts.characters} characters, {counts.words} words, {counts.sentences} sentences")


@app.command()
def swap() -> None:
    """Swap the saved source and target languages."""
    try:
        source_lang, target_lang = build_session().swap_languages()
    except ValueError as exc:
        _fail(exc)
    typer.echo(f"Languages: {source_lang} -> {target_lang}")


@app.command()
def detect(text: str = typer.Argument(..., help="Text whose language should be detected.")) -> None:
    """Detect the language of a text with a confidence estimate."""
    try:
        detection = build_session().detect_language(text)
    except TranslatorError as exc:
        _fail(exc)
    typer.echo(f"{detection.language} {detection.language_name} {detection.confidence}%")


@app.command()
def alternatives(
    text: str = typer.Argument(..., help="Text to translate."),
    source_lang: str = typer.Option("auto", "--source-lang", "-s"),
    target_lang: str = typer.Option("en", "--target-lang", "-t"),
) -> None:
    """Show alternative translations (whole text and chunked)."""
    try:
        results = build_session().alternatives(text, source_lang, target_lang)
    except TranslatorError as exc:
        _fail(exc)
    for alt in results:
        typer.echo(f"{alt.method} ({alt.confidence}%): {alt.text}")


@app.command("batch")
def batch(
    input_path: Path = typer.Argument(..., exists=True, readable=True, help="Text file with one entry per line."),
    source_lang: str = typer.Option("auto", "--source-lang", "-s"),
    target_lang: str = typer.Option("en", "--target-lang", "-t"),
    export_format: str = typer.Option("json", "--format", help="json, csv or tsv."),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Defaults to <name>.<lang><ext>."),
) -> None:
    """Translate every non-blank line of a text file and export the results."""
    session = build_session()
    try:
        texts = split_lines(load_text_file(input_path))
    except TranslatorError as exc:
        _fail(exc)
    if not texts:
        typer.echo("Please enter texts to translate.")
        raise typer.Exit(code=1)

    typer.echo(f"Processing {len(texts)} entries -> {target_lang}")
    try:
        results = session.batch.submit(texts, source_lang, target_lang, on_progress=_progress_echo)
    except RuntimeError as exc:
        _fail(exc)

    output = output_path or input_path.with_name(f"{input_path.stem}.{target_lang}{export_extension(export_format)}")
    output.write_text(export_results(results, export_format), encoding="utf-8")
    typer.echo(f"Batch complete: {session.batch.completed_count} succeeded, {session.batch.failed_count} failed.")
    typer.echo(f"Results saved to {output}")


@app.command("memory-search")
def memory_search(
    query: str = typer.Argument(""),
    source_lang: str = typer.Option("auto", "--source-lang", "-s"),
    target_lang: str = typer.Option("en", "--target-lang", "-t"),
) -> None:
    """Search translation memory for a language pair, most used first."""
    hits = build_session().memory.search_memory(query, source_lang, target_lang)
    if not hits:
        typer.echo("No translation memory yet.")
        return
    for entry in hits:
        typer.echo(f"{entry.frequency}x  {entry.source} -> {entry.target}")


@app.command("glossary-add")
def glossary_add(
    term: str = typer.Argument(...),
    translation: str = typer.Argument(...),
    source_lang: str = typer.Option(..., "--source-lang", "-s"),
    target_lang: str = typer.Option(..., "--target-lang", "-t"),
) -> None:
    """Add a forced term substitution."""
    build_session().memory.add_to_glossary(term, translation, source_lang, target_lang)
    typer.echo(f"Added to glossary: {term} -> {translation}")


@app.command("glossary-import")
def glossary_import(
    csv_path: Path = typer.Argument(..., exists=True, readable=True, help="CSV with term,translation columns."),
    source_lang: str = typer.Option(..., "--source-lang", "-s"),
    target_lang: str = typer.Option(..., "--target-lang", "-t"),
) -> None:
    """Import glossary entries from a CSV file."""
    try:
        entries = read_glossary_csv(csv_path, source_lang, target_lang)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    count = build_session().memory.import_glossary(entries)
    typer.echo(f"Imported {count} glossary entries from {csv_path.name}")


@app.command("glossary-list")
def glossary_list() -> None:
    """List glossary entries, newest first."""
    for idx, entry in enumerate(build_session().memory.glossary):
        typer.echo(f"{idx}: {entry.term} -> {entry.translation} ({entry.source_lang}->{entry.target_lang})")


@app.command()
def history(
    search: str = typer.Option("", "--search", help="Filter on input or output text."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Filter on either language."),
    oldest: bool = typer.Option(False, "--oldest", help="Oldest first."),
    clear: bool = typer.Option(False, "--clear", help="Delete all history."),
) -> None:
    """Show or clear translation history."""
    session = build_session()
    if clear:
        session.history.clear()
        typer.echo("History cleared!")
        return
    entries = session.history.filter(search, language, oldest_first=oldest)
    if not entries:
        typer.echo("No history yet")
        return
    for entry in entries:
        typer.echo(f"[{entry.source_lang}->{entry.target_lang}] {entry.input} => {entry.output}")


if __name__ == "__main__":
    app()
