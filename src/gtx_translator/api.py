from __future__ import annotations

import logging
from dataclasses import asdict
from functools import lru_cache
from typing import Literal, NoReturn, Optional

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from . import __version__
from .batch_runner import COMPLETED, FAILED, split_lines
from .errors import NetworkError, ParseError, RateLimitExceeded, UnsupportedInput
from .export import EXPORT_MEDIA_TYPES, export_extension, export_results, export_translation
from .history import HistoryEntry
from .session import TranslationResult, TranslatorSession, text_stats


def setup_logging() -> None:
    """Configure the root logger for console output."""
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)


setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="gtx translator API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_session() -> TranslatorSession:
    return TranslatorSession()


class TranslateRequest(BaseModel):
    text: str
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    apply_glossary: bool = False


class TranslateResponse(BaseModel):
    text: str
    translation: str
    source_lang: str
    target_lang: str
    sequence: int
    stale: bool
    quality: int
    stars: int
    pronunciation: str
    detection: Optional[dict] = None


class DetectRequest(BaseModel):
    text: str


class AlternativesRequest(BaseModel):
    text: str
    source_lang: str = "auto"
    target_lang: str = "en"


class BatchRequest(BaseModel):
    texts: list[str]
    source_lang: str = "auto"
    target_lang: str = "en"
    format: Optional[str] = None


class GlossaryRequest(BaseModel):
    term: str
    translation: str
    source_lang: str
    target_lang: str


class FavoriteRequest(BaseModel):
    input: str
    output: str
    source_lang: str
    target_lang: str


class ExportRequest(BaseModel):
    original: str
    translation: str
    source_lang: str
    target_lang: str
    format: Literal["json", "csv", "tsv", "xlsx", "txt"] = "txt"


class StatsRequest(BaseModel):
    text: str


class PreferencesRequest(BaseModel):
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    dark_mode: Optional[bool] = None


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(int(exc.retry_after or 0))}
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(exc), headers=headers) from exc
    if isinstance(exc, (NetworkError, ParseError)):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if isinstance(exc, UnsupportedInput):
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc
    raise exc


@app.get("/")
def root() -> dict:
    return {"message": "gtx translator API", "version": __version__}


def _translate_response(result: TranslationResult, translation: str) -> TranslateResponse:
    return TranslateResponse(
        text=result.text,
        translation=translation,
        source_lang=result.source_lang,
        target_lang=result.target_lang,
        sequence=result.sequence,
        stale=result.stale,
        quality=result.quality,
        stars=result.stars,
        pronunciation=result.pronunciation,
        detection=asdict(result.detection) if result.detection else None,
    )


@app.post("/api/translate", response_model=TranslateResponse)
def translate(payload: TranslateRequest, session: TranslatorSession = Depends(get_session)) -> TranslateResponse:
    try:
        result = session.translate(payload.text, payload.source_lang, payload.target_lang)
    except (RateLimitExceeded, NetworkError, ParseError) as exc:
        logger.warning(f"Translation failed: {exc}")
        _raise_http(exc)
    if result is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to translate")
    translation = result.translation
    if payload.apply_glossary:
        translation = session.memory.apply_glossary(translation, result.source_lang, result.target_lang)
    return _translate_response(result, translation)


@app.post("/api/translate/retry", response_model=TranslateResponse)
def retry_translation(session: TranslatorSession = Depends(get_session)) -> TranslateResponse:
    try:
        result = session.retry()
    except (RateLimitExceeded, NetworkError, ParseError) as exc:
        logger.warning(f"Retry failed: {exc}")
        _raise_http(exc)
    if result is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No translation to retry")
    return _translate_response(result, result.translation)


@app.post("/api/detect-language")
def detect_language(payload: DetectRequest, session: TranslatorSession = Depends(get_session)) -> dict:
    try:
        detection = session.detect_language(payload.text)
    except RateLimitExceeded as exc:
        _raise_http(exc)
    return asdict(detection)


@app.post("/api/stats")
def stats(payload: StatsRequest) -> dict:
    return asdict(text_stats(payload.text))


@app.post("/api/export")
def export(payload: ExportRequest) -> PlainTextResponse:
    body = export_translation(
        payload.original, payload.translation, payload.source_lang, payload.target_lang, payload.format
    )
    return PlainTextResponse(body, media_type=EXPORT_MEDIA_TYPES[export_extension(payload.format)])


@app.post("/api/alternatives")
def alternatives(payload: AlternativesRequest, session: TranslatorSession = Depends(get_session)) -> dict:
    try:
        results = session.alternatives(payload.text, payload.source_lang, payload.target_lang)
    except (RateLimitExceeded, NetworkError, ParseError) as exc:
        _raise_http(exc)
    return {"alternatives": [asdict(alt) for alt in results]}


@app.post("/api/batch")
def batch(payload: BatchRequest, session: TranslatorSession = Depends(get_session)):
    texts = [line for text in payload.texts for line in split_lines(text)]
    if not texts:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter texts to translate")
    try:
        results = session.batch.submit(texts, payload.source_lang, payload.target_lang)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if payload.format:
        media_type = EXPORT_MEDIA_TYPES[export_extension(payload.format)]
        return PlainTextResponse(export_results(results, payload.format), media_type=media_type)
    return {
        "completed": sum(1 for item in results if item.status == COMPLETED),
        "failed": sum(1 for item in results if item.status == FAILED),
        "items": [asdict(item) for item in results],
    }


@app.get("/api/memory")
def list_memory(limit: int = 50, session: TranslatorSession = Depends(get_session)) -> dict:
    return {"total": len(session.memory), "entries": [entry.to_dict() for entry in session.memory.recent(limit)]}


@app.get("/api/memory/search")
def search_memory(
    query: str = "",
    source_lang: str = "auto",
    target_lang: str = "en",
    session: TranslatorSession = Depends(get_session),
) -> dict:
    return {"entries": [entry.to_dict() for entry in session.memory.search_memory(query, source_lang, target_lang)]}


@app.get("/api/memory/similar")
def similar_memory(
    text: str,
    source_lang: str = "auto",
    target_lang: str = "en",
    limit: int = 5,
    session: TranslatorSession = Depends(get_session),
) -> dict:
    return {"entries": [entry.to_dict() for entry in session.memory.similar(text, source_lang, target_lang, limit=limit)]}


@app.get("/api/glossary")
def list_glossary(session: TranslatorSession = Depends(get_session)) -> dict:
    return {"entries": [entry.to_dict() for entry in session.memory.glossary]}


@app.post("/api/glossary", status_code=status.HTTP_201_CREATED)
def add_glossary(payload: GlossaryRequest, session: TranslatorSession = Depends(get_session)) -> dict:
    entry = session.memory.add_to_glossary(payload.term, payload.translation, payload.source_lang, payload.target_lang)
    return entry.to_dict()


@app.delete("/api/glossary/{index}")
def delete_glossary(index: int, session: TranslatorSession = Depends(get_session)) -> dict:
    try:
        entry = session.memory.remove_glossary(index)
    except IndexError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return entry.to_dict()


@app.get("/api/history")
def list_history(
    search: str = "",
    language: Optional[str] = None,
    oldest_first: bool = False,
    session: TranslatorSession = Depends(get_session),
) -> dict:
    entries = session.history.filter(search, language, oldest_first=oldest_first)
    return {"count": len(session.history.entries), "entries": [entry.to_dict() for entry in entries]}


@app.get("/api/favorites")
def list_favorites(session: TranslatorSession = Depends(get_session)) -> dict:
    return {"entries": [entry.to_dict() for entry in session.history.favorites]}


@app.post("/api/favorites/toggle")
def toggle_favorite(payload: FavoriteRequest, session: TranslatorSession = Depends(get_session)) -> dict:
    entry = HistoryEntry(
        input=payload.input,
        output=payload.output,
        source_lang=payload.source_lang,
        target_lang=payload.target_lang,
    )
    with session.state_lock:
        favorited = session.history.toggle_favorite(entry)
    return {"favorited": favorited}


@app.delete("/api/favorites/{index}")
def delete_favorite(index: int, session: TranslatorSession = Depends(get_session)) -> dict:
    try:
        with session.state_lock:
            entry = session.history.delete_favorite(index)
    except IndexError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return entry.to_dict()


def _preferences(session: TranslatorSession) -> dict:
    source_lang, target_lang = session.selected_languages
    return {"source_lang": source_lang, "target_lang": target_lang, "dark_mode": session.history.dark_mode}


@app.get("/api/preferences")
def get_preferences(session: TranslatorSession = Depends(get_session)) -> dict:
    return _preferences(session)


@app.put("/api/preferences")
def update_preferences(payload: PreferencesRequest, session: TranslatorSession = Depends(get_session)) -> dict:
    if payload.source_lang or payload.target_lang:
        source_lang, target_lang = session.selected_languages
        session.select_languages(payload.source_lang or source_lang, payload.target_lang or target_lang)
    if payload.dark_mode is not None:
        session.history.dark_mode = payload.dark_mode
    return _preferences(session)


@app.post("/api/languages/swap")
def swap_languages(session: TranslatorSession = Depends(get_session)) -> dict:
    try:
        source_lang, target_lang = session.swap_languages()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"source_lang": source_lang, "target_lang": target_lang}
