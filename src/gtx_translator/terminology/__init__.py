"""Terminology utilities: glossary handling + translation memory."""

from .glossary import GlossaryEntry, apply_glossary, read_glossary_csv  # noqa: F401
from .memory import MAX_MEMORY_ENTRIES, MemoryEntry, TranslationMemory  # noqa: F401

__all__ = [
    "GlossaryEntry",
    "MAX_MEMORY_ENTRIES",
    "MemoryEntry",
    "TranslationMemory",
    "apply_glossary",
    "read_glossary_csv",
]
