"""Google gtx translation front-end: memory, glossary, batch and scoring helpers."""

__version__ = "0.1.0"
