from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ENDPOINT = "https://translate.googleapis.com/translate_a/single"


@dataclass(slots=True)
class Settings:
    data_root: Path
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 10.0
    rate_limit_max: int = 30
    rate_limit_window: float = 60.0
    batch_delay: float = 0.5
    default_source_lang: str = "auto"
    default_target_lang: str = "en"

    @property
    def store_path(self) -> Path:
        return self.data_root / "store.json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_root = Path(os.getenv("GTX_DATA_ROOT", "./data")).resolve()
    data_root.mkdir(parents=True, exist_ok=True)
    return Settings(
        data_root=data_root,
        endpoint=os.getenv("GTX_ENDPOINT", DEFAULT_ENDPOINT).strip(),
        timeout=float(os.getenv("GTX_TIMEOUT", "10")),
        rate_limit_max=int(os.getenv("GTX_RATE_LIMIT_MAX", "30")),
        rate_limit_window=float(os.getenv("GTX_RATE_LIMIT_WINDOW", "60")),
        batch_delay=float(os.getenv("GTX_BATCH_DELAY", "0.5")),
        default_source_lang=os.getenv("GTX_DEFAULT_SOURCE_LANG", "auto"),
        default_target_lang=os.getenv("GTX_DEFAULT_TARGET_LANG", "en"),
    )
