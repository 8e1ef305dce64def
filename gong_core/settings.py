"""Environment-driven settings for the dashboard core and its surfaces.

Every value has a default so the Streamlit app and the API run with no
environment configured:

- GONG_DATA_DIR      directory holding the bundled CSV (default: <repo>/data)
- GONG_DATA_FILE     CSV file name inside GONG_DATA_DIR
- GONG_LOG_LEVEL     logging level name (default: INFO)
- GONG_CORS_ORIGINS  comma separated origins allowed by the API
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

DEFAULT_DATA_FILE = "Gong_MoM_Jan_to_May_2025_Clean.csv"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _origins(raw: str | None) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_CORS_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def _log_level(raw: str | None) -> str:
    level = (raw or "INFO").strip().upper()
    if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        return "INFO"
    return level


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    data_file: str
    log_level: str
    cors_origins: Tuple[str, ...]

    @property
    def data_path(self) -> Path:
        return self.data_dir / self.data_file


def get_settings() -> Settings:
    """Read settings from the environment. Cheap; call it where needed."""
    data_dir = os.getenv("GONG_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else _project_root() / "data",
        data_file=os.getenv("GONG_DATA_FILE", "").strip() or DEFAULT_DATA_FILE,
        log_level=_log_level(os.getenv("GONG_LOG_LEVEL")),
        cors_origins=_origins(os.getenv("GONG_CORS_ORIGINS")),
    )


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
