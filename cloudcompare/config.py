from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(o.strip() for o in raw.split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path(os.getenv("CLOUDCOMPARE_DATA_DIR", str(_PACKAGE_DATA_DIR)))
    cache_max_size: int = int(os.getenv("CLOUDCOMPARE_CACHE_SIZE", "100"))
    rate_limit_requests: int = int(os.getenv("CLOUDCOMPARE_RATE_LIMIT", "100"))
    rate_limit_window_seconds: float = float(os.getenv("CLOUDCOMPARE_RATE_WINDOW", "900"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))
    cors_origins: tuple[str, ...] = _split_origins(os.getenv("CORS_ORIGINS", "*"))
    service_name: str = "cloud-platform-comparison-tool"


DEFAULT_SETTINGS = Settings()
