from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../repo root
PACKAGE_DIR = Path(__file__).resolve().parent
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_path(*keys: str, default: str) -> str:
    v = _get_env(*keys, default=default)
    return str(v)


@dataclass(frozen=True)
class Settings:
    db_path: str
    catalog_path: str
    redirect_delay: int
    whatsapp_base_url: str
    host: str
    port: int
    log_level: str


settings = Settings(
    db_path=_get_path("DB_PATH", "DATABASE_PATH", default=str(ROOT_DIR / "data" / "checkout.db")),
    catalog_path=_get_path("CATALOG_PATH", "STORE_CONFIG", default=str(PACKAGE_DIR / "data" / "store-config.json")),
    redirect_delay=_get_int("REDIRECT_DELAY", default=3),
    whatsapp_base_url=(_get_env("WHATSAPP_BASE_URL", default="https://wa.me") or "https://wa.me").rstrip("/"),
    host=_get_env("HOST", default="127.0.0.1") or "127.0.0.1",
    port=_get_int("PORT", default=8000) or 8000,
    log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
)

if settings.redirect_delay < 0:
    raise RuntimeError("REDIRECT_DELAY must be >= 0 (seconds)")
