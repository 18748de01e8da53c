from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from pathlib import Path
from typing import Mapping, Optional

from db.errors import ConfigError

DEFAULT_DB_PATH = "data/pos.sqlite"
DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "db" / "pos_items.json"
DEFAULT_DISPLAY_UTC_OFFSET = 7
DEFAULT_TOP_ITEMS = 5


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read once at startup.

    Fields:
      - db_path: SQLite file backing the key-value store
      - catalog_path: static product catalog (JSON)
      - display_utc_offset: hours east of UTC used when rendering dates
      - top_items: how many products the dashboard ranks
      - debug: verbose logging
    """

    db_path: str = DEFAULT_DB_PATH
    catalog_path: Path = DEFAULT_CATALOG_PATH
    display_utc_offset: int = DEFAULT_DISPLAY_UTC_OFFSET
    top_items: int = DEFAULT_TOP_ITEMS
    debug: bool = False

    @property
    def display_tz(self) -> tzinfo:
        return timezone(timedelta(hours=self.display_utc_offset))


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables (``os.environ`` by default)."""
    env = os.environ if env is None else env

    offset = _int_env(env, "POS_DISPLAY_UTC_OFFSET", DEFAULT_DISPLAY_UTC_OFFSET)
    if not -12 <= offset <= 14:
        raise ConfigError(f"POS_DISPLAY_UTC_OFFSET out of range: {offset}")

    top_items = _int_env(env, "POS_TOP_ITEMS", DEFAULT_TOP_ITEMS)
    if top_items < 1:
        raise ConfigError("POS_TOP_ITEMS must be at least 1")

    return Settings(
        db_path=env.get("POS_DB_PATH") or DEFAULT_DB_PATH,
        catalog_path=Path(env.get("POS_CATALOG_PATH") or DEFAULT_CATALOG_PATH),
        display_utc_offset=offset,
        top_items=top_items,
        debug=bool(env.get("DEBUG")),
    )
