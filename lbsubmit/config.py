"""
Protocol limits and host settings.

- Limits default to the values documented for the ListenBrainz API.
- Settings are read once from environment variables (see from_env()).
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field

# source: https://listenbrainz.readthedocs.io/en/latest/dev/api.html#constants
MAX_LISTEN_SIZE = 10240        # bytes, whole serialized submission
MAX_ITEMS_PER_GET = 100        # read path, reserved
DEFAULT_ITEMS_PER_GET = 25     # read path, reserved
MAX_TAGS_PER_LISTEN = 50
MAX_TAG_SIZE = 64              # characters

API_ROOT_URL = "https://api.listenbrainz.org"


@dataclass(frozen=True)
class Limits:
    max_listen_size: int = MAX_LISTEN_SIZE
    max_items_per_get: int = MAX_ITEMS_PER_GET
    default_items_per_get: int = DEFAULT_ITEMS_PER_GET
    max_tags_per_listen: int = MAX_TAGS_PER_LISTEN
    max_tag_size: int = MAX_TAG_SIZE


DEFAULT_LIMITS = Limits()


@dataclass(frozen=True)
class Settings:
    api_root: str = API_ROOT_URL
    timeout: int = 10
    log_level: str = "INFO"
    dry_run: bool = True
    limits: Limits = field(default_factory=Limits)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"{name} must be an integer, got {raw!r}")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def from_env() -> Settings:
    limits = Limits(
        max_listen_size=_int_env("MAX_LISTEN_SIZE", MAX_LISTEN_SIZE),
        max_tags_per_listen=_int_env("MAX_TAGS_PER_LISTEN", MAX_TAGS_PER_LISTEN),
        max_tag_size=_int_env("MAX_TAG_SIZE", MAX_TAG_SIZE),
    )
    return Settings(
        api_root=os.getenv("LISTENBRAINZ_API_ROOT", API_ROOT_URL).rstrip("/"),
        timeout=max(1, _int_env("LISTENBRAINZ_TIMEOUT", 10)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        dry_run=_bool_env("DRY_RUN", True),
        limits=limits,
    )
