"""Configuration settings for the diary asset server."""

import os
from dataclasses import dataclass, field
from typing import Dict

from common.constants import (
    DEFAULT_COOKIE_NAME,
    DEFAULT_MAX_BATCH_FILES,
    DEFAULT_MAX_BATCH_TOTAL_BYTES,
    DEFAULT_MAX_PER_FILE_BYTES,
)


DIARY_HOST = os.environ.get("DIARY_HOST", "0.0.0.0")

DIARY_PORT = int(os.environ.get("DIARY_PORT", "8080"))

ASSET_PATH = os.environ.get("DIARY_ASSET_PATH", "/app/data/assets")

MAX_BATCH_FILES = int(os.environ.get("DIARY_MAX_BATCH_FILES", str(DEFAULT_MAX_BATCH_FILES)))

MAX_PER_FILE_BYTES = int(os.environ.get("DIARY_MAX_PER_FILE_BYTES", str(DEFAULT_MAX_PER_FILE_BYTES)))

MAX_BATCH_TOTAL_BYTES = int(os.environ.get("DIARY_MAX_BATCH_TOTAL_BYTES", str(DEFAULT_MAX_BATCH_TOTAL_BYTES)))

API_KEYS = os.environ.get("DIARY_API_KEYS", "")

COOKIE_NAME = os.environ.get("DIARY_COOKIE_NAME", DEFAULT_COOKIE_NAME)


def parse_api_keys(raw: str) -> Dict[str, str]:
    """
    Parse the API key table.

    Args:
        raw: Comma-separated "key:user_id" pairs (e.g., "diary_abc:alice,diary_def:bob")

    Returns:
        Mapping of API key to user_id. Malformed entries are skipped.
    """
    table = {}
    for entry in raw.split(','):
        key, sep, user_id = entry.strip().partition(':')
        if sep and key.strip() and user_id.strip():
            table[key.strip()] = user_id.strip()
    return table


@dataclass(frozen=True)
class Settings:
    """
    Request-scoped view of the server configuration.
    """
    asset_path: str
    max_batch_files: int = DEFAULT_MAX_BATCH_FILES
    max_per_file_bytes: int = DEFAULT_MAX_PER_FILE_BYTES
    max_batch_total_bytes: int = DEFAULT_MAX_BATCH_TOTAL_BYTES
    api_keys: Dict[str, str] = field(default_factory=dict)
    cookie_name: str = DEFAULT_COOKIE_NAME


def load_settings() -> Settings:
    """
    Build Settings from the module-level configuration values.
    """
    return Settings(
        asset_path=ASSET_PATH,
        max_batch_files=MAX_BATCH_FILES,
        max_per_file_bytes=MAX_PER_FILE_BYTES,
        max_batch_total_bytes=MAX_BATCH_TOTAL_BYTES,
        api_keys=parse_api_keys(API_KEYS),
        cookie_name=COOKIE_NAME,
    )


def get_settings() -> Settings:
    """
    FastAPI dependency returning the active settings.
    """
    return load_settings()
