"""Persistent JSON config helpers.

Stores the OAuth token obtained from the out-of-band flow. Reads never
raise: malformed or missing config falls back to an empty object. Writes
raise so the caller can decide how loudly to complain.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lazyput"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
TOKEN_KEY = "oauth_token"
TOKEN_ENV_VAR = "PUTIO_TOKEN"

SOURCE_FLAG = "flag"
SOURCE_ENV = "env"
SOURCE_CONFIG = "config"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON readable only by the owner."""
    CONFIG_PATH.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    payload = json.dumps(data, indent=2) + "\n"
    fd = os.open(CONFIG_PATH, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(payload)
    # O_CREAT only applies the mode to new files.
    os.chmod(CONFIG_PATH, 0o600)


def load_token() -> str | None:
    value = load_config().get(TOKEN_KEY)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def save_token(token: str) -> None:
    """Store ``token`` alongside any other config keys."""
    config = load_config()
    config[TOKEN_KEY] = token
    save_config(config)
    logger.info("Saved token to %s", CONFIG_PATH)


def resolve_token(override: str | None, environ: Mapping[str, str] | None = None) -> tuple[str | None, str | None]:
    """Return ``(token, source)`` from flag, environment, then config file.

    ``(None, None)`` means the interactive flow is needed.
    """
    if override and override.strip():
        return override.strip(), SOURCE_FLAG
    env = os.environ if environ is None else environ
    from_env = env.get(TOKEN_ENV_VAR, "").strip()
    if from_env:
        return from_env, SOURCE_ENV
    stored = load_token()
    if stored:
        return stored, SOURCE_CONFIG
    return None, None
