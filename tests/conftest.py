"""Pytest bootstrap for local source imports and per-test isolation.

The ``pytest`` console script can run with a sys.path that excludes the
repository root, so the root is prepended to make ``import lazyput`` resolve
to the local package. Every test also gets a throwaway config location and a
clean key-input buffer.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


@pytest.fixture(autouse=True)
def _isolated_user_state(tmp_path, monkeypatch):
    import lazyput.input as input_mod
    from lazyput.runtime import config

    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "lazyput-config" / config.CONFIG_FILENAME)
    monkeypatch.delenv(config.TOKEN_ENV_VAR, raising=False)
    input_mod._PENDING_BYTES.clear()
    yield
    input_mod._PENDING_BYTES.clear()
