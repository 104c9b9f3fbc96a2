from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Developer overrides for the FORKCHAT_* settings live in a local .env.
load_dotenv(dotenv_path=ROOT / ".env", override=False)

FORKCHAT_ENV_PREFIX = "FORKCHAT_"


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path) -> Path:
    """Run from an empty temp directory with no FORKCHAT_* settings in the environment."""
    for name in list(os.environ):
        if name.startswith(FORKCHAT_ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
