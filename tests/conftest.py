"""
Pytest configuration helpers.

Adds ``src`` to sys.path so that ``curalink`` imports without an editable
install, and removes artificial search latency for every test.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC = PROJECT_ROOT / "src"

if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from curalink import config  # noqa: E402
from curalink.storage import InMemoryStore  # noqa: E402


@pytest.fixture(autouse=True)
def no_search_delay(monkeypatch):
    monkeypatch.setattr(config, "SEARCH_DELAY", 0.0)


@pytest.fixture()
def preferences():
    return InMemoryStore()


@pytest.fixture()
def session():
    return InMemoryStore()
