"""Shared fixtures for the mood core tests."""
import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

# Make mood_engine / mood_api and the tools importable without an install
base = os.path.dirname(os.path.dirname(__file__))  # ai/
for sub in ("services", "tools"):
    path = os.path.join(base, sub)
    if path not in sys.path:
        sys.path.insert(0, path)

BERLIN = ZoneInfo("Europe/Berlin")


@pytest.fixture
def tz():
    return BERLIN


@pytest.fixture
def now():
    # Tuesday evening, local time (CET, UTC+1)
    return datetime(2026, 3, 10, 18, 0, tzinfo=BERLIN)
