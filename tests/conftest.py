"""Test setup for soar."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soar.html_utils import new_document  # noqa: E402


@pytest.fixture
def document():
    """Fresh document built from the default skeleton."""
    return new_document()
