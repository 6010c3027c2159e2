from __future__ import annotations

import os

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove IMAGESEL_* variables so settings start from their defaults."""

    for name in list(os.environ):
        if name.startswith("IMAGESEL_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch
