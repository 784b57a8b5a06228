from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def clean_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove the environment variables that change how the client is
    wired, so unit tests never pick up the developer credentials."""
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    for name in list(os.environ):
        if name.upper().startswith("LANGWIRE_"):
            monkeypatch.delenv(name)
