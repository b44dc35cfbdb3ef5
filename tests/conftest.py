"""Shared fixtures: isolate every test from the caller's environment."""

import os
from pathlib import Path

import pytest

from sqldoccheck.config import Settings
from sqldoccheck.log import set_level


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("SQLDOCCHECK_"):
            monkeypatch.delenv(key)
    # no stray .env file is picked up
    monkeypatch.chdir(tmp_path)
    yield
    set_level("WARNING")


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def write_md(tmp_path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write
