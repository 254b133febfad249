from pathlib import Path

import pytest
from pydantic import ValidationError

from toolshelf.config import Settings
from toolshelf.session import build_store
from toolshelf.store import JsonFileStore, MemoryStore, RestStore


def test_defaults():
    settings = Settings.from_env({})
    assert settings.store == "file"
    assert settings.undo_seconds == 5.0
    assert settings.port == 8765


def test_reads_prefixed_environment():
    settings = Settings.from_env(
        {
            "TOOLSHELF_STORE": "rest",
            "TOOLSHELF_STORE_URL": "https://db.example",
            "TOOLSHELF_UNDO_SECONDS": "2.5",
            "TOOLSHELF_STORE_PATH": "data/tools.json",
            "UNRELATED": "x",
        }
    )
    assert settings.store == "rest"
    assert settings.undo_seconds == 2.5
    assert settings.store_path == Path("data/tools.json")


def test_rejects_bad_values():
    with pytest.raises(ValidationError):
        Settings.from_env({"TOOLSHELF_STORE": "cloud"})
    with pytest.raises(ValidationError):
        Settings.from_env({"TOOLSHELF_UNDO_SECONDS": "0"})


def test_build_store_picks_backend(tmp_path):
    assert isinstance(build_store(Settings(store="memory")), MemoryStore)
    assert isinstance(build_store(Settings(store_path=tmp_path / "s.json")), JsonFileStore)
    assert isinstance(
        build_store(Settings(store="rest", store_url="https://db.example")), RestStore
    )
    with pytest.raises(ValueError):
        build_store(Settings(store="rest"))
