"""
Unit tests for configuration helpers and token storage.
"""

import pytest

from oralvis.config import MAX_UPLOAD_BYTES, get_env
from oralvis.storage import FileTokenStore, MemoryTokenStore


def test_get_env_ok(monkeypatch):
    monkeypatch.setenv("X", "123")
    assert get_env("X") == "123"


def test_get_env_missing_exits(monkeypatch, capsys):
    monkeypatch.delenv("MISSING_ENV", raising=False)
    with pytest.raises(SystemExit) as e:
        get_env("MISSING_ENV")
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR: env var MISSING_ENV is not set" in err


def test_upload_limit_is_ten_mib():
    assert MAX_UPLOAD_BYTES == 10 * 1024 * 1024


def test_file_token_store_round_trip(tmp_path):
    store = FileTokenStore(tmp_path / "nested" / "session.json")
    assert store.load() is None
    store.save("abc")
    assert FileTokenStore(tmp_path / "nested" / "session.json").load() == "abc"
    store.clear()
    store.clear()
    assert store.load() is None


@pytest.mark.parametrize("content", ['["token"]', '{"token": 42}', '{"token": ""}', "\x00\x01"])
def test_file_token_store_tolerates_bad_content(tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content, encoding="utf-8")
    assert FileTokenStore(path).load() is None


def test_memory_token_store():
    store = MemoryTokenStore("t")
    assert store.load() == "t"
    store.clear()
    assert store.load() is None
