"""Tests for token_store.py — per-environment refresh token files."""
from ebay_listings.config import Environment
from ebay_listings.token_store import RefreshTokenStore


def test_path_uses_environment_name(tmp_path):
    store = RefreshTokenStore(Environment.SANDBOX, tmp_path)
    assert store.path == tmp_path / "sandbox_refresh_token.txt"


def test_load_missing_returns_none(tmp_path):
    assert RefreshTokenStore(Environment.SANDBOX, tmp_path).load() is None


def test_save_then_load(tmp_path):
    store = RefreshTokenStore(Environment.PRODUCTION, tmp_path)
    store.save("v^1.1#refresh")
    assert store.load() == "v^1.1#refresh"


def test_load_strips_whitespace(tmp_path):
    store = RefreshTokenStore(Environment.SANDBOX, tmp_path)
    store.path.write_text("  token\n")
    assert store.load() == "token"


def test_load_empty_file_returns_none(tmp_path):
    store = RefreshTokenStore(Environment.SANDBOX, tmp_path)
    store.path.write_text("   \n")
    assert store.load() is None


def test_environments_do_not_share_files(tmp_path):
    RefreshTokenStore(Environment.PRODUCTION, tmp_path).save("prod")
    assert RefreshTokenStore(Environment.SANDBOX, tmp_path).load() is None


def test_save_creates_directory(tmp_path):
    store = RefreshTokenStore(Environment.SANDBOX, tmp_path / "nested" / "dir")
    store.save("tok")
    assert store.path.read_text() == "tok"


def test_save_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = RefreshTokenStore(Environment.SANDBOX, blocker)

    store.save("tok")
    assert "Failed to save refresh token" in caplog.text


def test_delete(tmp_path):
    store = RefreshTokenStore(Environment.SANDBOX, tmp_path)
    store.save("tok")
    assert store.delete() is True
    assert store.load() is None
    assert store.delete() is False
