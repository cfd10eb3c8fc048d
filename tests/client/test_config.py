"""
Tests for settings, persisted backend preferences and backend resolution.
"""

from pathlib import Path

import pytest

from valuation_client.config import (
    DEFAULT_LOCAL_BACKEND_URL,
    BackendPreferences,
    Settings,
    describe_backend,
    resolve_backend,
)


def test_settings_defaults():
    settings = Settings()
    assert settings.local_backend_url == "http://127.0.0.1:8000"
    assert settings.cloud_timeout == 30.0
    assert settings.new_api_timeout == 60.0
    assert settings.report_timeout is None
    assert settings.stream_timeout == 120.0


def test_settings_from_env():
    settings = Settings.from_env({
        "VALUATION_BACKEND_URL": "http://analysis.internal:9000",
        "VALUATION_DEMO_DELAY": "0",
        "VALUATION_PREFERENCES_PATH": "/tmp/prefs.json",
        "VALUATION_ENV": "production",
    })
    assert settings.local_backend_url == "http://analysis.internal:9000"
    assert settings.demo_delay == 0.0
    assert settings.preferences_path == Path("/tmp/prefs.json")
    assert settings.development is False


def test_settings_from_env_rejects_garbage():
    with pytest.raises(ValueError):
        Settings.from_env({"VALUATION_DEMO_DELAY": "soon"})


# ---------------------------------------------------------------------------
# Preferences persistence
# ---------------------------------------------------------------------------


def test_preferences_round_trip(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    BackendPreferences(backendMode="custom", customBackendUrl="http://10.0.0.5:8000").save(path)

    loaded = BackendPreferences.load(path)
    assert loaded.backendMode == "custom"
    assert loaded.customBackendUrl == "http://10.0.0.5:8000"


def test_missing_or_corrupt_preferences_load_empty(tmp_path):
    assert BackendPreferences.load(tmp_path / "absent.json").backendMode is None

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert BackendPreferences.load(corrupt).backendMode is None


# ---------------------------------------------------------------------------
# Backend resolution
# ---------------------------------------------------------------------------


def test_resolve_saved_modes(tmp_path):
    settings = Settings(preferences_path=tmp_path / "prefs.json")

    custom = BackendPreferences(backendMode="custom", customBackendUrl="http://gpu-box:8000")
    assert resolve_backend(custom, settings) == ("http://gpu-box:8000", "Custom Backend")

    assert resolve_backend(BackendPreferences(backendMode="demo"), settings) == ("demo", "Demo Mode")
    assert resolve_backend(BackendPreferences(backendMode="local"), settings) == (
        DEFAULT_LOCAL_BACKEND_URL,
        "Local Backend",
    )
    assert not (tmp_path / "prefs.json").exists()


def test_resolve_auto_detects_and_saves(tmp_path):
    path = tmp_path / "prefs.json"

    dev = Settings(preferences_path=path, development=True)
    assert resolve_backend(BackendPreferences(), dev) == (DEFAULT_LOCAL_BACKEND_URL, "Local Backend")
    assert BackendPreferences.load(path).backendMode == "local"

    path.unlink()
    prod = Settings(preferences_path=path, development=False)
    assert resolve_backend(BackendPreferences(), prod) == ("demo", "Demo Mode")
    assert BackendPreferences.load(path).backendMode == "demo"


def test_custom_mode_without_url_auto_detects(tmp_path):
    settings = Settings(preferences_path=tmp_path / "prefs.json", development=False)
    assert resolve_backend(BackendPreferences(backendMode="custom"), settings)[1] == "Demo Mode"


def test_describe_backend():
    assert describe_backend("demo") == "Demo Mode"
    assert describe_backend(DEFAULT_LOCAL_BACKEND_URL) == "Local Backend"
    assert describe_backend("https://valuation.example.com") == "Custom Backend"
