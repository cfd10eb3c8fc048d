"""
Client configuration and backend selection.

``Settings`` carries the endpoints and timeouts the clients use. Defaults are
kept as module constants so they are defined in exactly one place, and every
field can be overridden from the environment via ``Settings.from_env()``.

``BackendPreferences`` is the persisted choice between the local backend, a
custom backend URL and demo mode; ``resolve_backend`` turns it into the URL
handed to ``AnalysisClient.set_backend_url``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEMO_BACKEND = "demo"

# Canonical defaults
DEFAULT_LOCAL_BACKEND_URL = "http://127.0.0.1:8000"
DEFAULT_NEW_API_URL = "https://e3c8babef5b7.ngrok-free.app/valuation-report"
DEFAULT_CLOUD_API_URL = "https://p481izod3m.execute-api.us-west-1.amazonaws.com/dev"
DEFAULT_CLOUD_TIMEOUT = 30.0
DEFAULT_NEW_API_TIMEOUT = 60.0
DEFAULT_CONNECTION_TEST_TIMEOUT = 3.0
DEFAULT_STREAM_TIMEOUT = 120.0
DEFAULT_DEMO_DELAY = 2.0
DEFAULT_ORIGIN = "http://localhost"
DEFAULT_PREFERENCES_PATH = Path.home() / ".valuation_client" / "preferences.json"

BACKEND_LABELS = {
    "demo": "Demo Mode",
    "local": "Local Backend",
    "custom": "Custom Backend",
}


class Settings(BaseModel):
    """Endpoints and timeouts (seconds). ``None`` timeouts wait forever."""

    local_backend_url: str = Field(DEFAULT_LOCAL_BACKEND_URL, description="Local analysis backend")
    new_api_url: str = Field(DEFAULT_NEW_API_URL, description="Full URL of the external report endpoint")
    cloud_api_url: str = Field(DEFAULT_CLOUD_API_URL, description="Base URL of the cloud API")
    cloud_timeout: Optional[float] = DEFAULT_CLOUD_TIMEOUT
    new_api_timeout: Optional[float] = DEFAULT_NEW_API_TIMEOUT
    report_timeout: Optional[float] = Field(None, description="Local report generation never times out")
    connection_test_timeout: float = DEFAULT_CONNECTION_TEST_TIMEOUT
    stream_timeout: float = DEFAULT_STREAM_TIMEOUT
    demo_delay: float = Field(DEFAULT_DEMO_DELAY, description="Simulated processing time in demo mode")
    origin: str = Field(DEFAULT_ORIGIN, description="Origin header sent with the CORS preflight probe")
    preferences_path: Path = DEFAULT_PREFERENCES_PATH
    development: bool = Field(True, description="Auto-select the local backend when no preference is saved")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        overrides = {}

        mapping = {
            "VALUATION_BACKEND_URL": "local_backend_url",
            "VALUATION_NEW_API_URL": "new_api_url",
            "VALUATION_CLOUD_API_URL": "cloud_api_url",
            "VALUATION_DEMO_DELAY": "demo_delay",
            "VALUATION_STREAM_TIMEOUT": "stream_timeout",
            "VALUATION_PREFERENCES_PATH": "preferences_path",
        }
        for env_key, field in mapping.items():
            if env.get(env_key):
                overrides[field] = env[env_key]

        if env.get("VALUATION_ENV"):
            overrides["development"] = env["VALUATION_ENV"].lower() in ("dev", "development", "local")

        try:
            return cls(**overrides)
        except ValidationError as e:
            raise ValueError(f"Invalid VALUATION_* environment configuration: {e}") from e


class BackendPreferences(BaseModel):
    """Saved backend choice: ``local``, ``demo`` or ``custom`` (+ URL)."""

    backendMode: Optional[str] = None
    customBackendUrl: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "BackendPreferences":
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            return cls.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable backend preferences at {path}: {e}")
            return cls()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(exclude_none=True), encoding="utf-8")


def resolve_backend(
    preferences: BackendPreferences,
    settings: Optional[Settings] = None,
    preferences_path: Optional[Path] = None,
) -> Tuple[str, str]:
    """
    Pick the backend URL and its display label from saved preferences.

    With no usable saved mode the choice is auto-detected from
    ``settings.development`` (local backend for development, demo otherwise)
    and written back, so the next run starts from the same choice.
    """
    settings = settings or Settings()
    mode = preferences.backendMode

    if mode == "custom" and preferences.customBackendUrl:
        return preferences.customBackendUrl, BACKEND_LABELS["custom"]
    if mode == "demo":
        return DEMO_BACKEND, BACKEND_LABELS["demo"]
    if mode == "local":
        return settings.local_backend_url, BACKEND_LABELS["local"]

    mode = "local" if settings.development else "demo"
    logger.info(f"No saved backend preference; defaulting to {BACKEND_LABELS[mode]}")
    preferences.backendMode = mode
    preferences.save(preferences_path or settings.preferences_path)

    url = settings.local_backend_url if mode == "local" else DEMO_BACKEND
    return url, BACKEND_LABELS[mode]


def describe_backend(url: str, settings: Optional[Settings] = None) -> str:
    settings = settings or Settings()
    if url == DEMO_BACKEND:
        return BACKEND_LABELS["demo"]
    if url == settings.local_backend_url:
        return BACKEND_LABELS["local"]
    return BACKEND_LABELS["custom"]
