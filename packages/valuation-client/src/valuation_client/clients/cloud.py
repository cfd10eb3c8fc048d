"""
Cloud API client.

Facade for the hosted valuation API: save the startup input, upload a
supporting document, ask for method recommendations and run a calculation.

Every call that hits a network-level failure is retried once over a fresh,
one-shot connection before giving up; HTTP error statuses are not retried.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional, Tuple, Type, TypeVar, Union

import httpx
from pydantic import BaseModel

from valuation_client.clients.base import BaseApiClient
from valuation_client.config import Settings
from valuation_client.errors import BackendConnectionError, BackendResponseError, BackendTimeoutError
from valuation_client.models.cloud import (
    CalculateRequest,
    CalculateResponse,
    RecommendRequest,
    RecommendResponse,
    SaveInputRequest,
    UploadResponse,
)
from valuation_client.utils.json import sanitize_for_json

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
FileLike = Union[str, Path, Tuple[str, bytes]]


def _read_file(file: FileLike) -> Tuple[str, bytes, str]:
    if isinstance(file, tuple):
        filename, content = file
    else:
        path = Path(file)
        filename, content = path.name, path.read_bytes()
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return filename, content, content_type


def _unwrap(body: Any) -> Any:
    """Some endpoints wrap their result as ``{"data": {...}}``."""
    if isinstance(body, dict) and body.get("data"):
        return body["data"]
    return body


class CloudClient(BaseApiClient):
    service_name = "API"

    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
        fallback_transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self._fallback_transport = fallback_transport
        super().__init__(
            base_url or self.settings.cloud_api_url,
            timeout=self.settings.cloud_timeout,
            http_client=http_client,
        )

    def test_connection(self) -> bool:
        """Send a CORS preflight to ``/save-input``; any answer at all counts."""
        try:
            response = self._http.request(
                "OPTIONS", self._url("/save-input"), headers={"Origin": self.settings.origin}
            )
        except httpx.HTTPError as e:
            logger.error(f"Connection test failed: {e!r}")
            return False
        logger.info(f"CORS preflight test: {response.status_code}")
        return True

    def save_input(self, request: SaveInputRequest) -> None:
        self._post("/save-input", json=sanitize_for_json(request.model_dump(exclude_none=True)))

    def upload_document(self, user_id: str, file: FileLike) -> UploadResponse:
        filename, content, content_type = _read_file(file)
        response = self._post(
            "/upload-document",
            data={"userID": user_id},
            files={"file": (filename, content, content_type)},
        )
        return self._parse(response, UploadResponse)

    def get_recommendations(self, request: RecommendRequest) -> RecommendResponse:
        response = self._post("/recommend", json=request.model_dump())
        return self._parse(response, RecommendResponse)

    def calculate_valuation(self, request: CalculateRequest) -> CalculateResponse:
        response = self._post("/calculate", json=request.model_dump())
        return self._parse(response, CalculateResponse)

    # --- Helpers ---

    def _post(self, path: str, **kwargs) -> httpx.Response:
        url = self._url(path)
        try:
            response = self._http.post(url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            logger.error(f"Request to {path} timed out: {e!r}")
            raise BackendTimeoutError(f"Request to {path} timed out. Please try again.") from e
        except httpx.NetworkError as e:
            logger.info(f"Request to {path} failed ({e!r}), retrying over a fresh connection...")
            return self._post_fresh(url, **kwargs)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"API Error: {status} {url}")
            raise BackendResponseError(
                f"HTTP {status}: {e.response.text}", status, self._error_detail(e.response)
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e!r}")
            raise BackendConnectionError(f"Cannot talk to the valuation API: {e}") from e

    def _post_fresh(self, url: str, **kwargs) -> httpx.Response:
        try:
            with httpx.Client(timeout=self.settings.cloud_timeout, transport=self._fallback_transport) as client:
                response = client.post(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Retry of {url} failed: {e!r}")
            raise BackendConnectionError(f"Cannot connect to the valuation API: {e}") from e

        if not response.is_success:
            raise BackendResponseError(
                f"HTTP {response.status_code}: {response.text}",
                response.status_code,
                self._error_detail(response),
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(_unwrap(response.json()))
        except ValueError as e:
            raise BackendResponseError(
                f"Unexpected response from {response.request.url.path}: {e}",
                response.status_code,
                str(e),
            ) from e
