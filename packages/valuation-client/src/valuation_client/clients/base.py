import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class BaseApiClient(ABC):
    """
    Shared plumbing for the HTTP client facades.

    Owns (or borrows) an ``httpx.Client`` whose event hooks log every request
    and response. Pass ``http_client`` to route calls through a custom client,
    e.g. a FastAPI ``TestClient`` or one built on ``httpx.MockTransport``.
    """

    service_name = "API"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else self._build_http_client(timeout, headers)

    def _build_http_client(self, timeout: Optional[float], headers: Optional[Dict[str, str]]) -> httpx.Client:
        return httpx.Client(
            timeout=timeout,
            headers=headers or {},
            event_hooks={"request": [self._log_request], "response": [self._log_response]},
        )

    def _log_request(self, request: httpx.Request) -> None:
        logger.info(f"{self.service_name} Request: {request.method} {request.url}")

    def _log_response(self, response: httpx.Response) -> None:
        logger.info(
            f"{self.service_name} Response: {response.status_code} "
            f"{response.request.method} {response.request.url}"
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _error_detail(response: Optional[httpx.Response]) -> Any:
        """The ``detail`` field of a FastAPI-style error body, if there is one."""
        if response is None:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("detail") if isinstance(body, dict) else None

    @abstractmethod
    def test_connection(self) -> bool:
        """Return True when the service answers; never raises."""
        pass

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
