"""
Analysis backend client.

Talks to the FastAPI analysis backend (local or custom URL), or serves demo
reports when the backend URL is ``"demo"``. Also reaches the external "new"
valuation API, whose responses need normalising before they fit the report
shape.
"""

import errno
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional

import httpx

from valuation_client.clients.base import BaseApiClient
from valuation_client.config import DEMO_BACKEND, Settings, describe_backend
from valuation_client.demo import generate_demo_report, iter_demo_chunks
from valuation_client.errors import (
    BackendConnectionError,
    BackendResponseError,
    BackendTimeoutError,
    ValuationClientError,
)
from valuation_client.models.report import ValuationReport
from valuation_client.streaming import STREAM_TIMEOUT_MESSAGE, ReportAssembler, iter_stream_chunks
from valuation_client.transforms import (
    WizardLike,
    api_response_to_report,
    as_wizard,
    to_backend_payload,
    to_new_api_payload,
)

logger = logging.getLogger(__name__)

CORS_HINT_MESSAGE = (
    "Cannot connect to backend server. This might be due to CORS restrictions when connecting "
    "from a cloud deployment to localhost. Try using Demo Mode instead."
)
NOT_RUNNING_MESSAGE = "Backend server is not running. Please start your FastAPI server or use Demo Mode."


def _is_connection_refused(error: httpx.HTTPError) -> bool:
    cause = error.__cause__ or error.__context__
    while cause is not None:
        if isinstance(cause, ConnectionRefusedError) or getattr(cause, "errno", None) == errno.ECONNREFUSED:
            return True
        cause = cause.__cause__ or cause.__context__
    return "connection refused" in str(error).lower()


class AnalysisClient(BaseApiClient):
    """Client for report generation, in one-shot, new-API and streaming flavours."""

    service_name = "FastAPI"

    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.settings = settings or Settings()
        super().__init__(
            base_url or self.settings.local_backend_url,
            timeout=self.settings.report_timeout,
            http_client=http_client,
        )

    @property
    def demo_mode(self) -> bool:
        return self.base_url == DEMO_BACKEND

    def set_backend_url(self, url: str) -> None:
        self.base_url = url.rstrip("/")
        logger.info(f"Backend URL changed to: {url} ({describe_backend(self.base_url, self.settings)})")

    # ------------------------------------------------------------------ #
    # One-shot report (legacy payload)
    # ------------------------------------------------------------------ #

    def generate_valuation_report(self, wizard: WizardLike) -> ValuationReport:
        if self.demo_mode:
            logger.info("Using demo mode - generating mock report")
            time.sleep(self.settings.demo_delay)
            return generate_demo_report(wizard)

        payload = to_backend_payload(wizard)
        logger.debug(f"Sending payload to FastAPI: {payload}")

        try:
            response = self._http.post(
                self._url("/valuation-report"), json=payload, timeout=self.settings.report_timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"FastAPI valuation error: {e!r}")
            raise self._translate_local_error(e) from e

        return self._parse_report(response, ValuationReport.model_validate)

    def _translate_local_error(self, error: httpx.HTTPError) -> ValuationClientError:
        if isinstance(error, httpx.TimeoutException):
            return BackendTimeoutError("Analysis is taking longer than expected. Please try again.")
        if isinstance(error, httpx.ConnectError) and _is_connection_refused(error):
            return BackendConnectionError(NOT_RUNNING_MESSAGE)
        if isinstance(error, httpx.TransportError):
            return BackendConnectionError(CORS_HINT_MESSAGE)

        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            detail = self._error_detail(error.response)
            if status == 500:
                if isinstance(detail, dict) and detail.get("error"):
                    return BackendResponseError(f"AI Analysis Error: {detail['error']}", status, detail)
                return BackendResponseError("Internal server error occurred during analysis.", status, detail)
            if status == 422:
                return BackendResponseError("Invalid data format sent to backend.", status, detail)
            message = str(detail) if detail else str(error)
            return BackendResponseError(message or "Failed to generate valuation report", status, detail)

        return ValuationClientError(str(error) or "Failed to generate valuation report")

    # ------------------------------------------------------------------ #
    # External "new" API
    # ------------------------------------------------------------------ #

    def generate_valuation_report_new(self, wizard: WizardLike) -> ValuationReport:
        wizard = as_wizard(wizard)
        payload = to_new_api_payload(wizard)
        logger.debug(f"Sending payload to new API: {payload}")

        try:
            response = self._http.post(
                self.settings.new_api_url,
                json=payload,
                headers={"ngrok-skip-browser-warning": "true"},
                timeout=self.settings.new_api_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"New API valuation error: {e!r}")
            raise self._translate_new_api_error(e) from e

        return self._parse_report(response, lambda body: api_response_to_report(body, wizard))

    def _translate_new_api_error(self, error: httpx.HTTPError) -> ValuationClientError:
        if isinstance(error, httpx.TimeoutException):
            return BackendTimeoutError("Valuation analysis is taking longer than expected. Please try again.")
        if isinstance(error, httpx.TransportError):
            return BackendConnectionError("Cannot connect to valuation API. Please check your internet connection.")

        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            detail = self._error_detail(error.response)
            if status == 500:
                return BackendResponseError("Valuation API server error. Please try again later.", status, detail)
            if status == 422:
                return BackendResponseError("Invalid data format sent to valuation API.", status, detail)
            message = str(detail) if detail else str(error)
            return BackendResponseError(
                message or "Failed to generate valuation report from new API", status, detail
            )

        return ValuationClientError(str(error) or "Failed to generate valuation report from new API")

    @staticmethod
    def _parse_report(response: httpx.Response, build: Callable[[Any], ValuationReport]) -> ValuationReport:
        try:
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError(f"expected a JSON object, got {type(body).__name__}")
            return build(body)
        except ValueError as e:
            logger.error(f"Malformed valuation report from {response.request.url}: {e}")
            raise BackendResponseError(
                "Backend returned a valuation report in an unexpected format.",
                response.status_code,
                str(e),
            ) from e

    # ------------------------------------------------------------------ #
    # Streaming
    # ------------------------------------------------------------------ #

    def iter_report_chunks(self, wizard: WizardLike) -> Iterator[Dict[str, Any]]:
        """Yield raw stage chunks from ``/valuation-report-stream``."""
        wizard = as_wizard(wizard)

        if self.demo_mode:
            logger.info("Using demo mode - streaming mock report")
            pause = self.settings.demo_delay / 6
            for chunk in iter_demo_chunks(wizard):
                if chunk.get("status") == "starting":
                    time.sleep(pause)
                yield chunk
            return

        try:
            yield from iter_stream_chunks(
                self._http,
                self._url("/valuation-report-stream"),
                wizard.to_wire(),
                self.settings.stream_timeout,
            )
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(STREAM_TIMEOUT_MESSAGE) from e
        except httpx.TransportError as e:
            logger.error(f"Streaming error: {e!r}")
            raise BackendConnectionError(CORS_HINT_MESSAGE) from e

    def stream_valuation_report(
        self,
        wizard: WizardLike,
        on_chunk: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> ValuationReport:
        """
        Stream a report, handing every chunk to ``on_chunk`` as it arrives,
        and return the assembled report once the final stage lands.
        """
        assembler = ReportAssembler()
        for chunk in self.iter_report_chunks(wizard):
            if on_chunk is not None:
                on_chunk(chunk)
            assembler.feed(chunk)
        return assembler.report()

    # ------------------------------------------------------------------ #
    # Health
    # ------------------------------------------------------------------ #

    def test_connection(self) -> bool:
        if self.demo_mode:
            return True

        try:
            response = self._http.get(self._url("/docs"), timeout=self.settings.connection_test_timeout)
            return response.is_success
        except httpx.TimeoutException:
            logger.error("FastAPI connection test timed out")
            return False
        except httpx.HTTPError as e:
            logger.error(f"FastAPI connection test failed: {e!r}")
            return False


def stream_valuation_report(
    wizard: WizardLike,
    on_chunk: Callable[[Dict[str, Any]], None],
    base_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ValuationReport:
    """One-call streaming helper for scripts that do not keep a client around."""
    with AnalysisClient(base_url=base_url, settings=settings) as client:
        return client.stream_valuation_report(wizard, on_chunk)
