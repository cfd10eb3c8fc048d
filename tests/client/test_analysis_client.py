"""
Tests for AnalysisClient: demo mode, legacy report endpoint, new API, error mapping.
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from valuation_client.clients import AnalysisClient
from valuation_client.config import Settings
from valuation_client.demo import generate_demo_report
from valuation_client.errors import (
    BackendConnectionError,
    BackendResponseError,
    BackendTimeoutError,
)
from valuation_client.models import ValuationReport

BACKEND = "http://backend.test"
NEW_API = "https://new-api.test/valuation-report"

WIZARD = {
    "step1": {"businessName": "Acme", "industry": "saas", "stage": "growth"},
    "step2": {"revenue": 2_000_000},
}


@pytest.fixture
def settings():
    return Settings(demo_delay=0, new_api_url=NEW_API)


def make_client(handler, settings, base_url=BACKEND):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return AnalysisClient(base_url=base_url, settings=settings, http_client=http)


def report_json():
    return generate_demo_report(WIZARD).to_wire()


# ---------------------------------------------------------------------------
# Demo mode
# ---------------------------------------------------------------------------


def test_demo_mode_never_touches_the_network(settings):
    def handler(request):
        raise AssertionError(f"unexpected request to {request.url}")

    client = make_client(handler, settings)
    client.set_backend_url("demo")

    assert client.demo_mode
    assert client.test_connection() is True

    report = client.generate_valuation_report(WIZARD)
    assert isinstance(report, ValuationReport)
    assert report.final_valuation.final_range.lower == 9
    assert report.business_summary.summary.startswith("Acme is a saas startup")


def test_demo_mode_simulates_processing_time():
    client = AnalysisClient(base_url="demo", settings=Settings(demo_delay=2))

    with patch("valuation_client.clients.analysis.time.sleep") as mock_sleep:
        client.generate_valuation_report(WIZARD)
    mock_sleep.assert_called_once_with(2)

    on_chunk = MagicMock()
    with patch("valuation_client.clients.analysis.time.sleep") as mock_sleep:
        client.stream_valuation_report(WIZARD, on_chunk)

    assert mock_sleep.call_count == 6
    assert on_chunk.call_count == 13
    assert on_chunk.call_args_list[0].args[0]["status"] == "starting"
    client.close()


def test_set_backend_url_strips_trailing_slash(settings):
    client = make_client(lambda r: httpx.Response(200), settings)
    client.set_backend_url("http://10.0.0.7:8000/")
    assert client.base_url == "http://10.0.0.7:8000"
    assert not client.demo_mode


# ---------------------------------------------------------------------------
# Legacy /valuation-report
# ---------------------------------------------------------------------------


def test_generate_report_posts_legacy_payload(settings):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=report_json())

    report = make_client(handler, settings).generate_valuation_report(WIZARD)

    assert seen["url"] == f"{BACKEND}/valuation-report"
    assert seen["body"]["companyName"] == "Acme"
    assert seen["body"]["revenue"] == 2_000_000
    assert len(report.calculations) == 2


@pytest.mark.parametrize(
    "status, body, message",
    [
        (500, {"detail": {"error": "model overloaded"}}, "AI Analysis Error: model overloaded"),
        (500, {"detail": "boom"}, "Internal server error occurred during analysis."),
        (422, {"detail": []}, "Invalid data format sent to backend."),
        (404, {"detail": "No such route"}, "No such route"),
    ],
)
def test_generate_report_http_errors(settings, status, body, message):
    client = make_client(lambda r: httpx.Response(status, json=body), settings)

    with pytest.raises(BackendResponseError) as exc_info:
        client.generate_valuation_report(WIZARD)

    assert str(exc_info.value) == message
    assert exc_info.value.status_code == status


def test_generate_report_connection_refused(settings):
    def handler(request):
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    with pytest.raises(BackendConnectionError, match="Backend server is not running"):
        make_client(handler, settings).generate_valuation_report(WIZARD)


def test_generate_report_network_error(settings):
    def handler(request):
        raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

    with pytest.raises(BackendConnectionError, match="Try using Demo Mode instead"):
        make_client(handler, settings).generate_valuation_report(WIZARD)


def test_generate_report_timeout(settings):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(BackendTimeoutError, match="taking longer than expected"):
        make_client(handler, settings).generate_valuation_report(WIZARD)


def test_generate_report_malformed_body(settings):
    client = make_client(lambda r: httpx.Response(200, content=b"<html>proxy error</html>"), settings)

    with pytest.raises(BackendResponseError, match="unexpected format"):
        client.generate_valuation_report(WIZARD)


# ---------------------------------------------------------------------------
# New API
# ---------------------------------------------------------------------------


def test_new_api_sends_thousands_and_normalises_response(settings):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        body = report_json()
        body["finalValuation"]["finalRange"] = "$12M–$18M"
        return httpx.Response(200, json=body)

    report = make_client(handler, settings).generate_valuation_report_new(WIZARD)

    assert seen["url"] == NEW_API
    assert seen["headers"]["ngrok-skip-browser-warning"] == "true"
    assert seen["body"]["revenue12m"] == 2000
    assert seen["body"]["industry"] == "SaaS"
    assert report.final_valuation.final_range.lower == pytest.approx(12.0)
    assert report.final_valuation.final_range.upper == pytest.approx(18.0)


@pytest.mark.parametrize(
    "status, message",
    [
        (500, "Valuation API server error. Please try again later."),
        (422, "Invalid data format sent to valuation API."),
    ],
)
def test_new_api_http_errors(settings, status, message):
    client = make_client(lambda r: httpx.Response(status, json={"detail": "x"}), settings)
    with pytest.raises(BackendResponseError, match=message):
        client.generate_valuation_report_new(WIZARD)


def test_new_api_network_error(settings):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(BackendConnectionError, match="check your internet connection"):
        make_client(handler, settings).generate_valuation_report_new(WIZARD)


# ---------------------------------------------------------------------------
# Connection test
# ---------------------------------------------------------------------------


def test_connection_checks_docs(settings):
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, text="<html>docs</html>")

    assert make_client(handler, settings).test_connection() is True
    assert seen == ["/docs"]


def test_connection_false_on_error_status(settings):
    assert make_client(lambda r: httpx.Response(503), settings).test_connection() is False


def test_connection_false_on_network_failure(settings):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    assert make_client(handler, settings).test_connection() is False
