"""
Tests for the demo analysis backend, and the analysis client driven against it in-process.
"""

import json
import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from valuation_client.clients import AnalysisClient
from valuation_client.config import Settings
from valuation_client.errors import BackendResponseError
from valuation_client.server.app import app, create_app

client = TestClient(app)

WIZARD = {
    "step1": {"businessName": "Orbit Labs", "industry": "ai", "stage": "mvp", "isLaunched": False},
    "step3": {"customerCount": 12, "growthRate": 30},
}


# ---------------------------------------------------------------------------
# Root & basic endpoints
# ---------------------------------------------------------------------------


def test_read_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Startup Valuation Demo API is running"}


def test_docs():
    assert client.get("/docs").status_code == 200


def test_404():
    response = client.get("/non-existent")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


def test_logging_middleware(caplog):
    with caplog.at_level(logging.INFO):
        response = client.get("/")

    assert "x-process-time" in response.headers
    assert any("GET / -> 200 in" in record.message for record in caplog.records)


def test_stream_requests_are_logged_as_opened(caplog):
    with caplog.at_level(logging.INFO):
        client.post("/valuation-report-stream", json=WIZARD)

    assert any("Stream opened: POST /valuation-report-stream" in record.message for record in caplog.records)


def test_cors_preflight_from_client_origin():
    response = client.options(
        "/valuation-report",
        headers={"Origin": "http://localhost", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost"


def test_unhandled_error_uses_analysis_error_shape(caplog):
    test_app = create_app()

    @test_app.get("/explode")
    def explode():
        raise RuntimeError("model offline")

    with caplog.at_level(logging.ERROR):
        response = TestClient(test_app).get("/explode")

    assert response.status_code == 500
    assert response.json() == {"detail": {"error": "model offline"}}
    assert any("Demo analysis failed: GET /explode" in record.message for record in caplog.records)


# ---------------------------------------------------------------------------
# Report endpoints
# ---------------------------------------------------------------------------


def test_valuation_report_uses_company_name():
    response = client.post("/valuation-report", json={"companyName": "Orbit Labs", "industry": "ai"})
    assert response.status_code == 200

    body = response.json()
    assert body["businessSummary"]["summary"].startswith("Orbit Labs is a ai startup")
    assert body["finalValuation"]["finalRange"] == {"lower": 9.0, "upper": 14.0}


def test_valuation_report_422():
    assert client.post("/valuation-report", json=["not", "an", "object"]).status_code == 422
    assert client.post("/valuation-report", json={"companyName": 42}).status_code == 422


def test_stream_endpoint_emits_ndjson():
    response = client.post("/valuation-report-stream", json=WIZARD)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")

    chunks = [json.loads(line) for line in response.text.splitlines() if line]
    assert chunks[0] == {"status": "starting", "stage": 1, "message": "Analyzing business summary..."}
    assert chunks[-1]["stage"] == 6
    assert "finalValuation" in chunks[-1]


# ---------------------------------------------------------------------------
# Client <-> server, in process
# ---------------------------------------------------------------------------


@pytest.fixture
def analysis_client():
    http = TestClient(create_app())
    return AnalysisClient(base_url="http://testserver", settings=Settings(demo_delay=0), http_client=http)


def test_client_against_server_one_shot(analysis_client):
    assert analysis_client.test_connection() is True

    report = analysis_client.generate_valuation_report(WIZARD)
    assert report.business_summary.summary.startswith("Orbit Labs")
    assert len(report.calculations) == 2


def test_client_against_server_streaming(analysis_client):
    stages = []
    report = analysis_client.stream_valuation_report(
        WIZARD, lambda chunk: stages.append(chunk["stage"]) if "status" in chunk else None
    )

    assert stages == [1, 2, 3, 4, 5, 6]
    assert report.strategic_context.startswith("This valuation reflects")
    assert report.final_valuation.final_range.lower == 9


def test_client_reports_server_analysis_error(analysis_client):
    with patch("valuation_client.server.router.generate_demo_report", side_effect=RuntimeError("model offline")):
        with pytest.raises(BackendResponseError, match="AI Analysis Error: model offline") as exc_info:
            analysis_client.generate_valuation_report(WIZARD)

    assert exc_info.value.status_code == 500
