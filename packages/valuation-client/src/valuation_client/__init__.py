"""
Valuation Client
================

Client-side layer for the startup valuation services.

Public API:
- ``AnalysisClient`` / ``CloudClient``: HTTP facades for the two backends
- ``WizardData`` / ``ValuationReport``: data contracts
- ``to_backend_payload`` / ``to_new_api_payload`` / ``api_response_to_report``: payload reshaping
- ``generate_demo_report``: offline mock report
- ``score_confidence`` / ``confidence_label`` / ``format_currency``: presentation helpers
"""

from valuation_client.clients import AnalysisClient, CloudClient, stream_valuation_report
from valuation_client.config import BackendPreferences, Settings, describe_backend, resolve_backend
from valuation_client.demo import generate_demo_report
from valuation_client.errors import (
    BackendConnectionError,
    BackendResponseError,
    BackendTimeoutError,
    StreamError,
    ValuationClientError,
)
from valuation_client.models import ValuationReport, WizardData
from valuation_client.scoring import confidence_label, format_currency, score_confidence
from valuation_client.streaming import ReportAssembler
from valuation_client.transforms import api_response_to_report, to_backend_payload, to_new_api_payload

__all__ = [
    "AnalysisClient",
    "BackendConnectionError",
    "BackendPreferences",
    "BackendResponseError",
    "BackendTimeoutError",
    "CloudClient",
    "ReportAssembler",
    "Settings",
    "StreamError",
    "ValuationClientError",
    "ValuationReport",
    "WizardData",
    "api_response_to_report",
    "confidence_label",
    "describe_backend",
    "format_currency",
    "generate_demo_report",
    "resolve_backend",
    "score_confidence",
    "stream_valuation_report",
    "to_backend_payload",
    "to_new_api_payload",
]
