from valuation_client.clients.analysis import AnalysisClient, stream_valuation_report
from valuation_client.clients.base import BaseApiClient
from valuation_client.clients.cloud import CloudClient

__all__ = ["AnalysisClient", "BaseApiClient", "CloudClient", "stream_valuation_report"]
