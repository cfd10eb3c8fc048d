"""
Streaming report protocol.

``/valuation-report-stream`` answers with newline-delimited JSON. Every
stage of the analysis is announced with a status chunk and then delivered as
a data chunk::

    {"status": "starting", "stage": 3, "message": "Running valuation calculations..."}
    {"stage": 3, "calculation": {...}}

Stages: 1 businessSummary, 2 recommendedMethods, 3 calculation (repeated),
4 competitorAnalysis, 5 strategicContext, 6 finalValuation (last).

A chunk carrying a truthy ``error`` aborts the stream.
"""

import json
import logging
import queue
import threading
import time
from typing import Any, Dict, Iterable, Iterator, Optional

import httpx

from valuation_client.errors import BackendResponseError, BackendTimeoutError, StreamError
from valuation_client.models.report import ValuationReport

logger = logging.getLogger(__name__)

STREAM_TIMEOUT_MESSAGE = "Analysis is taking longer than expected. Please try again."

_END_OF_STREAM = object()


def _decode_line(line: str) -> Optional[Dict[str, Any]]:
    line = line.strip()
    if not line:
        return None

    try:
        chunk = json.loads(line)
    except ValueError as e:
        logger.error(f"Failed to parse chunk: {line!r} ({e})")
        return None

    if not isinstance(chunk, dict):
        logger.error(f"Ignoring non-object chunk: {line!r}")
        return None

    if chunk.get("error"):
        raise StreamError(chunk.get("message") or "Analysis failed")
    return chunk


def iter_ndjson(pieces: Iterable[str]) -> Iterator[Dict[str, Any]]:
    """
    Reassemble NDJSON objects from arbitrarily split text pieces.

    A line is only decoded once its newline has arrived; whatever is left in
    the buffer when the input ends is decoded as the final line.
    """
    buffer = ""
    for piece in pieces:
        buffer += piece
        *lines, buffer = buffer.split("\n")
        for line in lines:
            chunk = _decode_line(line)
            if chunk is not None:
                yield chunk

    chunk = _decode_line(buffer)
    if chunk is not None:
        yield chunk


def iter_stream_chunks(
    http: httpx.Client,
    url: str,
    payload: Dict[str, Any],
    timeout: float,
) -> Iterator[Dict[str, Any]]:
    """
    POST ``payload`` and yield decoded chunks until the server closes the stream.

    ``timeout`` bounds the whole exchange, not just each read: a server that
    stalls mid-stream is abandoned as soon as the deadline passes.
    """
    deadline = time.monotonic() + timeout

    with http.stream("POST", url, json=payload, timeout=timeout) as response:
        if not response.is_success:
            raise BackendResponseError(
                f"HTTP error! status: {response.status_code}", status_code=response.status_code
            )

        yield from iter_ndjson(_iter_text_until(response, deadline))


def _iter_text_until(response: httpx.Response, deadline: float) -> Iterator[str]:
    """Yield decoded body text, raising ``BackendTimeoutError`` once ``deadline`` passes."""
    pieces: "queue.Queue[Any]" = queue.Queue()

    def pump() -> None:
        try:
            for text in response.iter_text():
                pieces.put(text)
        except Exception as e:
            pieces.put(e)
        else:
            pieces.put(_END_OF_STREAM)

    threading.Thread(target=pump, name="ndjson-reader", daemon=True).start()

    while True:
        try:
            item = pieces.get(timeout=max(deadline - time.monotonic(), 0))
        except queue.Empty:
            logger.error("Analysis stream exceeded its deadline; abandoning it")
            raise BackendTimeoutError(STREAM_TIMEOUT_MESSAGE) from None

        if item is _END_OF_STREAM:
            return
        if isinstance(item, Exception):
            raise item
        yield item


class ReportAssembler:
    """Folds stream chunks into a ``ValuationReport`` as they arrive."""

    def __init__(self):
        self.stage = 1
        self.status_message = "Initializing analysis..."
        self.complete = False
        self._report: Dict[str, Any] = {}

    def feed(self, chunk: Dict[str, Any]) -> bool:
        """Apply one chunk; returns True once the final valuation has arrived."""
        if chunk.get("status") == "starting" and chunk.get("message"):
            self.status_message = chunk["message"]
            self.stage = chunk.get("stage", self.stage)
            return self.complete

        stage = chunk.get("stage")
        if stage == 1 and chunk.get("businessSummary"):
            self._report["businessSummary"] = chunk["businessSummary"]
        elif stage == 2 and chunk.get("recommendedMethods"):
            self._report["recommendedMethods"] = chunk["recommendedMethods"]
        elif stage == 3 and chunk.get("calculation"):
            self._report.setdefault("calculations", []).append(chunk["calculation"])
        elif stage == 4 and chunk.get("competitorAnalysis"):
            self._report["competitorAnalysis"] = chunk["competitorAnalysis"]
        elif stage == 5 and chunk.get("strategicContext"):
            self._report["strategicContext"] = chunk["strategicContext"]
        elif stage == 6 and chunk.get("finalValuation"):
            self._report["finalValuation"] = chunk["finalValuation"]
            self.complete = True
        else:
            logger.debug(f"Ignoring chunk without usable stage data: {chunk}")
            return self.complete

        self.stage = stage
        return self.complete

    def report(self) -> ValuationReport:
        if not self.complete:
            raise StreamError("Analysis stream ended before the final valuation was received.")
        try:
            return ValuationReport.model_validate(self._report)
        except ValueError as e:
            raise StreamError(f"Error processing analysis data: {e}") from e


def collect_report(chunks: Iterable[Dict[str, Any]]) -> ValuationReport:
    assembler = ReportAssembler()
    for chunk in chunks:
        assembler.feed(chunk)
    return assembler.report()
