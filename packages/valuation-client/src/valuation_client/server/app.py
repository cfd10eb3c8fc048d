"""
Demo analysis backend.

Serves the analysis backend's contract from demo data, so the clients can be
exercised end to end without a model behind them:

    uvicorn valuation_client.server.app:app --port 8000

Unhandled failures are answered as ``500 {"detail": {"error": ...}}``, the
shape ``AnalysisClient`` reports as "AI Analysis Error: ...".
"""

import logging
import time
from typing import Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from valuation_client.config import DEFAULT_ORIGIN
from valuation_client.server.router import router as api_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("valuation_client.server")

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def create_app(allowed_origins: Optional[Sequence[str]] = None) -> FastAPI:
    """
    Build the demo backend.

    ``allowed_origins`` are the browser origins allowed to call it; the
    clients' default ``Origin`` when omitted.
    """
    application = FastAPI(
        title="Startup Valuation Demo API",
        version="0.1.0",
        description="Demo analysis backend producing mock startup valuation reports",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(allowed_origins or [DEFAULT_ORIGIN]),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    application.include_router(api_router)

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Demo analysis failed: {request.method} {request.url.path}")
            return JSONResponse(status_code=500, content={"detail": {"error": str(e)}})

        elapsed = time.time() - start_time
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        if response.headers.get("content-type", "").startswith(NDJSON_MEDIA_TYPE):
            # Only time-to-first-byte is known here; chunks are still to come.
            logger.info(f"Stream opened: {request.method} {request.url.path} after {elapsed:.4f}s")
        else:
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s")
        return response

    @application.get("/")
    def read_root():
        return {"message": "Startup Valuation Demo API is running"}

    return application


app = create_app()
