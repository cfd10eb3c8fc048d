"""
API Router: endpoints of the demo analysis backend.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from valuation_client.demo import generate_demo_report, iter_demo_chunks
from valuation_client.models.wizard import WizardData

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/valuation-report",
    summary="Generate Valuation Report",
    description="Accepts the legacy flat company payload and returns a complete demo valuation report.",
    response_description="Valuation report with summary, methods, calculations and final range.",
)
def valuation_report(payload: Dict[str, Any]):
    company_name = payload.get("companyName")
    if company_name is not None and not isinstance(company_name, str):
        raise HTTPException(status_code=422, detail="companyName must be a string")

    try:
        wizard = {"step1": {"businessName": company_name, "industry": payload.get("industry")}}
        return generate_demo_report(wizard).to_wire()
    except ValueError as e:
        logger.warning(f"Bad Request for {company_name}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error building report for {company_name}: {e}")
        raise HTTPException(status_code=500, detail={"error": str(e)})


@router.post(
    "/valuation-report-stream",
    summary="Stream Valuation Report",
    description="Accepts raw wizard data and streams the report stage by stage as newline-delimited JSON.",
    response_description="NDJSON stream of status and stage chunks.",
)
def valuation_report_stream(wizard: WizardData):
    def body():
        for chunk in iter_demo_chunks(wizard):
            yield json.dumps(chunk) + "\n"

    return StreamingResponse(body(), media_type="application/x-ndjson")
