"""
Unit Economics Router

POST /api/v1/analyze       startup description → unit economics report
GET  /api/v1/health        service and AI configuration status
GET  /api/v1/metrics-info  supported metrics and request fields
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from unit_economics.analysis.messages import resolve_language
from unit_economics.analysis.service import UnitEconomicsService, utc_timestamp
from unit_economics.config import Settings
from unit_economics.middleware import get_client_ip, limiter

router = APIRouter()

SERVICE_NAME = "AI Unit Economics Chat API"
VERSION = "1.0.0"


def get_analysis_service(request: Request) -> UnitEconomicsService:
    return request.app.state.analysis_service


@router.post("/analyze")
@limiter.limit("10/minute")
async def analyze(
    request: Request,
    service: UnitEconomicsService = Depends(get_analysis_service),
):
    # raw body, so the size limit applies before any JSON parsing
    raw_body = await request.body()
    result = await service.analyze(
        raw_body,
        language=resolve_language(request.headers.get("accept-language")),
        client_request_id=request.headers.get("x-request-id"),
        client_ip=get_client_ip(request),
    )
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get("/health")
async def health(request: Request):
    settings: Settings = request.app.state.settings
    service = getattr(request.app.state, "analysis_service", None)
    return {
        "status": "OK",
        "service": SERVICE_NAME,
        "timestamp": utc_timestamp(),
        "version": VERSION,
        "ai_service": "Configured" if settings.llm_configured else "Not configured",
        "cache": service.cache.backend if service else "unavailable",
    }


@router.get("/metrics-info")
async def metrics_info():
    return {
        "supported_metrics": {
            "cac": "Customer Acquisition Cost ($)",
            "ltv": "Lifetime Value ($)",
            "churn_rate": "Monthly Churn Rate (%)",
            "payback_period": "Payback Period (months)",
            "unit_margin": "Unit Economics Margin ($)",
            "ltv_cac_ratio": "LTV to CAC Ratio",
        },
        "required_fields": {
            "startup_idea": "Brief description of the startup idea (10-1000 chars)",
            "description": "Detailed business model description (50-2000 chars)",
            "additional_info": "Optional additional information (max 500 chars)",
        },
        "example_request": {
            "startup_idea": "Healthy food delivery service for offices",
            "description": (
                "B2B platform delivering healthy meals to offices. Subscription of 15$ per month "
                "per employee, target audience is IT companies with 50-200 employees."
            ),
            "additional_info": "Planned launch in 3 cities",
        },
    }
