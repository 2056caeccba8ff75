import logging
import resource
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from unit_economics.analysis.cache import create_cache_store
from unit_economics.analysis.gateway import LLMGateway
from unit_economics.analysis.router import router as analysis_router
from unit_economics.analysis.service import UnitEconomicsService
from unit_economics.config import Settings, check_llm_configuration, get_settings
from unit_economics.middleware import setup_middleware

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _memory_usage() -> dict:
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is KiB on Linux, bytes on macOS
    peak_bytes = peak if sys.platform == "darwin" else peak * 1024
    current_bytes = None
    try:
        with open("/proc/self/statm") as f:
            current_bytes = int(f.read().split()[1]) * resource.getpagesize()
    except (OSError, ValueError, IndexError) as e:
        logger.debug(f"Current memory usage unavailable: {e}")
    return {"memory_usage": current_bytes, "peak_memory": peak_bytes}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        check_llm_configuration(settings)

        gateway = LLMGateway(settings)
        cache = create_cache_store(settings)
        app.state.analysis_service = UnitEconomicsService(
            gateway, cache, cache_ttl=settings.cache_ttl_minutes * 60,
        )

        yield

        await gateway.close()
        await cache.close()

    app = FastAPI(
        title="Unit Economics API",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_middleware(
        app,
        settings.frontend_url,
        allowed_hosts=settings.allowed_hosts,
        rate_limit_enabled=settings.rate_limit_enabled,
    )

    app.include_router(analysis_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {"status": "alive", "service": "unit-economics-api"}

    @app.get("/status")
    async def status():
        return {"uptime": "OK", **_memory_usage()}

    return app


configure_logging(get_settings().log_level)
app = create_app()
