"""
addrsim - Simulated address validation backend
Run with: uvicorn main:app --reload --port 8000

Stands in for a real address-verification API during storefront demos and
UI automation. Every call is traced; spans and log records go to the
standard logger and to an in-memory buffer served at
/api/address/telemetry/recent.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()  # Must be before importing config

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from addrsim.address_router import router as address_router, configure_router
from addrsim.config import Config
from addrsim.telemetry import InMemoryEventSink, LoggingEventSink, MultiEventSink, Tracer
from addrsim.validation_service import AsyncValidationService

cfg = Config()  # Fresh instance after dotenv loaded

logging.basicConfig(
    level=getattr(logging, cfg.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Globals
_event_sink: InMemoryEventSink = None
_tracer: Tracer = None
_service: AsyncValidationService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _event_sink, _tracer, _service

    logger.info("addrsim startup")
    if cfg.ui_testing:
        logger.info("Running in UI testing mode (simulated latency disabled)")

    _event_sink = InMemoryEventSink(cfg.event_buffer_size)
    _tracer = Tracer(MultiEventSink([LoggingEventSink(), _event_sink]))
    _tracer.add_session_property("ui_testing", cfg.ui_testing)
    _tracer.add_session_property("app_version", app.version)

    _service = AsyncValidationService(_tracer, config=cfg)
    configure_router(_service, _event_sink)

    _tracer.log_message(
        "Address validation backend ready",
        properties={
            "latency_enabled": cfg.latency_enabled,
            "seeded": cfg.decision_seed is not None,
        },
    )

    yield

    # Shutdown
    configure_router(None)
    logger.info(
        f"addrsim shutdown ({len(_service.validation_results)} cached results, "
        f"{_event_sink.stats()['spans_ended']} spans)"
    )


app = FastAPI(title="addrsim", version="0.1.0", lifespan=lifespan)
app.include_router(address_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Sanitized global exception handler - never exposes internal details."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred. Please try again later."
            }
        },
    )


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "latency_enabled": cfg.latency_enabled,
        "validating": _service.is_validating if _service else False,
    }
