"""FastAPI router for the simulated address validation endpoints.

Exposes the two service operations over HTTP along with the result cache
and recent telemetry, so the storefront client (or a test harness) can
drive the simulation without linking the package.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from addrsim.address_models import (
    Address,
    AddressType,
    AddressValidationError,
    ValidationErrorKind,
)
from addrsim.telemetry import InMemoryEventSink
from addrsim.validation_service import AsyncValidationService


logger = logging.getLogger(__name__)

# Router instance - will be configured with the service in main.py
router = APIRouter(prefix="/api/address", tags=["Address Validation"])

# Global references (set during app startup)
_service: AsyncValidationService | None = None
_event_sink: InMemoryEventSink | None = None

# Hard failure kind -> HTTP status
FAILURE_STATUS_CODES: dict[ValidationErrorKind, int] = {
    ValidationErrorKind.NETWORK_TIMEOUT: 504,
    ValidationErrorKind.SERVICE_UNAVAILABLE: 503,
    ValidationErrorKind.UNSERVICEABLE_AREA: 422,
}


def configure_router(
    service: AsyncValidationService | None,
    event_sink: InMemoryEventSink | None = None,
) -> None:
    """Configure the router with service dependencies.

    Args:
        service: Initialized validation service (None to unconfigure).
        event_sink: Optional in-memory sink backing the telemetry endpoint.
    """
    global _service, _event_sink
    _service = service
    _event_sink = event_sink
    logger.info(f"Address router configured (telemetry={'enabled' if event_sink else 'disabled'})")


def _require_service() -> AsyncValidationService:
    if not _service:
        raise HTTPException(status_code=503, detail="Validation service not initialized")
    return _service


# ============================================================================
# Request/Response Models
# ============================================================================


class AddressPayload(BaseModel):
    """Address as submitted from checkout.

    Field lengths are capped but not otherwise checked here; judging the
    content is the validator's job.
    """

    id: str | None = Field(
        default=None,
        max_length=64,
        description="Existing address id; a new one is assigned when omitted",
    )
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    street: str = Field(..., max_length=200, examples=["123 Main St"])
    street2: str | None = Field(default=None, max_length=200)
    city: str = Field(..., max_length=100, examples=["San Francisco"])
    state: str = Field(..., max_length=50, examples=["CA"])
    zip_code: str = Field(..., max_length=20, examples=["94105"])
    country: str = Field(default="US", max_length=2)
    is_default: bool = False
    type: AddressType = AddressType.SHIPPING

    def to_address(self) -> Address:
        fields = self.model_dump(exclude={"id"})
        if self.id:
            fields["id"] = self.id
        return Address(**fields)


class ValidateAddressRequest(BaseModel):
    """Request model for single address validation."""

    address: AddressPayload
    simulate_error: bool = Field(
        default=False,
        description="Force a simulated backend failure",
    )


class ValidateAddressResponse(BaseModel):
    """Response model for single address validation."""

    success: bool
    address_id: str
    result: dict[str, Any]


class SuggestionSearchRequest(BaseModel):
    """Request model for free-text address suggestions."""

    query: str = Field(
        ...,
        max_length=200,
        description="Free-text address fragment",
        examples=["main", "oak street"],
    )


class SuggestionSearchResponse(BaseModel):
    """Response model for address suggestions."""

    query: str
    suggestions: list[dict[str, Any]]
    count: int


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/validate", response_model=ValidateAddressResponse)
async def validate_address(request: ValidateAddressRequest) -> ValidateAddressResponse:
    """Validate a single address against the simulated backend.

    Soft problems come back in ``result.errors`` with a 200. Hard failures
    map to 504 (timeout), 503 (unavailable) or 422 (unserviceable area).
    """
    service = _require_service()
    address = request.address.to_address()

    try:
        result = await service.validate_address(address, simulate_error=request.simulate_error)
    except AddressValidationError as e:
        raise HTTPException(
            status_code=FAILURE_STATUS_CODES[e.kind],
            detail={"kind": e.kind.value, "message": e.description},
        ) from e

    return ValidateAddressResponse(
        success=result.is_valid,
        address_id=address.id,
        result=result.to_dict(),
    )


@router.post("/suggestions", response_model=SuggestionSearchResponse)
async def search_suggestions(request: SuggestionSearchRequest) -> SuggestionSearchResponse:
    """Return ranked candidate addresses for a free-text query."""
    service = _require_service()
    suggestions = await service.search_address_suggestions(request.query)

    return SuggestionSearchResponse(
        query=request.query,
        suggestions=[s.to_dict() for s in suggestions],
        count=len(suggestions),
    )


@router.get("/validation/{address_id}")
async def get_cached_validation(address_id: str) -> dict[str, Any]:
    """Return the latest cached validation result for an address id."""
    service = _require_service()
    result = service.cached_result(address_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No validation result for {address_id}")
    return {"address_id": address_id, "result": result.to_dict()}


@router.get("/telemetry/recent")
async def recent_telemetry(count: int = Query(default=20, ge=1, le=500)) -> dict[str, Any]:
    """Return the most recent span and log events."""
    if not _event_sink:
        raise HTTPException(status_code=503, detail="Telemetry buffer not configured")
    return {
        "events": _event_sink.recent(count),
        "stats": _event_sink.stats(),
    }


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Check validation service health."""
    return {
        "status": "healthy" if _service else "not_initialized",
        "service": _service is not None,
        "is_validating": _service.is_validating if _service else False,
        "cached_results": len(_service.validation_results) if _service else 0,
        "latency_enabled": _service.config.latency_enabled if _service else False,
        "telemetry": _event_sink.stats() if _event_sink else None,
    }
