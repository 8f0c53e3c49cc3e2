"""Async address validation service with span instrumentation.

Wraps the simulated validation engine and suggestion generator with
simulated network latency, a per-address result cache and tracing. Every
call that does work opens exactly one span, ends it exactly once, and then
emits exactly one log record:

    start_span -> set_attribute/set_status* -> end -> log_message

The service runs on a single asyncio loop. Cache and busy-counter updates
happen between suspension points, so no locking is needed. Concurrent
validations of the same address id race; the last one to finish wins.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from addrsim.address_models import (
    Address,
    AddressSuggestion,
    AddressValidationError,
    ValidationResult,
)
from addrsim.config import Config, cfg
from addrsim.decision import DecisionSource, RandomDecisionSource
from addrsim.suggestions import SuggestionGenerator
from addrsim.telemetry import LogSeverity, Span, SpanStatus, SpanType, Tracer
from addrsim.validation_engine import ValidationEngine

logger = logging.getLogger(__name__)

VALIDATION_SPAN = "address_validation"
SEARCH_SPAN = "address_suggestions_search"


class AsyncValidationService:
    """Instrumented front door to the simulated address backend."""

    def __init__(
        self,
        tracer: Tracer,
        decision: DecisionSource | None = None,
        config: Config | None = None,
        engine: ValidationEngine | None = None,
        suggestions: SuggestionGenerator | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the service.

        Args:
            tracer: Tracer receiving spans and log records for every call.
            decision: Source for latency, scenario and suggestion draws.
                Defaults to one seeded from ``config.decision_seed``.
            config: Latency settings. Defaults to the module config.
            engine: Validation engine. Defaults to one sharing ``decision``.
            suggestions: Suggestion generator. Defaults to one sharing
                ``decision``.
            sleep: Coroutine used for simulated latency.
        """
        self.config = config or cfg
        self.tracer = tracer
        self.decision = decision or RandomDecisionSource(self.config.decision_seed)
        self.suggestions = suggestions or SuggestionGenerator(self.decision)
        self.engine = engine or ValidationEngine(self.decision, self.suggestions)
        self._sleep = sleep
        self._results: dict[str, ValidationResult] = {}
        self._in_flight = 0

        logger.info(
            f"AsyncValidationService initialized "
            f"(latency={'on' if self.config.latency_enabled else 'off'}, "
            f"seed={self.config.decision_seed})"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_validating(self) -> bool:
        """True while any validation call is in flight."""
        return self._in_flight > 0

    @property
    def validation_results(self) -> dict[str, ValidationResult]:
        """Snapshot of the result cache keyed by address id."""
        return dict(self._results)

    def cached_result(self, address_id: str) -> ValidationResult | None:
        return self._results.get(address_id)

    def clear_cache(self) -> None:
        self._results.clear()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def validate_address(
        self,
        address: Address,
        simulate_error: bool = False,
    ) -> ValidationResult:
        """Validate a single address.

        Args:
            address: Address to validate.
            simulate_error: Force a simulated backend failure.

        Returns:
            ValidationResult; soft errors are reported in ``errors``.

        Raises:
            AddressValidationError: On a hard failure. The span is marked
                as errored and the failure is logged before re-raising.
        """
        self._in_flight += 1
        try:
            span = self.tracer.start_span(VALIDATION_SPAN, SpanType.PERFORMANCE)
            span.set_attribute("address.city", address.city)
            span.set_attribute("address.state", address.state)
            span.set_attribute("address.zip_code", address.zip_code)

            try:
                await self._simulate_latency(
                    self.config.validation_latency_min,
                    self.config.validation_latency_max,
                )
                result = self.engine.validate(address, simulate_error=simulate_error)
            except (Exception, asyncio.CancelledError) as e:
                self._fail_span(span, e)
                self.tracer.log_message(
                    "Address validation failed",
                    LogSeverity.ERROR,
                    {
                        "address_id": address.id,
                        "error": _describe(e),
                    },
                )
                raise

            self._results[address.id] = result

            span.set_attribute("validation.is_valid", result.is_valid)
            span.set_attribute("validation.confidence", result.confidence)
            span.set_attribute("validation.has_suggestion", result.has_suggestion)
            span.set_attribute("validation.error_count", len(result.errors))
            span.set_status(SpanStatus.OK)
            span.end()

            if result.has_errors:
                self.tracer.log_message(
                    f"Address validation errors: {[e.description for e in result.errors]}",
                    LogSeverity.WARNING,
                    {
                        "address_id": address.id,
                        "error_count": len(result.errors),
                        "city": address.city,
                        "state": address.state,
                    },
                )
            else:
                self.tracer.log_message(
                    "Address validation completed",
                    LogSeverity.INFO,
                    {
                        "address_id": address.id,
                        "is_valid": result.is_valid,
                        "has_suggestion": result.has_suggestion,
                    },
                )
            return result
        finally:
            self._in_flight -= 1

    async def search_address_suggestions(self, query: str) -> list[AddressSuggestion]:
        """Return ranked candidate addresses for a free-text query.

        Blank queries return an empty list immediately, without a span or
        simulated latency.
        """
        if not query or not query.strip():
            return []

        span = self.tracer.start_span(SEARCH_SPAN, SpanType.PERFORMANCE)
        span.set_attribute("search.query", query)
        span.set_attribute("search.query_length", len(query))

        try:
            await self._simulate_latency(
                self.config.search_latency_min,
                self.config.search_latency_max,
            )
            suggestions = self.suggestions.search(query)
        except (Exception, asyncio.CancelledError) as e:
            self._fail_span(span, e)
            self.tracer.log_message(
                "Address suggestions failed",
                LogSeverity.ERROR,
                {
                    "query": query,
                    "error": _describe(e),
                },
            )
            raise

        span.set_attribute("search.results_count", len(suggestions))
        span.set_status(SpanStatus.OK)
        span.end()

        self.tracer.log_message(
            "Address suggestions retrieved",
            LogSeverity.INFO,
            {
                "query": query,
                "results_count": len(suggestions),
            },
        )
        return suggestions

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _simulate_latency(self, low: float, high: float) -> None:
        if not self.config.latency_enabled:
            return
        await self._sleep(self.decision.uniform(low, high))

    @staticmethod
    def _fail_span(span: Span, error: BaseException) -> None:
        message = _describe(error)
        span.set_attribute("error.type", type(error).__name__)
        span.set_attribute("error.message", message)
        if isinstance(error, AddressValidationError):
            span.set_attribute("error.kind", error.kind.value)
        span.set_status(SpanStatus.ERROR, message)
        span.end()


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__
