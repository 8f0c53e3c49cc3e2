"""Simulated address validation engine.

Stands in for a real address-verification backend. Each call picks one of
four canned outcome scenarios; the invalid-address scenario then applies a
deterministic field check so the reported errors match the input.

Outcome table:
    VALID                  -> confidence 0.95, valid
    VALID_WITH_SUGGESTION  -> confidence 0.85, corrected address offered
    INVALID_ADDRESS        -> confidence 0.20, field errors
    PARTIAL_MATCH          -> confidence 0.70, corrected address + ZIP error

With ``simulate_error`` set, a hard failure is raised instead.
"""

import logging
import re
from enum import Enum

from addrsim.address_models import (
    HARD_FAILURE_KINDS,
    Address,
    AddressValidationError,
    ValidationErrorKind,
    ValidationResult,
)
from addrsim.decision import DecisionSource, RandomDecisionSource
from addrsim.suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)


# ASCII digits only; str.isdigit() would accept other scripts
_ZIP_PATTERN = re.compile(r"[0-9]{5}")

MIN_STREET_LENGTH = 5
MIN_CITY_LENGTH = 2
STATE_CODE_LENGTH = 2


class ValidationScenario(str, Enum):
    """Canned outcome shapes of the simulated backend."""

    VALID = "valid"
    VALID_WITH_SUGGESTION = "valid_with_suggestion"
    INVALID_ADDRESS = "invalid_address"
    PARTIAL_MATCH = "partial_match"


SCENARIO_CONFIDENCE: dict[ValidationScenario, float] = {
    ValidationScenario.VALID: 0.95,
    ValidationScenario.VALID_WITH_SUGGESTION: 0.85,
    ValidationScenario.INVALID_ADDRESS: 0.20,
    ValidationScenario.PARTIAL_MATCH: 0.70,
}


def check_fields(address: Address) -> tuple[ValidationErrorKind, ...]:
    """Deterministic field checks used by the invalid-address scenario.

    Never returns an empty tuple: an address that passes every check is
    reported as outside the delivery area.
    """
    errors: list[ValidationErrorKind] = []

    if len(address.street) < MIN_STREET_LENGTH:
        errors.append(ValidationErrorKind.INVALID_STREET_ADDRESS)

    if not _ZIP_PATTERN.fullmatch(address.zip_code):
        errors.append(ValidationErrorKind.INVALID_ZIP_CODE)

    if len(address.city) < MIN_CITY_LENGTH:
        errors.append(ValidationErrorKind.INVALID_CITY)

    if len(address.state) != STATE_CODE_LENGTH:
        errors.append(ValidationErrorKind.INVALID_STATE)

    if not errors:
        errors.append(ValidationErrorKind.UNSERVICEABLE_AREA)

    return tuple(errors)


class ValidationEngine:
    """Picks an outcome scenario and builds the matching result."""

    __slots__ = ("decision", "suggestions")

    def __init__(
        self,
        decision: DecisionSource | None = None,
        suggestions: SuggestionGenerator | None = None,
    ):
        """Initialize the engine.

        Args:
            decision: Source for scenario and failure-kind draws.
            suggestions: Generator for corrected addresses. Defaults to one
                sharing ``decision``.
        """
        self.decision = decision or RandomDecisionSource()
        self.suggestions = suggestions or SuggestionGenerator(self.decision)

    def validate(self, address: Address, simulate_error: bool = False) -> ValidationResult:
        """Validate ``address`` against the simulated backend.

        Args:
            address: Address to validate.
            simulate_error: Raise a simulated outage instead of returning.

        Returns:
            ValidationResult for the drawn scenario.

        Raises:
            AddressValidationError: When ``simulate_error`` is set.
        """
        if simulate_error:
            kind = self.decision.choice(HARD_FAILURE_KINDS)
            logger.debug(f"Simulated failure for {address.id}: {kind.value}")
            raise AddressValidationError(kind)

        scenario = self.decision.choice(tuple(ValidationScenario))
        logger.debug(f"Scenario for {address.id}: {scenario.value}")
        return self.build_result(address, scenario)

    def build_result(self, address: Address, scenario: ValidationScenario) -> ValidationResult:
        """Build the result for a specific scenario."""
        confidence = SCENARIO_CONFIDENCE[scenario]

        if scenario == ValidationScenario.VALID:
            return ValidationResult(is_valid=True, confidence=confidence)

        if scenario == ValidationScenario.VALID_WITH_SUGGESTION:
            return ValidationResult(
                is_valid=False,
                confidence=confidence,
                suggested_address=self.suggestions.correct(address),
            )

        if scenario == ValidationScenario.INVALID_ADDRESS:
            return ValidationResult(
                is_valid=False,
                confidence=confidence,
                errors=check_fields(address),
            )

        return ValidationResult(
            is_valid=False,
            confidence=confidence,
            suggested_address=self.suggestions.correct(address),
            errors=(ValidationErrorKind.INVALID_ZIP_CODE,),
        )
