"""Simulated address validation backend with span instrumentation."""

from .address_models import (
    Address,
    AddressSuggestion,
    AddressType,
    AddressValidationError,
    ValidationErrorKind,
    ValidationResult,
)
from .decision import DecisionSource, RandomDecisionSource, ScriptedDecisionSource
from .suggestions import SuggestionGenerator
from .validation_engine import ValidationEngine, ValidationScenario
from .validation_service import AsyncValidationService

__all__ = [
    # Models
    "Address",
    "AddressSuggestion",
    "AddressType",
    "AddressValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    # Decision sources
    "DecisionSource",
    "RandomDecisionSource",
    "ScriptedDecisionSource",
    # Engine
    "SuggestionGenerator",
    "ValidationEngine",
    "ValidationScenario",
    # Service
    "AsyncValidationService",
]
