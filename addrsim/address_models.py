"""Address validation data models and enums.

This module defines the core data structures shared by the validation
engine, the suggestion generator and the async validation service: the
address entity itself, validation outcomes, free-text suggestions and the
closed set of validation error kinds.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def new_address_id() -> str:
    """Return a fresh opaque address identity."""
    return str(uuid.uuid4())


class AddressType(str, Enum):
    """Usage tag for a stored address."""

    SHIPPING = "shipping"
    BILLING = "billing"
    BOTH = "both"


class ValidationErrorKind(str, Enum):
    """Closed set of validation error kinds.

    The first four are only ever reported inside a result. The last two are
    only ever raised. ``UNSERVICEABLE_AREA`` can be either, depending on the
    path that produced it.
    """

    INVALID_STREET_ADDRESS = "invalid_street_address"
    INVALID_CITY = "invalid_city"
    INVALID_STATE = "invalid_state"
    INVALID_ZIP_CODE = "invalid_zip_code"
    UNSERVICEABLE_AREA = "unserviceable_area"
    NETWORK_TIMEOUT = "network_timeout"
    SERVICE_UNAVAILABLE = "service_unavailable"

    @property
    def description(self) -> str:
        """User-facing message for this kind."""
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS: dict[ValidationErrorKind, str] = {
    ValidationErrorKind.INVALID_STREET_ADDRESS: "Please enter a valid street address",
    ValidationErrorKind.INVALID_CITY: "Please enter a valid city name",
    ValidationErrorKind.INVALID_STATE: "Please enter a valid state",
    ValidationErrorKind.INVALID_ZIP_CODE: "Please enter a valid ZIP code",
    ValidationErrorKind.UNSERVICEABLE_AREA: "We don't deliver to this area",
    ValidationErrorKind.NETWORK_TIMEOUT: "Address validation timed out. Please try again",
    ValidationErrorKind.SERVICE_UNAVAILABLE: "Address validation service is temporarily unavailable",
}

# Kinds a simulated backend outage can raise
HARD_FAILURE_KINDS: tuple[ValidationErrorKind, ...] = (
    ValidationErrorKind.NETWORK_TIMEOUT,
    ValidationErrorKind.SERVICE_UNAVAILABLE,
    ValidationErrorKind.UNSERVICEABLE_AREA,
)


class AddressValidationError(Exception):
    """Hard validation failure raised out of a validation call."""

    def __init__(self, kind: ValidationErrorKind):
        super().__init__(kind.description)
        self.kind = kind

    @property
    def description(self) -> str:
        return self.kind.description

    def __repr__(self) -> str:
        return f"AddressValidationError({self.kind.value})"


@dataclass(slots=True, frozen=True)
class Address:
    """A customer address as entered in checkout.

    Attributes:
        first_name: Recipient first name.
        last_name: Recipient last name.
        street: Primary street line.
        city: City name.
        state: State code (expected 2-letter).
        zip_code: ZIP code (expected 5 digits).
        street2: Optional apartment/suite line.
        country: Country code (default US).
        is_default: Whether this is the customer's default address.
        type: Shipping, billing or both.
        id: Opaque unique identity.
    """

    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    zip_code: str
    street2: str | None = None
    country: str = "US"
    is_default: bool = False
    type: AddressType = AddressType.SHIPPING
    id: str = field(default_factory=new_address_id)

    @property
    def formatted(self) -> str:
        """Return multi-line formatted address."""
        parts = [self.street]
        if self.street2:
            parts.append(self.street2)
        parts.append(f"{self.city}, {self.state} {self.zip_code}")
        if self.country and self.country != "US":
            parts.append(self.country)
        return "\n".join(parts)

    @property
    def single_line(self) -> str:
        """Return single-line formatted address."""
        return self.formatted.replace("\n", ", ")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "street": self.street,
            "street2": self.street2,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "is_default": self.is_default,
            "type": self.type.value,
            "formatted": self.single_line,
        }


@dataclass(slots=True, frozen=True)
class ValidationResult:
    """Outcome of a single-address validation.

    Attributes:
        is_valid: True only for a clean pass with nothing to correct.
        confidence: Validator certainty (0.0 - 1.0).
        suggested_address: Corrected address, if one is offered.
        errors: Soft error kinds found in the address.
    """

    is_valid: bool
    confidence: float
    suggested_address: Address | None = None
    errors: tuple[ValidationErrorKind, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if len(set(self.errors)) != len(self.errors):
            raise ValueError("duplicate error kinds in result")
        if self.is_valid and (self.errors or self.suggested_address is not None):
            raise ValueError("valid result cannot carry errors or a suggestion")

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_suggestion(self) -> bool:
        return self.suggested_address is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "confidence": round(self.confidence, 4),
            "suggested_address": (
                self.suggested_address.to_dict() if self.suggested_address else None
            ),
            "errors": [
                {"kind": e.value, "message": e.description} for e in self.errors
            ],
        }


@dataclass(slots=True, frozen=True)
class AddressSuggestion:
    """Candidate address produced by free-text search."""

    formatted_address: str
    street: str
    city: str
    state: str
    zip_code: str
    confidence: float
    street2: str | None = None
    country: str = "US"
    id: str = field(default_factory=new_address_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "formatted_address": self.formatted_address,
            "street": self.street,
            "street2": self.street2,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "confidence": round(self.confidence, 4),
        }
