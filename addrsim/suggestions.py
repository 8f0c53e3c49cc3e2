"""Corrected-address and free-text suggestion generation."""

import dataclasses
import logging

from addrsim.address_models import Address, AddressSuggestion, new_address_id
from addrsim.decision import DecisionSource, RandomDecisionSource

logger = logging.getLogger(__name__)


COMMON_STREETS: tuple[str, ...] = (
    "Main Street",
    "Oak Street",
    "First Street",
    "Second Street",
    "Park Avenue",
    "Elm Street",
    "Washington Street",
    "Lincoln Avenue",
)

# (city, state, zip)
CITY_STATE_ZIP: tuple[tuple[str, str, str], ...] = (
    ("San Francisco", "CA", "94105"),
    ("New York", "NY", "10001"),
    ("Los Angeles", "CA", "90210"),
    ("Chicago", "IL", "60601"),
    ("Houston", "TX", "77001"),
    ("Phoenix", "AZ", "85001"),
)

# Known corrections applied by correct()
STREET_NUMBER_FIXES: dict[str, str] = {"123": "125"}
ZIP_FIXES: dict[str, str] = {"94105": "94104"}

MIN_RESULTS = 3
MAX_RESULTS = 8
MIN_HOUSE_NUMBER = 100
MAX_HOUSE_NUMBER = 9999
MIN_CONFIDENCE = 0.70
MAX_CONFIDENCE = 0.95


class SuggestionGenerator:
    """Builds corrected addresses and ranked free-text candidates."""

    __slots__ = ("decision",)

    def __init__(self, decision: DecisionSource | None = None):
        self.decision = decision or RandomDecisionSource()

    def correct(self, address: Address) -> Address:
        """Return a corrected copy of ``address`` under a fresh identity.

        Only the street number and ZIP code are ever changed; every other
        field is carried over as-is.
        """
        street = address.street
        for wrong, right in STREET_NUMBER_FIXES.items():
            if wrong in street:
                street = street.replace(wrong, right)

        zip_code = ZIP_FIXES.get(address.zip_code, address.zip_code)

        return dataclasses.replace(
            address,
            id=new_address_id(),
            street=street,
            zip_code=zip_code,
        )

    def search(self, query: str) -> list[AddressSuggestion]:
        """Synthesize 3-8 candidates for ``query``, best first."""
        if not query or not query.strip():
            return []

        count = self.decision.randint(MIN_RESULTS, MAX_RESULTS)
        suggestions = [self._make_suggestion() for _ in range(count)]
        suggestions.sort(key=lambda s: s.confidence, reverse=True)

        logger.debug(f"Generated {len(suggestions)} suggestions for '{query[:50]}'")
        return suggestions

    def _make_suggestion(self) -> AddressSuggestion:
        street_name = self.decision.choice(COMMON_STREETS)
        city, state, zip_code = self.decision.choice(CITY_STATE_ZIP)
        number = self.decision.randint(MIN_HOUSE_NUMBER, MAX_HOUSE_NUMBER)
        street = f"{number} {street_name}"

        return AddressSuggestion(
            formatted_address=f"{street}, {city}, {state} {zip_code}",
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            confidence=self.decision.uniform(MIN_CONFIDENCE, MAX_CONFIDENCE),
        )
