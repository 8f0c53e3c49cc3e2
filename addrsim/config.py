"""Configuration with sensible defaults for the simulated address backend."""

from dataclasses import dataclass, field
from os import getenv


def _parse_bool(value: str, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if not value:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str, default: float) -> float:
    """Parse float from environment variable."""
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    """Parse int from environment variable."""
    try:
        return int(value) if value else default
    except ValueError:
        return default


def _parse_seed(value: str) -> int | None:
    """Parse optional seed; empty or malformed means unseeded."""
    try:
        return int(value) if value else None
    except ValueError:
        return None


@dataclass(slots=True, frozen=True)
class Config:
    # ==================== Simulated latency (seconds) ====================
    # Disable to skip the sleeps entirely (UI tests, local demos)
    simulate_latency: bool = field(
        default_factory=lambda: _parse_bool(getenv("SIMULATE_LATENCY", ""), True)
    )
    validation_latency_min: float = field(
        default_factory=lambda: _parse_float(getenv("VALIDATION_LATENCY_MIN", ""), 0.5)
    )
    validation_latency_max: float = field(
        default_factory=lambda: _parse_float(getenv("VALIDATION_LATENCY_MAX", ""), 1.5)
    )
    search_latency_min: float = field(
        default_factory=lambda: _parse_float(getenv("SEARCH_LATENCY_MIN", ""), 0.2)
    )
    search_latency_max: float = field(
        default_factory=lambda: _parse_float(getenv("SEARCH_LATENCY_MAX", ""), 0.8)
    )

    # ==================== Decision source ====================
    # Empty = fresh entropy on every start
    decision_seed: int | None = field(
        default_factory=lambda: _parse_seed(getenv("DECISION_SEED", ""))
    )

    # ==================== Telemetry ====================
    event_buffer_size: int = field(
        default_factory=lambda: _parse_int(getenv("EVENT_BUFFER_SIZE", ""), 1000)
    )
    log_level: str = field(default_factory=lambda: getenv("LOG_LEVEL", "INFO"))

    # ==================== Launch flags ====================
    ui_testing: bool = field(
        default_factory=lambda: _parse_bool(getenv("UI_TESTING", ""), False)
    )

    def __post_init__(self) -> None:
        for name, low, high in (
            ("validation", self.validation_latency_min, self.validation_latency_max),
            ("search", self.search_latency_min, self.search_latency_max),
        ):
            if low < 0 or high < low:
                raise ValueError(f"Invalid {name} latency range: {low}..{high}")

    @property
    def latency_enabled(self) -> bool:
        """UI test runs never wait on simulated latency."""
        return self.simulate_latency and not self.ui_testing

    def get_latency_config(self) -> dict[str, tuple[float, float]]:
        """Latency ranges keyed by operation."""
        return {
            "validation": (self.validation_latency_min, self.validation_latency_max),
            "search": (self.search_latency_min, self.search_latency_max),
        }


cfg = Config()
