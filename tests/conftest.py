"""Pytest configuration and shared fixtures."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from addrsim.address_models import Address  # noqa: E402
from addrsim.config import Config  # noqa: E402
from addrsim.decision import ScriptedDecisionSource  # noqa: E402
from addrsim.telemetry import InMemoryEventSink, Tracer  # noqa: E402
from addrsim.validation_service import AsyncValidationService  # noqa: E402


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for Windows compatibility."""
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays.

    Yields to the loop once so concurrent calls still interleave.
    """

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def sample_address():
    return Address(
        first_name="Jane",
        last_name="Smith",
        street="123 Main St",
        city="San Francisco",
        state="CA",
        zip_code="94105",
    )


@pytest.fixture
def other_address():
    return Address(
        first_name="Bob",
        last_name="Wilson",
        street="789 Oak Ave",
        street2="Apt 4",
        city="Chicago",
        state="IL",
        zip_code="60601",
    )


@pytest.fixture
def sink():
    return InMemoryEventSink()


@pytest.fixture
def tracer(sink):
    return Tracer(sink)


@pytest.fixture
def decision():
    """Scripted source; tests push the choices they need."""
    return ScriptedDecisionSource(seed=7)


@pytest.fixture
def latency_config():
    return Config(simulate_latency=True, ui_testing=False, decision_seed=7)


@pytest.fixture
def no_latency_config():
    return Config(simulate_latency=False, ui_testing=False, decision_seed=7)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def service(tracer, decision, latency_config, recording_sleep):
    return AsyncValidationService(
        tracer,
        decision=decision,
        config=latency_config,
        sleep=recording_sleep,
    )
