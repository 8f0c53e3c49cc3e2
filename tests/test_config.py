"""Tests for environment-driven configuration."""

import pytest

from addrsim.config import Config


ENV_VARS = (
    "SIMULATE_LATENCY",
    "VALIDATION_LATENCY_MIN",
    "VALIDATION_LATENCY_MAX",
    "SEARCH_LATENCY_MIN",
    "SEARCH_LATENCY_MAX",
    "DECISION_SEED",
    "EVENT_BUFFER_SIZE",
    "LOG_LEVEL",
    "UI_TESTING",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config()

    assert config.simulate_latency is True
    assert config.get_latency_config() == {
        "validation": (0.5, 1.5),
        "search": (0.2, 0.8),
    }
    assert config.decision_seed is None
    assert config.event_buffer_size == 1000
    assert config.log_level == "INFO"
    assert config.latency_enabled


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("SIMULATE_LATENCY", "false")
    monkeypatch.setenv("VALIDATION_LATENCY_MAX", "2.5")
    monkeypatch.setenv("DECISION_SEED", "42")
    monkeypatch.setenv("EVENT_BUFFER_SIZE", "50")

    config = Config()

    assert config.simulate_latency is False
    assert config.validation_latency_max == 2.5
    assert config.decision_seed == 42
    assert config.event_buffer_size == 50
    assert not config.latency_enabled


def test_malformed_values_fall_back(monkeypatch):
    monkeypatch.setenv("SEARCH_LATENCY_MIN", "fast")
    monkeypatch.setenv("DECISION_SEED", "abc")
    monkeypatch.setenv("EVENT_BUFFER_SIZE", "lots")

    config = Config()

    assert config.search_latency_min == 0.2
    assert config.decision_seed is None
    assert config.event_buffer_size == 1000


def test_ui_testing_disables_latency(monkeypatch):
    monkeypatch.setenv("UI_TESTING", "1")

    config = Config()

    assert config.simulate_latency is True
    assert config.ui_testing is True
    assert not config.latency_enabled


@pytest.mark.parametrize(
    "overrides",
    [
        {"validation_latency_min": 2.0, "validation_latency_max": 1.0},
        {"search_latency_min": -0.1},
    ],
)
def test_invalid_ranges_rejected(overrides):
    with pytest.raises(ValueError):
        Config(**overrides)


def test_frozen():
    config = Config()
    with pytest.raises(AttributeError):
        config.log_level = "DEBUG"
