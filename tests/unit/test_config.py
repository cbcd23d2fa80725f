"""Tests for registry configuration."""

from pathlib import Path

import pytest

from casematch.decision import DEFAULT_THRESHOLDS
from casematch.engine import RegistryConfig
from casematch.search import SearchConfig


@pytest.mark.unit
def test_defaults() -> None:
    """Test default settings match the component defaults."""
    config = RegistryConfig()

    assert config.thresholds() == DEFAULT_THRESHOLDS
    assert config.search_config() == SearchConfig(limit=50, min_score=0.4)
    assert config.intake_min_name_length == 3
    assert config.intake_debounce_seconds == 0.5
    assert config.active_days == 90
    assert config.audit_log_path is None


@pytest.mark.unit
def test_paths_are_coerced() -> None:
    """Test string paths become Path objects."""
    config = RegistryConfig(db_path="reg.db", audit_log_path="logs/audit.jsonl")

    assert config.db_path == Path("reg.db")
    assert config.audit_log_path == Path("logs/audit.jsonl")


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"dob_match_threshold": 1.2},
        {"dob_match_threshold": 0.9, "name_only_threshold": 0.8},
        {"search_limit": 0},
        {"search_min_score": -0.5},
        {"intake_min_name_length": 0},
        {"intake_debounce_seconds": -1.0},
        {"active_days": -1},
    ],
)
def test_invalid_values(kwargs: dict) -> None:
    """Test validation in __post_init__."""
    with pytest.raises(ValueError):
        RegistryConfig(**kwargs)


@pytest.mark.unit
def test_to_dict_is_json_friendly() -> None:
    """Test to_dict stringifies paths."""
    data = RegistryConfig(db_path=Path("a.db"), audit_log_path=Path("b.jsonl")).to_dict()

    assert data["db_path"] == "a.db"
    assert data["audit_log_path"] == "b.jsonl"
    assert data["name_only_threshold"] == 0.85
