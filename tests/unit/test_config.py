"""
Tests for configuration management in `healthcentre/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Rule overrides from the environment, including rejected rule sets
- Registry and database settings
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from healthcentre.config import (
    RULE_ENV_VARS,
    AppConfig,
    get_config,
    load_config_from_env,
    reset_config_cache,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop overrides that a developer .env may have set, and clear the cache."""
    for name in [
        *RULE_ENV_VARS,
        "ENVIRONMENT",
        "LOG_LEVEL",
        "DATABASE_URL",
        "DATABASE_ECHO",
        "BASE_MEMBER_ID",
        "LOW_VISIT_THRESHOLD",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


def test_load_config_dev_defaults() -> None:
    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.rules.max_age == 120
    assert config.registry.base_member_id == 100001
    assert config.registry.low_visit_threshold == 5
    assert config.database.url == "sqlite:///./healthcentre.db"


def test_production_uses_json_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    assert load_config_from_env().logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert load_config_from_env().logging.level == "ERROR"


def test_rule_overrides_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIN_AGE", "18")
    monkeypatch.setenv("HIGH_SYSTOLIC_THRESHOLD", "130")
    monkeypatch.setenv("MAX_WEIGHT", "250.5")

    rules = load_config_from_env().rules

    assert rules.min_age == 18
    assert rules.high_systolic_threshold == 130
    assert rules.max_weight == 250.5
    # Untouched values keep their defaults
    assert rules.max_age == 120


def test_inconsistent_rule_overrides_fail_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIN_AGE", "90")
    monkeypatch.setenv("MAX_AGE", "30")

    with pytest.raises(ValueError, match="age range is inverted"):
        load_config_from_env()


def test_registry_and_database_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BASE_MEMBER_ID", "200001")
    monkeypatch.setenv("LOW_VISIT_THRESHOLD", "3")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("DATABASE_ECHO", "yes")

    config = load_config_from_env()

    assert config.registry.base_member_id == 200001
    assert config.registry.low_visit_threshold == 3
    assert config.database.url == "sqlite:///:memory:"
    assert config.database.echo is True


def test_get_config_cache() -> None:
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache

    reset_config_cache()
    assert get_config() is not c1


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True)
