"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Domain limits overridable without code changes
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from healthcentre.domain.rules import MemberRules

# Load environment variables from .env file
load_dotenv()


class RegistryConfig(BaseModel):
    """Member registry behaviour."""

    base_member_id: int = Field(
        default=100001, gt=0, description="First identifier handed out by an empty registry"
    )
    low_visit_threshold: int = Field(
        default=5, ge=0, description="Members with fewer visits than this count as low-visit"
    )


class DatabaseConfig(BaseModel):
    """Database configuration for the member store."""

    url: str = Field(default="sqlite:///./healthcentre.db", description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Log every SQL statement")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    rules: MemberRules = Field(default_factory=MemberRules)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


# Environment variable -> MemberRules field. Only variables that are set override defaults.
RULE_ENV_VARS: dict[str, str] = {
    "MIN_NAME_LENGTH": "min_name_length",
    "MIN_AGE": "min_age",
    "MAX_AGE": "max_age",
    "MIN_WEIGHT": "min_weight",
    "MAX_WEIGHT": "max_weight",
    "MIN_ADDRESS_LENGTH": "min_address_length",
    "MAX_ADDRESS_LENGTH": "max_address_length",
    "MIN_SYSTOLIC": "min_systolic",
    "MAX_SYSTOLIC": "max_systolic",
    "MIN_DIASTOLIC": "min_diastolic",
    "MAX_DIASTOLIC": "max_diastolic",
    "HIGH_SYSTOLIC_THRESHOLD": "high_systolic_threshold",
    "HIGH_DIASTOLIC_THRESHOLD": "high_diastolic_threshold",
    "LOW_SYSTOLIC_THRESHOLD": "low_systolic_threshold",
    "LOW_DIASTOLIC_THRESHOLD": "low_diastolic_threshold",
}


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    # Rule overrides; pydantic coerces the strings and validates the ranges
    rule_overrides = {
        field: os.environ[name] for name, field in RULE_ENV_VARS.items() if name in os.environ
    }
    rules = MemberRules.model_validate(rule_overrides)

    registry_config = RegistryConfig(
        base_member_id=int(os.getenv("BASE_MEMBER_ID", "100001")),
        low_visit_threshold=int(os.getenv("LOW_VISIT_THRESHOLD", "5")),
    )

    database_config = DatabaseConfig(
        url=os.getenv("DATABASE_URL", "sqlite:///./healthcentre.db"),
        echo=_parse_bool(os.getenv("DATABASE_ECHO"), False),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        rules=rules,
        registry=registry_config,
        database=database_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def reset_config_cache() -> None:
    """Forget the cached configuration so the next get_config() re-reads the environment."""
    get_config.cache_clear()
