"""Nested pydantic-settings configuration for ndc-calc.

Each concern reads its own ``NDC_CALC_<GROUP>_*`` env vars and is aggregated
in ``AppSettings``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class QuantityConfig(BaseSettings):
    """Quantity calculator limits.

    Env vars use ``NDC_CALC_QUANTITY_`` prefix::

        export NDC_CALC_QUANTITY_MAX_DAYS_SUPPLY=90
    """

    model_config = {"env_prefix": "NDC_CALC_QUANTITY_"}

    max_days_supply: int = Field(default=365, ge=1)
    long_supply_warning_days: int = Field(default=180, ge=1)
    volume_decimal_places: int = Field(default=2, ge=0, le=6)
    default_insulin_strength: int = Field(default=100, gt=0)


class SelectionConfig(BaseSettings):
    """Package selector configuration.

    Env vars use ``NDC_CALC_SELECTION_`` prefix.
    """

    model_config = {"env_prefix": "NDC_CALC_SELECTION_"}

    max_results: int = Field(default=5, ge=1, le=50)


class WarningConfig(BaseSettings):
    """Warning generator thresholds.

    Env vars use ``NDC_CALC_WARNINGS_`` prefix.
    """

    model_config = {"env_prefix": "NDC_CALC_WARNINGS_"}

    low_confidence_threshold: float = Field(default=0.75, ge=0.0, le=1.0)
    overfill_escalation_percent: float = Field(default=10.0, ge=0.0)


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``NDC_CALC_OBSERVABILITY_`` prefix.  ``json_logs`` left unset
    means JSON lines when stderr is not a TTY.
    """

    model_config = {"env_prefix": "NDC_CALC_OBSERVABILITY_"}

    log_level: str = "INFO"
    json_logs: Optional[bool] = None


class AppSettings(BaseSettings):
    """Top-level settings aggregating all sub-configs."""

    quantity: QuantityConfig = Field(default_factory=QuantityConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    warnings: WarningConfig = Field(default_factory=WarningConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
