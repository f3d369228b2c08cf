"""Configuration for the analytics engines.

Settings are layered: built-in defaults, then an optional YAML file,
then ``PULSE_SRE_*`` environment variables. Example file::

    log_level: INFO
    detection:
      threshold: 2.5
      min_samples: 10
    slos:
      api-availability:
        sli: availability
        target: 99.5
        window: 30d
        budget_policy:
          - {threshold: 50, action: notify}
          - {threshold: 90, action: page}
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from pulse_sre.anomaly.detector import AnomalyDetector, DetectorConfig
from pulse_sre.slo.objectives import SLO
from pulse_sre.slo.spec import BudgetRuleSpec, SLOSpec, parse_window
from pulse_sre.slo.tracker import MAX_HISTORY, SLOTracker
from pulse_sre.slo.validator import validate_spec
from pulse_sre.telemetry import PulseMetrics

logger = logging.getLogger(__name__)

ENV_PREFIX = "PULSE_SRE_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Raised when settings cannot be loaded or fail validation."""


class DetectionSettings(BaseModel):
    """Anomaly detector settings."""

    enabled: bool = True
    threshold: float = Field(default=2.0, gt=0, description="Z-score threshold")
    min_samples: int = Field(default=10, ge=1, description="Warm-up observations")
    window_capacity: int = Field(default=100, gt=0, description="Rolling window size")
    horizon_hours: float = Field(default=1.0, ge=0, description="Prediction horizon")
    learning_period: str = Field(default="24h")


class SLOConfig(BaseModel):
    """An SLO declared in the settings file, keyed by its name."""

    description: str = ""
    sli: str = "generic"
    target: float = 99.0
    window: str = "30d"
    budget_policy: list[BudgetRuleSpec] = Field(default_factory=list)

    def to_spec(self, name: str) -> SLOSpec:
        return SLOSpec(name=name, **self.model_dump())


class Settings(BaseModel):
    """Top-level settings."""

    log_level: str = "INFO"
    max_history: int = Field(default=MAX_HISTORY, gt=0)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    slos: dict[str, SLOConfig] = Field(default_factory=dict)

    def detector_config(self) -> DetectorConfig:
        d = self.detection
        return DetectorConfig(
            threshold=d.threshold,
            window_capacity=d.window_capacity,
            min_samples=d.min_samples,
            horizon=timedelta(hours=d.horizon_hours),
            window=parse_window(d.learning_period),
            enabled=d.enabled,
        )

    def slo_specs(self) -> list[SLOSpec]:
        return [cfg.to_spec(name) for name, cfg in self.slos.items()]

    def slo_definitions(self) -> list[SLO]:
        return [spec.to_slo() for spec in self.slo_specs()]


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got '{raw}'")


def _read_file(path: str | Path) -> dict[str, Any]:
    if ".." in Path(path).parts:
        raise ConfigError("invalid config path: path traversal detected")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to load config from file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def _apply_env(data: dict[str, Any], env: Mapping[str, str]) -> None:
    detection = data.setdefault("detection", {}) or {}
    data["detection"] = detection

    enabled = env.get(f"{ENV_PREFIX}DETECTION_ENABLED")
    if enabled is not None:
        detection["enabled"] = _parse_bool(f"{ENV_PREFIX}DETECTION_ENABLED", enabled)

    threshold = env.get(f"{ENV_PREFIX}DETECTION_THRESHOLD")
    if threshold is not None:
        try:
            detection["threshold"] = float(threshold)
        except ValueError:
            raise ConfigError(
                f"{ENV_PREFIX}DETECTION_THRESHOLD must be a number, got '{threshold}'"
            ) from None

    log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level is not None:
        data["log_level"] = log_level


def _validate(settings: Settings) -> None:
    if settings.log_level.upper() not in _LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
    try:
        parse_window(settings.detection.learning_period)
    except ValueError as exc:
        raise ConfigError(f"detection.learning_period: {exc}") from exc

    for spec in settings.slo_specs():
        problems = [e for e in validate_spec(spec) if e.severity == "error"]
        if problems:
            first = problems[0]
            raise ConfigError(f"slos.{spec.name}.{first.field}: {first.message}")


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, an optional YAML file and the environment.

    Raises:
        ConfigError: If the file cannot be read or any value is invalid.
    """
    data = _read_file(path) if path is not None else {}
    _apply_env(data, os.environ if env is None else env)

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    _validate(settings)
    logger.debug(
        "Loaded settings: %d SLOs, detection threshold %.2f",
        len(settings.slos), settings.detection.threshold,
    )
    return settings


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure root logging for processes embedding the engines."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_detector(settings: Settings, telemetry: PulseMetrics | None = None) -> AnomalyDetector:
    return AnomalyDetector(settings.detector_config(), telemetry=telemetry)


def build_tracker(settings: Settings, telemetry: PulseMetrics | None = None) -> SLOTracker:
    """Create a tracker with every SLO declared in *settings* registered."""
    tracker = SLOTracker(max_history=settings.max_history, telemetry=telemetry)
    for slo in settings.slo_definitions():
        tracker.add_slo(slo)
    return tracker
