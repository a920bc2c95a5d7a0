"""Parameters, hyperparameters and the flat JSON record of the EOS classifier."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import math
from pathlib import Path
from typing import Any, Mapping

REQUIRED_FIELDS = ("b", "w1", "w2", "w3")


class ModelConfigurationError(ValueError):
    """A model record is malformed or lacks a required field."""


class EmptyTrainingSetError(ValueError):
    """Training or loss evaluation was requested on zero examples."""


@dataclass(frozen=True)
class EarlyStopping:
    """Stop when the loss has not improved by more than `min_delta` for more
    than `patience` consecutive epochs."""

    enabled: bool = True
    patience: int = 2000
    min_delta: float = 1e-6

    def validate(self) -> None:
        if self.patience < 0:
            raise ValueError("patience must be non-negative.")
        if self.min_delta < 0:
            raise ValueError("min_delta must be non-negative.")


@dataclass(frozen=True)
class TrainingConfig:
    """Hyperparameters for full-batch gradient descent.

    Tuning notes:
    - `l2_lambda` penalizes the three weights only, never the bias.
    - `convergence_tolerance=None` disables the plateau check, so training
      ends by early stopping or after `max_epochs`.
    """

    learning_rate: float = 0.01
    max_epochs: int = 10000
    l2_lambda: float = 0.0
    early_stopping: EarlyStopping = field(default_factory=EarlyStopping)
    convergence_tolerance: float | None = None
    log_every: int = 500

    def validate(self) -> None:
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be positive.")
        if self.max_epochs < 1:
            raise ValueError("max_epochs must be at least 1.")
        if self.l2_lambda < 0:
            raise ValueError("l2_lambda must be non-negative.")
        if self.convergence_tolerance is not None and self.convergence_tolerance <= 0:
            raise ValueError("convergence_tolerance must be positive or None.")
        if self.log_every < 1:
            raise ValueError("log_every must be at least 1.")
        self.early_stopping.validate()


@dataclass(frozen=True)
class ModelParameters:
    """Bias and feature weights, plus the hyperparameters they were fit with."""

    b: float = 0.0
    w1: float = 0.0
    w2: float = 0.0
    w3: float = 0.0
    learning_rate: float = TrainingConfig.learning_rate
    l2_lambda: float = TrainingConfig.l2_lambda

    @property
    def weights(self) -> tuple[float, float, float]:
        return (self.w1, self.w2, self.w3)

    def to_record(self, config: TrainingConfig | None = None) -> dict[str, Any]:
        record: dict[str, Any] = {
            "b": self.b,
            "w1": self.w1,
            "w2": self.w2,
            "w3": self.w3,
            "learningRate": self.learning_rate,
            "lambdaL2": self.l2_lambda,
        }
        if config is not None:
            record["maxEpochs"] = config.max_epochs
            record["patience"] = config.early_stopping.patience
            record["minDelta"] = config.early_stopping.min_delta
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ModelParameters":
        if not isinstance(record, Mapping):
            raise ModelConfigurationError("Model record must be a JSON object.")
        missing = [name for name in REQUIRED_FIELDS if name not in record]
        if missing:
            raise ModelConfigurationError(
                f"Model record is missing required field(s): {', '.join(missing)}."
            )
        values = {name: _read_float(record, name) for name in REQUIRED_FIELDS}
        learning_rate = TrainingConfig.learning_rate
        if "learningRate" in record:
            learning_rate = _read_float(record, "learningRate")
        l2_lambda = TrainingConfig.l2_lambda
        if "lambdaL2" in record:
            l2_lambda = _read_float(record, "lambdaL2")
        return cls(learning_rate=learning_rate, l2_lambda=l2_lambda, **values)


def _read_float(record: Mapping[str, Any], name: str) -> float:
    raw = record[name]
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ModelConfigurationError(f"Model field '{name}' must be a number, got {raw!r}.")
    value = float(raw)
    if not math.isfinite(value):
        raise ModelConfigurationError(f"Model field '{name}' must be finite, got {value}.")
    return value


def config_from_record(record: Mapping[str, Any]) -> TrainingConfig:
    """Rebuild the training configuration stored next to the parameters.

    Absent optional fields fall back to `TrainingConfig` defaults.
    """

    defaults = TrainingConfig()
    stopping = defaults.early_stopping
    try:
        config = TrainingConfig(
            learning_rate=float(record.get("learningRate", defaults.learning_rate)),
            max_epochs=int(record.get("maxEpochs", defaults.max_epochs)),
            l2_lambda=float(record.get("lambdaL2", defaults.l2_lambda)),
            early_stopping=EarlyStopping(
                enabled=stopping.enabled,
                patience=int(record.get("patience", stopping.patience)),
                min_delta=float(record.get("minDelta", stopping.min_delta)),
            ),
        )
        config.validate()
    except (TypeError, ValueError) as exc:
        raise ModelConfigurationError(f"Invalid hyperparameters in model record: {exc}") from exc
    return config


def write_record(path: str | Path, record: Mapping[str, Any]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as fh:
        json.dump(dict(record), fh, indent=2)


def read_record(path: str | Path) -> dict[str, Any]:
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    try:
        with model_path.open("r", encoding="utf-8") as fh:
            record = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ModelConfigurationError(f"Model file {model_path} is not valid JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise ModelConfigurationError(f"Model file {model_path} must contain a JSON object.")
    return record
