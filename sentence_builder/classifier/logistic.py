"""Logistic-regression end-of-sentence classifier over three log-odds features.

Features (all logits, see `sentence_builder.prediction.eos.safe_logit`):
- x1: P(EOS | last two or three words), with backoff
- x2: P(EOS | last word)
- x3: P(EOS | sentence length so far)

Training is full-batch gradient descent on the mean binary cross-entropy:
- every epoch computes all gradients first and then updates every parameter
- the L2 penalty `l2_lambda * w` is added to the weight gradients only
- the loss is evaluated after the update, with probabilities clamped to
  `[1e-12, 1 - 1e-12]`

Training ends in one of three states:
- EARLY_STOPPED: no improvement above `min_delta` for more than `patience` epochs
- CONVERGED: the loss moved less than `convergence_tolerance` (when enabled)
- EXHAUSTED: `max_epochs` ran out
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from pathlib import Path
from typing import Iterable, NamedTuple

import numpy as np
from numpy.typing import NDArray

from sentence_builder.classifier.params import (
    EmptyTrainingSetError,
    ModelParameters,
    TrainingConfig,
    config_from_record,
    read_record,
    write_record,
)

SIGMOID_CLAMP = 40.0
LOSS_EPSILON = 1e-12

logger = logging.getLogger(__name__)


class TrainingExample(NamedTuple):
    x1: float
    x2: float
    x3: float
    label: int


class TrainingState(str, Enum):
    UNTRAINED = "untrained"
    LOADED = "loaded"
    TRAINING = "training"
    CONVERGED = "converged"
    EARLY_STOPPED = "early_stopped"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class FitResult:
    """Summary of one `fit` call."""

    state: TrainingState
    epochs_run: int
    final_loss: float
    best_loss: float
    loss_history: tuple[float, ...]


def sigmoid(z: float) -> float:
    """Logistic function, saturated to exactly 0 or 1 beyond +/-40."""

    if z < -SIGMOID_CLAMP:
        return 0.0
    if z > SIGMOID_CLAMP:
        return 1.0
    return 1.0 / (1.0 + math.exp(-z))


def _sigmoid_array(z: NDArray[np.float64]) -> NDArray[np.float64]:
    clipped = np.clip(z, -SIGMOID_CLAMP, SIGMOID_CLAMP)
    probs = 1.0 / (1.0 + np.exp(-clipped))
    probs = np.where(z < -SIGMOID_CLAMP, 0.0, probs)
    return np.where(z > SIGMOID_CLAMP, 1.0, probs)


def _stack_examples(
    examples: Iterable[TrainingExample | tuple[float, float, float, int]],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    rows = [tuple(example) for example in examples]
    if not rows:
        raise EmptyTrainingSetError("At least one training example is required.")
    data = np.asarray(rows, dtype=np.float64)
    if data.ndim != 2 or data.shape[1] != 4:
        raise ValueError(f"Examples must be (x1, x2, x3, label) rows, got shape {data.shape}.")
    if not np.all(np.isfinite(data)):
        raise ValueError("Examples must contain only finite values.")
    labels = data[:, 3]
    if np.any((labels != 0.0) & (labels != 1.0)):
        raise ValueError("Example labels must be 0 or 1.")
    return data[:, :3], labels


def _mean_cross_entropy(probs: NDArray[np.float64], labels: NDArray[np.float64]) -> float:
    clipped = np.clip(probs, LOSS_EPSILON, 1.0 - LOSS_EPSILON)
    losses = -(labels * np.log(clipped) + (1.0 - labels) * np.log(1.0 - clipped))
    return float(np.mean(losses))


class EosClassifier:
    """Binary classifier `sigmoid(b + w1*x1 + w2*x2 + w3*x3)`."""

    def __init__(
        self,
        config: TrainingConfig | None = None,
        parameters: ModelParameters | None = None,
    ) -> None:
        self.config = config if config is not None else TrainingConfig()
        self.config.validate()
        if parameters is None:
            parameters = ModelParameters(
                learning_rate=self.config.learning_rate,
                l2_lambda=self.config.l2_lambda,
            )
        self._parameters = parameters
        self.state = TrainingState.UNTRAINED

    @property
    def parameters(self) -> ModelParameters:
        return self._parameters

    def predict(self, x1: float, x2: float, x3: float) -> float:
        p = self._parameters
        return sigmoid(p.b + p.w1 * x1 + p.w2 * x2 + p.w3 * x3)

    def predict_many(self, features: NDArray[np.float64]) -> NDArray[np.float64]:
        """Vectorized `predict` over an `(n, 3)` feature matrix."""

        features = np.asarray(features, dtype=np.float64)
        if features.ndim != 2 or features.shape[1] != 3:
            raise ValueError(f"features must have shape (n, 3), got {features.shape}.")
        p = self._parameters
        return _sigmoid_array(p.b + features @ np.asarray(p.weights, dtype=np.float64))

    def total_loss(
        self, examples: Iterable[TrainingExample | tuple[float, float, float, int]]
    ) -> float:
        """Mean binary cross-entropy of the current parameters."""

        features, labels = _stack_examples(examples)
        return _mean_cross_entropy(self.predict_many(features), labels)

    def fit(
        self, examples: Iterable[TrainingExample | tuple[float, float, float, int]]
    ) -> FitResult:
        """Fit bias and weights by full-batch gradient descent.

        Starts from the current parameters, so a loaded model can be refined.
        """

        features, labels = _stack_examples(examples)
        config = self.config
        stopping = config.early_stopping
        n = float(features.shape[0])

        b = self._parameters.b
        weights = np.asarray(self._parameters.weights, dtype=np.float64)

        self.state = TrainingState.TRAINING
        best_loss = math.inf
        previous_loss = math.inf
        epochs_since_improve = 0
        history: list[float] = []
        final_state = TrainingState.EXHAUSTED
        loss = math.nan

        for epoch in range(config.max_epochs):
            probs = _sigmoid_array(b + features @ weights)
            error = probs - labels

            grad_b = float(np.sum(error)) / n
            grad_w = (features.T @ error) / n + config.l2_lambda * weights

            b -= config.learning_rate * grad_b
            weights = weights - config.learning_rate * grad_w

            loss = _mean_cross_entropy(_sigmoid_array(b + features @ weights), labels)
            history.append(loss)

            if epoch % config.log_every == 0:
                logger.info("Epoch %d - loss=%.8f", epoch, loss)

            if stopping.enabled:
                if best_loss - loss > stopping.min_delta:
                    best_loss = loss
                    epochs_since_improve = 0
                else:
                    epochs_since_improve += 1
                    if epochs_since_improve > stopping.patience:
                        logger.info("Early stopping triggered at epoch %d", epoch)
                        final_state = TrainingState.EARLY_STOPPED
                        break
            else:
                best_loss = min(best_loss, loss)

            if (
                config.convergence_tolerance is not None
                and abs(previous_loss - loss) < config.convergence_tolerance
            ):
                logger.info("Converged at epoch %d (loss=%.8f)", epoch, loss)
                final_state = TrainingState.CONVERGED
                break
            previous_loss = loss

        self._parameters = ModelParameters(
            b=float(b),
            w1=float(weights[0]),
            w2=float(weights[1]),
            w3=float(weights[2]),
            learning_rate=config.learning_rate,
            l2_lambda=config.l2_lambda,
        )
        self.state = final_state
        return FitResult(
            state=final_state,
            epochs_run=len(history),
            final_loss=loss,
            best_loss=min(best_loss, loss),
            loss_history=tuple(history),
        )

    def save_model(self, path: str | Path) -> None:
        logger.info("Saving model at %s", path)
        write_record(path, self._parameters.to_record(self.config))

    @classmethod
    def load_model(cls, path: str | Path) -> "EosClassifier":
        """Load a classifier saved by `save_model`.

        Raises:
            FileNotFoundError: the file does not exist.
            ModelConfigurationError: the record is malformed or lacks b/w1/w2/w3.
        """

        record = read_record(path)
        parameters = ModelParameters.from_record(record)
        model = cls(config=config_from_record(record), parameters=parameters)
        model.state = TrainingState.LOADED
        return model

    def __repr__(self) -> str:
        p = self._parameters
        return (
            f"EosClassifier(b={p.b:.6f}, w1={p.w1:.6f}, w2={p.w2:.6f}, w3={p.w3:.6f}, "
            f"state={self.state.value})"
        )
