"""Trainable end-of-sentence classifier and its persisted parameters."""

from sentence_builder.classifier.logistic import (
    EosClassifier,
    FitResult,
    TrainingExample,
    TrainingState,
    sigmoid,
)
from sentence_builder.classifier.params import (
    EarlyStopping,
    EmptyTrainingSetError,
    ModelConfigurationError,
    ModelParameters,
    TrainingConfig,
)

__all__ = [
    "EarlyStopping",
    "EmptyTrainingSetError",
    "EosClassifier",
    "FitResult",
    "ModelConfigurationError",
    "ModelParameters",
    "TrainingConfig",
    "TrainingExample",
    "TrainingState",
    "sigmoid",
]
