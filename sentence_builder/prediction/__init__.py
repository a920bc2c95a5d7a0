"""End-of-sentence prediction for partial token sequences."""

from sentence_builder.prediction.eos import EosPredictor, eos_features, safe_logit
from sentence_builder.prediction.features import build_training_examples

__all__ = ["EosPredictor", "build_training_examples", "eos_features", "safe_logit"]
