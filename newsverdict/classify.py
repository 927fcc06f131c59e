"""Logistic-regression scoring over bundle features.

Label convention follows the training data: 1 = fake, 0 = real.
``Prediction.probability`` is the probability of the fake class.
"""
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from newsverdict.bundle import ModelBundle
from newsverdict.vectorize import vectorize

FAKE = 1
REAL = 0
LABEL_NAMES = {FAKE: "FAKE", REAL: "REAL"}


def sigmoid(score: float) -> float:
    # two branches so exp never overflows for large |score|
    if score >= 0:
        return 1.0 / (1.0 + math.exp(-score))
    z = math.exp(score)
    return z / (1.0 + z)


@dataclass(frozen=True)
class Prediction:
    label: int
    probability: float
    score: float

    @property
    def confidence(self) -> float:
        return max(self.probability, 1.0 - self.probability)

    @property
    def real_probability(self) -> float:
        return 1.0 - self.probability

    @property
    def label_name(self) -> str:
        return LABEL_NAMES[self.label]

    def verdict(self, uncertain_below: float = 0.6) -> str:
        if self.confidence < uncertain_below:
            return "uncertain"
        return "fake" if self.label == FAKE else "reliable"

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "label_name": self.label_name,
            "probability": self.probability,
            "real_probability": self.real_probability,
            "confidence": self.confidence,
            "score": self.score,
        }


def _check_shape(features, bundle: ModelBundle) -> np.ndarray:
    x = np.asarray(features, dtype=np.float64)
    if x.ndim != 1 or x.shape[0] != len(bundle.vocabulary):
        raise ValueError(
            f"expected {len(bundle.vocabulary)} features, got shape {x.shape}")
    return x


def decision_score(features: Sequence[float], bundle: ModelBundle) -> float:
    x = _check_shape(features, bundle)
    return bundle.intercept + float(np.dot(x, bundle.coefficients))


def predict(features: Sequence[float], bundle: ModelBundle) -> Prediction:
    score = decision_score(features, bundle)
    probability = sigmoid(score)
    label = FAKE if probability > 0.5 else REAL
    return Prediction(label=label, probability=probability, score=score)


def classify(text: str, bundle: ModelBundle) -> Prediction:
    return predict(vectorize(text, bundle), bundle)


@dataclass(frozen=True)
class Contribution:
    term: str
    index: int
    weight: float
    coefficient: float

    @property
    def contribution(self) -> float:
        return self.weight * self.coefficient


@dataclass(frozen=True)
class Breakdown:
    intercept: float
    total_contribution: float
    score: float
    non_zero_features: int
    top_features: List[Contribution]


def explain(features: Sequence[float], bundle: ModelBundle, top: int | None = 20) -> Breakdown:
    """Per-term contributions to the score, heaviest TF-IDF weights first."""
    if top is not None and top < 0:
        raise ValueError(f"top must be non-negative, got {top}")
    x = _check_shape(features, bundle)
    nz = np.flatnonzero(x)
    contributions = [
        Contribution(bundle.vocabulary[i], int(i), float(x[i]), float(bundle.coefficients[i]))
        for i in nz
    ]
    contributions.sort(key=lambda c: (-c.weight, c.index))
    total = float(np.dot(x, bundle.coefficients))
    return Breakdown(
        intercept=bundle.intercept,
        total_contribution=total,
        score=bundle.intercept + total,
        non_zero_features=len(nz),
        top_features=contributions[:top] if top is not None else contributions,
    )
