"""Model bundle: vocabulary, IDF weights, coefficients and intercept.

A bundle is validated and frozen on construction, then shared read-only by
every classification call. The JSON layout matches ``model_params.json``::

    {"vocabulary": [...], "idf_values": [...],
     "coefficients": [...], "intercept": 0.1}
"""
import json
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, Tuple

import numpy as np


class InvalidModelBundle(ValueError):
    """The model parameters cannot be used for inference."""


def _frozen_floats(values, name: str) -> np.ndarray:
    try:
        arr = np.array(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as e:
        raise InvalidModelBundle(f"{name} must be a sequence of numbers: {e}") from e
    if not np.all(np.isfinite(arr)):
        raise InvalidModelBundle(f"{name} contains non-finite values")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class ModelBundle:
    vocabulary: Tuple[str, ...]
    idf: np.ndarray
    coefficients: np.ndarray
    intercept: float
    vocabulary_index: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.vocabulary, str):
            raise InvalidModelBundle("vocabulary must be a sequence of terms, not a string")
        try:
            vocab = tuple(self.vocabulary)
        except TypeError as e:
            raise InvalidModelBundle(f"vocabulary must be a sequence of terms: {e}") from e
        if not vocab:
            raise InvalidModelBundle("vocabulary is empty")
        if not all(isinstance(term, str) for term in vocab):
            raise InvalidModelBundle("vocabulary terms must be strings")
        index = {term: i for i, term in enumerate(vocab)}
        if len(index) != len(vocab):
            raise InvalidModelBundle("vocabulary contains duplicate terms")

        idf = _frozen_floats(self.idf, "idf")
        coefficients = _frozen_floats(self.coefficients, "coefficients")
        if len(idf) != len(vocab):
            raise InvalidModelBundle(
                f"idf has {len(idf)} values for a vocabulary of {len(vocab)}")
        if len(coefficients) != len(vocab):
            raise InvalidModelBundle(
                f"coefficients has {len(coefficients)} values for a vocabulary of {len(vocab)}")

        try:
            intercept = float(self.intercept)
        except (TypeError, ValueError) as e:
            raise InvalidModelBundle(f"intercept must be a number: {e}") from e
        if not math.isfinite(intercept):
            raise InvalidModelBundle("intercept is not finite")

        # frozen dataclass: normalized values go in through object.__setattr__
        object.__setattr__(self, "vocabulary", vocab)
        object.__setattr__(self, "idf", idf)
        object.__setattr__(self, "coefficients", coefficients)
        object.__setattr__(self, "intercept", intercept)
        object.__setattr__(self, "vocabulary_index", MappingProxyType(index))

    @classmethod
    def create(cls, vocabulary: Sequence[str], idf, coefficients, intercept) -> "ModelBundle":
        return cls(vocabulary, idf, coefficients, intercept)

    def __len__(self) -> int:
        return len(self.vocabulary)


def bundle_from_dict(data: Dict[str, Any]) -> ModelBundle:
    missing = [k for k in ("vocabulary", "idf_values", "coefficients", "intercept") if k not in data]
    if missing:
        raise InvalidModelBundle(f"model parameters missing fields: {missing}")
    for key in ("vocabulary", "idf_values", "coefficients"):
        if not isinstance(data[key], (list, tuple)):
            raise InvalidModelBundle(f"{key} must be a list, got {type(data[key]).__name__}")
    intercept = data["intercept"]
    # scikit-learn exports intercept_ as a one-element array
    if isinstance(intercept, (list, tuple)):
        if len(intercept) != 1:
            raise InvalidModelBundle("intercept must be a single number")
        intercept = intercept[0]
    coefficients = data["coefficients"]
    if isinstance(coefficients, (list, tuple)) and len(coefficients) == 1 \
            and isinstance(coefficients[0], (list, tuple)):
        coefficients = coefficients[0]
    return ModelBundle.create(data["vocabulary"], data["idf_values"], coefficients, intercept)


def bundle_to_dict(bundle: ModelBundle) -> Dict[str, Any]:
    return {
        "vocabulary": list(bundle.vocabulary),
        "idf_values": bundle.idf.tolist(),
        "coefficients": bundle.coefficients.tolist(),
        "intercept": bundle.intercept,
    }


def load_bundle(path: str) -> ModelBundle:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidModelBundle(f"{path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise InvalidModelBundle(f"{path} is not UTF-8 text: {e}") from e
    except IsADirectoryError as e:
        raise InvalidModelBundle(f"{path} is a directory") from e
    if not isinstance(data, dict):
        raise InvalidModelBundle(f"{path} does not contain a JSON object")
    return bundle_from_dict(data)


def save_bundle(bundle: ModelBundle, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(bundle_to_dict(bundle), f)


def bundle_from_pipeline(pipeline) -> ModelBundle:
    """Export a fitted ``tfidf`` + ``clf`` scikit-learn pipeline.

    Only configurations the inference core reproduces exactly are accepted:
    unigram raw-count TF-IDF with L2 norm, feeding a binary logistic regression.
    """
    steps = getattr(pipeline, "named_steps", {})
    vec = steps.get("tfidf")
    clf = steps.get("clf")
    if vec is None or clf is None:
        raise InvalidModelBundle("pipeline must have 'tfidf' and 'clf' steps")
    if not hasattr(vec, "idf_") or not hasattr(clf, "coef_"):
        raise InvalidModelBundle("pipeline is not fitted")

    problems = []
    if vec.norm != "l2":
        problems.append(f"norm={vec.norm!r}")
    if not vec.use_idf:
        problems.append("use_idf=False")
    if vec.sublinear_tf:
        problems.append("sublinear_tf=True")
    if vec.binary:
        problems.append("binary=True")
    if tuple(vec.ngram_range) != (1, 1):
        problems.append(f"ngram_range={vec.ngram_range}")
    if vec.analyzer != "word":
        problems.append(f"analyzer={vec.analyzer!r}")
    if clf.coef_.shape[0] != 1:
        problems.append(f"{clf.coef_.shape[0]} coefficient rows (binary classifier required)")
    # the single coefficient row scores classes_[1], which must be 1 = fake
    classes = list(getattr(clf, "classes_", []))
    if classes != [0, 1]:
        problems.append(f"classes_={classes} (labels must be 0=real, 1=fake)")
    if problems:
        raise InvalidModelBundle("unsupported pipeline: " + ", ".join(problems))

    vocabulary = vec.get_feature_names_out()
    return ModelBundle.create(
        [str(t) for t in vocabulary],
        vec.idf_,
        clf.coef_[0],
        clf.intercept_[0],
    )
