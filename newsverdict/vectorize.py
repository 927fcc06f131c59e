from collections import Counter
from typing import Iterable, List

import numpy as np

from newsverdict.bundle import ModelBundle
from newsverdict.preprocess import normalize


def vectorize_tokens(tokens: Iterable[str], bundle: ModelBundle) -> np.ndarray:
    """Raw-count TF-IDF over the bundle vocabulary, L2 normalized.

    Tokens outside the vocabulary are dropped. A text with no known tokens
    gives the all-zero vector.
    """
    features = np.zeros(len(bundle.vocabulary), dtype=np.float64)
    index = bundle.vocabulary_index
    for token, count in Counter(tokens).items():
        idx = index.get(token)
        if idx is not None:
            features[idx] = count * bundle.idf[idx]

    norm = float(np.sqrt(np.dot(features, features)))
    if norm > 0:
        features /= norm
    return features


def vectorize(text: str, bundle: ModelBundle) -> np.ndarray:
    return vectorize_tokens(normalize(text), bundle)


class BundleVectorizer:
    """``transform`` over a list of raw texts, like a fitted TfidfVectorizer."""

    def __init__(self, bundle: ModelBundle):
        self.bundle = bundle

    def get_feature_names_out(self) -> np.ndarray:
        return np.array(self.bundle.vocabulary, dtype=object)

    def transform(self, texts: List[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, len(self.bundle.vocabulary)), dtype=np.float64)
        return np.vstack([vectorize(t, self.bundle) for t in texts])
