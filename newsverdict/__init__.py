"""Fake news text classifier: Porter stemming, TF-IDF and logistic regression
over an exported model bundle.
"""

from newsverdict.bundle import InvalidModelBundle, ModelBundle, load_bundle
from newsverdict.classify import Prediction, classify, predict
from newsverdict.preprocess import normalize
from newsverdict.stemmer import PorterStemmer, stem
from newsverdict.vectorize import vectorize

__all__ = [
    "InvalidModelBundle", "ModelBundle", "load_bundle",
    "Prediction", "classify", "predict",
    "normalize", "PorterStemmer", "stem", "vectorize",
]
__version__ = "0.1.0"
