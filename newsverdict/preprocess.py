import re
from typing import Any, Callable, List

import pandas as pd

from newsverdict.stemmer import PorterStemmer

NON_ALPHA = re.compile(r'[^a-zA-Z]')

# NLTK english stopword list; the contractions never survive NON_ALPHA but
# are kept so the set matches the one the vocabulary was built with.
STOPWORDS = frozenset([
    'i', 'me', 'my', 'myself', 'we', 'our', 'ours', 'ourselves', 'you', "you're",
    "you've", "you'll", "you'd", 'your', 'yours', 'yourself', 'yourselves', 'he',
    'him', 'his', 'himself', 'she', "she's", 'her', 'hers', 'herself', 'it', "it's",
    'its', 'itself', 'they', 'them', 'their', 'theirs', 'themselves', 'what', 'which',
    'who', 'whom', 'this', 'that', "that'll", 'these', 'those', 'am', 'is', 'are',
    'was', 'were', 'be', 'been', 'being', 'have', 'has', 'had', 'having', 'do',
    'does', 'did', 'doing', 'a', 'an', 'the', 'and', 'but', 'if', 'or', 'because',
    'as', 'until', 'while', 'of', 'at', 'by', 'for', 'with', 'about', 'against',
    'between', 'into', 'through', 'during', 'before', 'after', 'above', 'below',
    'to', 'from', 'up', 'down', 'in', 'out', 'on', 'off', 'over', 'under', 'again',
    'further', 'then', 'once', 'here', 'there', 'when', 'where', 'why', 'how', 'all', 'any',
    'both', 'each', 'few', 'more', 'most', 'other', 'some', 'such', 'no', 'nor',
    'not', 'only', 'own', 'same', 'so', 'than', 'too', 'very', 's', 't', 'can',
    'will', 'just', 'don', "don't", 'should', "should've", 'now', 'd', 'll', 'm',
    'o', 're', 've', 'y', 'ain', 'aren', "aren't", 'couldn', "couldn't", 'didn',
    "didn't", 'doesn', "doesn't", 'hadn', "hadn't", 'hasn', "hasn't", 'haven',
    "haven't", 'isn', "isn't", 'ma', 'mightn', "mightn't", 'mustn', "mustn't",
    'needn', "needn't", 'shan', "shan't", 'shouldn', "shouldn't", 'wasn', "wasn't",
    'weren', "weren't", 'won', "won't", 'wouldn', "wouldn't",
])

_stemmer = PorterStemmer()


def normalize(text: str, trace: Callable[[str, Any], None] | None = None,
              stemmer: PorterStemmer | None = None) -> List[str]:
    """Turn raw text into the ordered list of stemmed, non-stopword tokens."""
    if not isinstance(text, str):
        return []
    stemmer = stemmer or _stemmer

    t = NON_ALPHA.sub(' ', text).lower()
    if trace:
        trace("alpha_only", t)
    words = t.split()
    if trace:
        trace("split", words)
    words = [w for w in words if w not in STOPWORDS]
    if trace:
        trace("stopwords_removed", words)
    tokens = [stemmer.stem(w) for w in words]
    if trace:
        trace("stemmed", tokens)
    return tokens


def preprocess_text(text: str) -> str:
    return ' '.join(normalize(text))


def load_dataset(path: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    if 'text' not in df.columns or 'label' not in df.columns:
        raise ValueError("CSV must contain text and label columns")
    df = df.dropna(subset=['text', 'label'])
    return df


def split_features_labels(df: pd.DataFrame):
    return df['text'].tolist(), df['label'].astype(int).tolist()
