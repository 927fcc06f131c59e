import argparse
import json
import os
import sys

from newsverdict.bundle import InvalidModelBundle, load_bundle
from newsverdict.classify import explain, predict
from newsverdict.preprocess import STOPWORDS, normalize
from newsverdict.stemmer import PorterStemmer
from newsverdict.vectorize import vectorize_tokens

DEFAULT_MODEL = os.path.join("models", "model_params.json")
SPOT_CHECK_WORDS = ["reporting", "reported", "reporter", "reports", "additionally", "additional"]


def debug_stage(stage, value):
    if isinstance(value, str):
        print(f"[DEBUG] {stage}: {len(value)} chars")
    else:
        print(f"[DEBUG] {stage}: {len(value)} words, first 20: {value[:20]}")


def non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classify news text with an exported model bundle")
    parser.add_argument("--model", default=os.getenv("NEWSVERDICT_MODEL", DEFAULT_MODEL),
                        help="Path to model_params.json (env NEWSVERDICT_MODEL if not provided)")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="News text to classify")
    source.add_argument("--file", help="Read the news text from this file")
    parser.add_argument("--proba", action="store_true", help="Show prediction probabilities")
    parser.add_argument("--explain", type=non_negative_int, default=0, metavar="N",
                        help="Show the N features contributing most to the score")
    parser.add_argument("--uncertain-below", type=float, default=0.6,
                        help="Report 'uncertain' when confidence is below this value")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--debug", action="store_true", help="Show preprocessing stages and stemmer spot checks")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        bundle = load_bundle(args.model)
    except FileNotFoundError:
        print(f"Model file not found: {args.model}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Cannot read model file {args.model}: {e.strerror or e}", file=sys.stderr)
        return 2
    except InvalidModelBundle as e:
        print(f"Invalid model bundle {args.model}: {e}", file=sys.stderr)
        return 2

    if args.file:
        # undecodable bytes become separators like any other non-letter
        try:
            with open(args.file, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as e:
            print(f"Cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
            return 2
    else:
        text = args.text

    if args.debug:
        print(f"[DEBUG] Raw input: {len(text)} chars")
        tokens = normalize(text, trace=debug_stage)
        stemmer = PorterStemmer()
        for word in SPOT_CHECK_WORDS:
            print(f"[DEBUG]   {word} -> {stemmer.stem(word)} (stopword: {word in STOPWORDS})")
        print(f"[DEBUG] Vocabulary size: {len(bundle.vocabulary)}")
    else:
        tokens = normalize(text)

    features = vectorize_tokens(tokens, bundle)
    prediction = predict(features, bundle)
    verdict = prediction.verdict(args.uncertain_below)

    if args.json:
        out = prediction.as_dict()
        out["verdict"] = verdict
        if args.explain:
            breakdown = explain(features, bundle, top=args.explain)
            out["non_zero_features"] = breakdown.non_zero_features
            out["top_features"] = [
                {"term": c.term, "weight": c.weight, "coefficient": c.coefficient,
                 "contribution": c.contribution}
                for c in breakdown.top_features
            ]
        print(json.dumps(out, indent=2))
        return 0

    if args.proba:
        print(f"{prediction.label_name} [{verdict}] (FAKE={prediction.probability:.3f}, "
              f"REAL={prediction.real_probability:.3f}, confidence={prediction.confidence:.3f})")
    else:
        print(prediction.label_name)

    if args.explain:
        breakdown = explain(features, bundle, top=args.explain)
        print(f"Non-zero features: {breakdown.non_zero_features}")
        for c in breakdown.top_features:
            print(f"  {c.term:<20} | TF-IDF: {c.weight:.8f} | Coef: {c.coefficient:+.8f} "
                  f"| Contrib: {c.contribution:+.8f}")
        print(f"Intercept: {breakdown.intercept:.8f}")
        print(f"Total feature contribution: {breakdown.total_contribution:.8f}")
        print(f"Raw score (before sigmoid): {breakdown.score:.8f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
