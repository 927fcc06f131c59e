import argparse
import json
import os
import sys

import joblib

from newsverdict.bundle import InvalidModelBundle, bundle_from_pipeline, save_bundle


def write_meta(bundle, pipeline_path: str, out_path: str) -> str:
    meta = {
        "source_pipeline": pipeline_path,
        "vocabulary_size": len(bundle.vocabulary),
        "intercept": bundle.intercept,
        "classes": {"0": "REAL", "1": "FAKE"},
        "vectorizer": {"tf": "raw_count", "norm": "l2", "ngram_range": [1, 1]},
    }
    meta_path = os.path.splitext(out_path)[0] + ".meta.json"
    with open(meta_path, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)
    return meta_path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export a trained TF-IDF + LogisticRegression pipeline to a model bundle")
    parser.add_argument("--pipeline", required=True, help="Path to a joblib-pickled sklearn Pipeline (tfidf, clf)")
    parser.add_argument("--out", default=os.path.join("models", "model_params.json"),
                        help="Output path for the model_params.json bundle")
    parser.add_argument("--no-meta", action="store_true", help="Skip writing the .meta.json sidecar")
    args = parser.parse_args(argv)

    pipeline = joblib.load(args.pipeline)
    try:
        bundle = bundle_from_pipeline(pipeline)
    except InvalidModelBundle as e:
        print(f"Cannot export {args.pipeline}: {e}", file=sys.stderr)
        return 2

    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    save_bundle(bundle, args.out)
    print(f"Bundle with {len(bundle.vocabulary)} terms saved to {args.out}")
    if not args.no_meta:
        meta_path = write_meta(bundle, args.pipeline, args.out)
        print(f"Stored metadata at {meta_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
