import argparse
from pathlib import Path
import sys
import numpy as np
from sklearn.metrics import average_precision_score, classification_report

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from newsverdict.bundle import load_bundle  # noqa: E402
from newsverdict.classify import FAKE, LABEL_NAMES, classify  # noqa: E402
from newsverdict.preprocess import load_dataset, split_features_labels  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Evaluate an exported model bundle on a CSV")
    parser.add_argument("--model", required=True, help="Path to model_params.json")
    parser.add_argument("--data", required=True, help="CSV with text,label columns (1=fake, 0=real)")
    parser.add_argument("--limit", type=int, default=None, help="Optionally limit number of rows for speed")
    parser.add_argument("--show-mis", action="store_true", help="Show misclassified examples")
    parser.add_argument("--top", type=int, default=15, help="Show top N FAKE and REAL indicator terms")
    parser.add_argument("--confusion", action="store_true", help="Show confusion matrix")
    args = parser.parse_args()

    bundle = load_bundle(args.model)
    df = load_dataset(args.data)
    if args.limit:
        df = df.head(args.limit)

    X, y = split_features_labels(df)
    results = [classify(text, bundle) for text in X]
    preds = [r.label for r in results]

    correct = sum(int(p == t) for p, t in zip(preds, y))
    acc = correct / len(y) if y else 0.0
    print(f"Samples: {len(y)}  Accuracy: {acc:.4f}")
    if len(set(y)) >= 2:
        print(classification_report(y, preds, digits=4, zero_division=0))
        fake_probs = np.array([r.probability for r in results])
        ap = average_precision_score(np.array(y) == FAKE, fake_probs)
        print(f"PR-AUC (FAKE): {ap:.4f}")

    if args.confusion:
        labels = sorted(set(y) | set(preds))
        matrix = {(true, pred): 0 for true in labels for pred in labels}
        for true, pred in zip(y, preds):
            matrix[(true, pred)] += 1
        print("Confusion Matrix (rows=true, cols=pred):")
        print("      " + "  ".join(f"pred={l}" for l in labels))
        for t in labels:
            row_counts = "  ".join(f"{matrix[(t, p)]:6d}" for p in labels)
            print(f"true={t}  {row_counts}")

    if args.show_mis:
        print("--- Misclassified examples ---")
        for text, true, pred in zip(X, y, preds):
            if pred != true:
                print(f"[TRUE={LABEL_NAMES[true]}][PRED={LABEL_NAMES[pred]}] {str(text)[:200].strip()}")

    coefs = bundle.coefficients
    order = coefs.argsort()
    print(f"Top {args.top} FAKE indicators:")
    print(", ".join(f"{bundle.vocabulary[i]}({coefs[i]:.2f})" for i in order[::-1][:args.top]))
    print(f"Top {args.top} REAL indicators:")
    print(", ".join(f"{bundle.vocabulary[i]}({coefs[i]:.2f})" for i in order[:args.top]))


if __name__ == "__main__":
    main()
