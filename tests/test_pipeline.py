import json
import os

import joblib
import numpy as np
import pandas as pd
import pytest
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from newsverdict import export, infer
from newsverdict.bundle import InvalidModelBundle, bundle_from_pipeline, load_bundle, save_bundle
from newsverdict.classify import classify, predict
from newsverdict.preprocess import load_dataset, preprocess_text, split_features_labels
from newsverdict.vectorize import vectorize

TRAIN = pd.DataFrame({
    "text": [
        "Officials confirmed the report after a lengthy investigation by the committee.",
        "The senator announced new funding for schools and hospitals on Wednesday.",
        "Researchers published the findings in a peer reviewed journal this month.",
        "The city council voted to approve the budget following public hearings.",
        "SHOCKING!!! Doctors hate this one weird trick, the government is hiding it!",
        "Aliens secretly control the elections, insiders reveal the shocking truth.",
        "You won't believe what celebrities are hiding, share before it gets deleted!",
        "Miracle cure banned by elites, the truth they don't want you to know.",
    ],
    "label": [0, 0, 0, 0, 1, 1, 1, 1],
})


def build_pipeline(**tfidf_kwargs) -> Pipeline:
    return Pipeline([
        ("tfidf", TfidfVectorizer(**tfidf_kwargs)),
        ("clf", LogisticRegression(max_iter=1000)),
    ])


@pytest.fixture
def fitted(tmp_path):
    data_path = tmp_path / "mini.csv"
    TRAIN.to_csv(data_path, index=False)
    df = load_dataset(str(data_path))
    X, y = split_features_labels(df)

    pipe = build_pipeline()
    pipe.fit([preprocess_text(t) for t in X], y)
    return pipe


def test_export_matches_sklearn(fitted):
    bundle = bundle_from_pipeline(fitted)
    vec = fitted.named_steps["tfidf"]
    assert list(bundle.vocabulary) == list(vec.get_feature_names_out())

    probes = [
        "Officials confirmed the shocking report on Wednesday.",
        "The truth about the budget they are hiding!",
        "Completely unrelated words: zebra xylophone.",
        "",
    ] + TRAIN["text"].tolist()
    for text in probes:
        cleaned = preprocess_text(text)
        expected = vec.transform([cleaned]).toarray()[0]
        ours = vectorize(text, bundle)
        np.testing.assert_allclose(ours, expected, rtol=1e-9, atol=1e-12)

        proba_fake = fitted.predict_proba([cleaned])[0][list(fitted.classes_).index(1)]
        prediction = predict(ours, bundle)
        assert prediction.probability == pytest.approx(proba_fake, rel=1e-9)
        assert prediction.label == int(fitted.predict([cleaned])[0])


def test_export_rejects_unsupported_vectorizers():
    X = [preprocess_text(t) for t in TRAIN["text"]]
    y = TRAIN["label"].tolist()
    for kwargs in ({"sublinear_tf": True}, {"norm": "l1"}, {"ngram_range": (1, 2)}, {"use_idf": False}):
        pipe = build_pipeline(**kwargs)
        pipe.fit(X, y)
        with pytest.raises(InvalidModelBundle):
            bundle_from_pipeline(pipe)


def test_export_rejects_unfitted_pipeline():
    with pytest.raises(InvalidModelBundle):
        bundle_from_pipeline(build_pipeline())
    with pytest.raises(InvalidModelBundle):
        bundle_from_pipeline(object())


def test_export_cli(tmp_path, fitted):
    pipeline_path = tmp_path / "model.joblib"
    joblib.dump(fitted, str(pipeline_path))
    out_path = tmp_path / "models" / "model_params.json"

    assert export.main(["--pipeline", str(pipeline_path), "--out", str(out_path)]) == 0
    assert os.path.exists(out_path)

    bundle = load_bundle(str(out_path))
    assert len(bundle.vocabulary) == len(fitted.named_steps["tfidf"].get_feature_names_out())

    meta_path = tmp_path / "models" / "model_params.meta.json"
    with open(meta_path, encoding="utf-8") as f:
        meta = json.load(f)
    assert meta["vocabulary_size"] == len(bundle.vocabulary)
    assert meta["classes"] == {"0": "REAL", "1": "FAKE"}


def test_export_cli_unsupported(tmp_path, capsys):
    pipe = build_pipeline(sublinear_tf=True)
    pipe.fit([preprocess_text(t) for t in TRAIN["text"]], TRAIN["label"].tolist())
    pipeline_path = tmp_path / "model.joblib"
    joblib.dump(pipe, str(pipeline_path))

    assert export.main(["--pipeline", str(pipeline_path), "--out", str(tmp_path / "out.json")]) == 2
    assert "sublinear_tf" in capsys.readouterr().err


def test_infer_cli(tmp_path, capsys, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))

    assert infer.main(["--model", str(model_path), "--text", "Breaking: this report is fake fake fake."]) == 0
    assert capsys.readouterr().out.strip() == "REAL"

    assert infer.main(["--model", str(model_path), "--text", "fake fake fake", "--proba"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("REAL [reliable]")
    assert "FAKE=" in out and "REAL=" in out


def test_infer_cli_json_and_explain(tmp_path, capsys, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))
    text_path = tmp_path / "article.txt"
    text_path.write_text("Breaking: this report is fake fake fake.", encoding="utf-8")

    assert infer.main(["--model", str(model_path), "--file", str(text_path), "--json", "--explain", "5"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["label"] == 0
    assert out["verdict"] == "reliable"
    assert out["non_zero_features"] == 2
    assert [f["term"] for f in out["top_features"]] == ["fake", "report"]
    assert out["probability"] == pytest.approx(classify("Breaking: this report is fake fake fake.", toy_bundle).probability)


def test_infer_cli_debug(tmp_path, capsys, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))

    assert infer.main(["--model", str(model_path), "--text", "Reports were fake", "--debug", "--explain", "3"]) == 0
    out = capsys.readouterr().out
    assert "[DEBUG] stemmed:" in out
    assert "reporting -> report" in out
    assert "Raw score (before sigmoid)" in out


def test_infer_cli_bad_model(tmp_path, capsys):
    missing = tmp_path / "missing.json"
    assert infer.main(["--model", str(missing), "--text", "anything"]) == 2

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"vocabulary": [], "idf_values": [], "coefficients": [], "intercept": 0}),
                   encoding="utf-8")
    assert infer.main(["--model", str(bad), "--text", "anything"]) == 2
    assert "Invalid model bundle" in capsys.readouterr().err


def test_infer_cli_model_from_env(tmp_path, capsys, monkeypatch, toy_bundle):
    model_path = tmp_path / "env_model.json"
    save_bundle(toy_bundle, str(model_path))
    monkeypatch.setenv("NEWSVERDICT_MODEL", str(model_path))

    assert infer.main(["--text", "fake"]) == 0
    assert capsys.readouterr().out.strip() == "REAL"


def test_export_rejects_string_labels():
    pipe = build_pipeline()
    labels = ["fake" if y == 1 else "real" for y in TRAIN["label"]]
    pipe.fit([preprocess_text(t) for t in TRAIN["text"]], labels)
    with pytest.raises(InvalidModelBundle, match="classes_"):
        bundle_from_pipeline(pipe)


def test_infer_cli_unreadable_inputs(tmp_path, capsys, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))

    assert infer.main(["--model", str(model_path), "--file", str(tmp_path / "missing.txt")]) == 2
    assert "Cannot read" in capsys.readouterr().err

    assert infer.main(["--model", str(tmp_path), "--text", "anything"]) == 2
    assert capsys.readouterr().err


def test_infer_cli_non_utf8_file(tmp_path, capsys, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))
    text_path = tmp_path / "latin1.txt"
    text_path.write_bytes(b"Breaking: this report is fake fake fake.\xff\xfe")

    assert infer.main(["--model", str(model_path), "--file", str(text_path)]) == 0
    assert capsys.readouterr().out.strip() == "REAL"


def test_infer_cli_rejects_negative_explain(tmp_path, toy_bundle):
    model_path = tmp_path / "model_params.json"
    save_bundle(toy_bundle, str(model_path))
    with pytest.raises(SystemExit):
        infer.main(["--model", str(model_path), "--text", "fake", "--explain", "-1"])
