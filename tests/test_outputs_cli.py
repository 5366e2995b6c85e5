"""Tests for persisted outputs and the command-line entry point."""

import json

import pandas as pd

from creative_intel.cli import main, read_input
from creative_intel.io.outputs import feature_rows, write_batch, write_feature_table
from creative_intel.pipeline.analysis import analyze_batch


def test_batch_json_serialises_timestamps(dark_blue_path, tmp_path, rng):
    batch = analyze_batch([dark_blue_path], rng=rng)

    path = write_batch(tmp_path / "out" / "results.json", batch)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["success_count"] == 1
    assert payload["results"][0]["theme"]["primary"] == "dark"
    assert payload["results"][0]["analyzed_at"].endswith("+00:00")


def test_feature_table_has_one_row_per_screenshot(dark_blue_path, tmp_path, rng):
    batch = analyze_batch([dark_blue_path, dark_blue_path], rng=rng)

    path = write_feature_table(tmp_path / "features.parquet", batch.results)

    df = pd.read_parquet(path)
    assert len(df) == 2
    assert list(df["theme"]) == ["dark", "dark"]
    assert feature_rows(batch.results)[0]["top_colors"] == ["#0a1a4f"]


def test_feature_table_skipped_when_empty(tmp_path):
    assert write_feature_table(tmp_path / "features.parquet", []) is None
    assert not (tmp_path / "features.parquet").exists()


def test_read_input_skips_blank_and_comment_lines(tmp_path):
    listing = tmp_path / "shots.txt"
    listing.write_text("# listing\nhttps://a/1.png\n\n  https://a/2.png  \n", encoding="utf-8")

    assert read_input(listing) == ["https://a/1.png", "https://a/2.png"]


def test_cli_writes_every_artifact(dark_blue_path, tmp_path, capsys):
    listing = tmp_path / "shots.txt"
    listing.write_text(f"{dark_blue_path}\n{tmp_path / 'missing.png'}\n", encoding="utf-8")
    out = tmp_path / "out"

    code = main(["--input", str(listing), "--out", str(out), "--category", "games", "--seed", "7"])

    assert code == 0
    for name in ("results.json", "summary.json", "features.parquet", "score.json"):
        assert (out / name).exists()
    assert not (out / "insights.json").exists()
    score = json.loads((out / "score.json").read_text(encoding="utf-8"))
    assert score["category"] == "games"
    printed = capsys.readouterr().out
    assert "[warn] 1 screenshot(s) failed to analyze" in printed
    assert "[score] games:" in printed


def test_cli_fails_when_nothing_analyses(tmp_path):
    listing = tmp_path / "shots.txt"
    listing.write_text(f"{tmp_path / 'missing.png'}\n", encoding="utf-8")

    assert main(["--input", str(listing), "--out", str(tmp_path / "out")]) == 1
