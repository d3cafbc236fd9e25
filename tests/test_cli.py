"""Tests for the command-line interface."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from metabohyp import __version__
from metabohyp.cli import main


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestSummary:
    def test_summary(self, temp_dir, sample_csv):
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)

        result = CliRunner().invoke(main, ["summary", str(path)])

        assert result.exit_code == 0
        assert "Total: 5" in result.output
        assert "Significant: 3" in result.output
        assert "Lactate" in result.output

    def test_summary_with_context(self, temp_dir, sample_csv):
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)

        result = CliRunner().invoke(main, ["summary", str(path), "--context"])

        assert result.exit_code == 0
        assert "DIFFERENTIAL METABOLOMICS DATA SUMMARY" in result.output

    def test_summary_export(self, temp_dir, sample_csv):
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)
        snapshot = temp_dir / "session.json"

        result = CliRunner().invoke(main, ["summary", str(path), "--export", str(snapshot)])

        assert result.exit_code == 0, result.output
        data = json.loads(snapshot.read_text())
        assert data["summary"]["significant"] == 3
        assert data["results"]["hypotheses"]["result"] is None

    def test_empty_file_fails(self, temp_dir):
        path = temp_dir / "empty.csv"
        path.write_text("\n\n")

        result = CliRunner().invoke(main, ["summary", str(path)])

        assert result.exit_code == 1
        assert "empty" in result.output


class TestWorkflows:
    def test_hypotheses_without_key_fails(self, temp_dir, sample_csv, monkeypatch):
        monkeypatch.setattr("metabohyp.core.METABOHYP_CONFIG_FILE", temp_dir / "missing.yaml")
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)

        result = CliRunner().invoke(main, ["hypotheses", str(path), "--type", "mechanisms"])

        assert result.exit_code == 1
        assert "API key" in result.output

    def test_custom_without_query_fails(self, temp_dir, sample_csv, monkeypatch):
        monkeypatch.setattr("metabohyp.core.METABOHYP_CONFIG_FILE", temp_dir / "missing.yaml")
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)

        result = CliRunner().invoke(main, ["hypotheses", str(path), "--type", "custom"])

        assert result.exit_code == 1
        assert "--query" in result.output

    def test_hypotheses_saved_to_file(self, temp_dir, sample_csv, monkeypatch, llm_factory, hypotheses_response):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setattr("metabohyp.core.METABOHYP_CONFIG_FILE", temp_dir / "missing.yaml")
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)
        out = temp_dir / "hypotheses.json"

        with patch("metabohyp.agents.orchestrator.create_llm", return_value=llm_factory(hypotheses_response)):
            result = CliRunner().invoke(
                main, ["hypotheses", str(path), "--type", "mechanisms", "--out", str(out)]
            )

        assert result.exit_code == 0, result.output
        assert "Hypothesis 1" in result.output
        saved = json.loads(out.read_text())
        assert [h["rank"] for h in saved] == [1, 2, 3]
        assert saved[0]["bayesian_analysis"]["posterior_probability"] == 0.75

    def test_hypotheses_export(self, temp_dir, sample_csv, monkeypatch, llm_factory, hypotheses_response):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        monkeypatch.setattr("metabohyp.core.METABOHYP_CONFIG_FILE", temp_dir / "missing.yaml")
        path = temp_dir / "data.csv"
        path.write_text(sample_csv)
        snapshot = temp_dir / "session.json"

        with patch("metabohyp.agents.orchestrator.create_llm", return_value=llm_factory(hypotheses_response)):
            result = CliRunner().invoke(
                main, ["hypotheses", str(path), "-t", "pathways", "--export", str(snapshot)]
            )

        assert result.exit_code == 0, result.output
        data = json.loads(snapshot.read_text())
        assert data["summary"]["total"] == 5
        hypotheses = data["results"]["hypotheses"]
        assert [h["rank"] for h in hypotheses["result"]] == [1, 2, 3]
        assert hypotheses["error"] == ""
        assert hypotheses["updated_at"]

    def test_design_unknown_rank_fails(self, temp_dir, hypothesis_payload):
        path = temp_dir / "hypotheses.json"
        path.write_text(json.dumps(hypothesis_payload))

        result = CliRunner().invoke(main, ["design", str(path), "--rank", "7"])

        assert result.exit_code == 1
        assert "rank 7" in result.output
