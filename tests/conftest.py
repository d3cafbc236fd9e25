"""Pytest configuration and fixtures."""

import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from metabohyp.agents import LLMResponse


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test artifacts."""
    dirpath = tempfile.mkdtemp()
    yield Path(dirpath)
    shutil.rmtree(dirpath, ignore_errors=True)


@pytest.fixture(autouse=True)
def no_env_keys(monkeypatch):
    """Keep real API keys in the environment out of the tests."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def sample_csv():
    """Small differential metabolomics table."""
    return (
        "Metabolite,log2FC,p_value,Pathway\n"
        "Glucose,-1.5,0.001,Glycolysis\n"
        "Lactate,2.3,0.0001,Glycolysis\n"
        "Citrate,0.4,0.01,TCA cycle\n"
        "Succinate,1.1,0.2,TCA cycle\n"
        "Alanine,0.9,0.03,Amino acid\n"
    )


@pytest.fixture
def hypothesis_payload():
    """Three hypotheses in the JSON layout the hypothesis prompt requests."""
    return [
        {
            "rank": i,
            "title": f"Hypothesis {i}",
            "hypothesis": f"Statement {i}",
            "evidence": [f"Lactate FC=2.3 ({i})"],
            "mechanism": "Warburg-like glycolytic shift",
            "bayesian_analysis": {
                "prior_probability": 0.3,
                "prior_rationale": "Common in proliferating cells",
                "likelihood": 0.8,
                "likelihood_rationale": "Lactate up, glucose down",
                "posterior_probability": 0.75 - 0.2 * (i - 1),
                "confidence_interval": [0.5, 0.9],
            },
            "predictions": ["LDHA expression increases"],
            "literature_support": "PMID:12345678",
            "alternative_explanations": "Hypoxia",
        }
        for i in (1, 2, 3)
    ]


def make_llm(*texts: str) -> MagicMock:
    """Mock provider returning the given texts on successive calls."""
    llm = MagicMock()
    llm.complete = AsyncMock(
        side_effect=[
            LLMResponse(
                text=t,
                provider="anthropic",
                model="claude-sonnet",
                input_tokens=100,
                output_tokens=50,
            )
            for t in texts
        ]
    )
    return llm


@pytest.fixture
def llm_factory():
    return make_llm


@pytest.fixture
def hypotheses_response(hypothesis_payload):
    return "Here are the hypotheses:\n```json\n" + json.dumps(hypothesis_payload, indent=2) + "\n```"
