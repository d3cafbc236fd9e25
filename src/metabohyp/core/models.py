"""
Typed results produced from extracted LLM output.

Field aliases follow the JSON contract the hypothesis prompt asks the model
for (``hypothesis``, ``bayesian_analysis``, ``prior_probability`` ...);
the Python names are the ones used in code.

Models are lenient: a hypothesis is only dropped when it is not a JSON object.
Sloppy values ("~0.3", "30%", "0.4-0.7", null) are coerced, and values with no
number in them fall back to the field default.
"""

from __future__ import annotations

import json
import logging
import math
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Protocols and literature analyses are schema-free documents.
ExperimentalProtocol = dict[str, Any]
LiteratureAnalysis = dict[str, Any]

# Unsigned, so "0.4-0.7" reads as two numbers.
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?")


class ConfidenceLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "; ".join(_as_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    """First number in ``value``; a trailing % scales it to a fraction."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match is None:
            return None
        number = float(match.group())
        return number / 100 if value.rstrip().endswith("%") else number
    return None


class BayesianAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prior: float = Field(default=0.0, alias="prior_probability")
    prior_rationale: str = ""
    likelihood: float = 0.0
    likelihood_rationale: str = ""
    posterior: float = Field(default=0.0, alias="posterior_probability")
    confidence_interval: list[float] = Field(default_factory=list)

    @field_validator("prior_rationale", "likelihood_rationale", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("prior", "likelihood", "posterior", mode="before")
    @classmethod
    def _probability(cls, v: Any) -> float:
        number = _as_number(v)
        return 0.0 if number is None else number

    @field_validator("confidence_interval", mode="before")
    @classmethod
    def _interval(cls, v: Any) -> list[float]:
        if isinstance(v, str):
            return [float(n) for n in _NUMBER_RE.findall(v)]
        if isinstance(v, (list, tuple)):
            return [n for n in map(_as_number, v) if n is not None]
        return []


class Hypothesis(BaseModel):
    """
    One ranked hypothesis with its Bayesian assessment.

    ``rank`` is kept as the model reported it; it is not clamped to 1..3.
    """

    model_config = ConfigDict(populate_by_name=True)

    rank: int
    title: str = ""
    statement: str = Field(default="", alias="hypothesis")
    evidence: list[str] = Field(default_factory=list)
    mechanism: str = ""
    bayesian: BayesianAnalysis = Field(
        default_factory=BayesianAnalysis, alias="bayesian_analysis"
    )
    predictions: list[str] = Field(default_factory=list)
    literature_support: str = ""
    alternatives: str = Field(default="", alias="alternative_explanations")

    @field_validator("rank", mode="before")
    @classmethod
    def _rank(cls, v: Any) -> Any:
        number = _as_number(v)
        return v if number is None else int(number)

    @field_validator("bayesian", mode="before")
    @classmethod
    def _bayesian(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, BayesianAnalysis)) else {}

    @field_validator("title", "statement", "mechanism", "literature_support", "alternatives", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("evidence", "predictions", mode="before")
    @classmethod
    def _text_items(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            v = [v]
        return [_as_text(item) for item in v]

    @property
    def confidence_level(self) -> ConfidenceLevel:
        p = self.bayesian.posterior
        if p >= 0.7:
            return ConfidenceLevel.HIGH
        if p >= 0.4:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW


def hypotheses_from_payload(items: list[Any]) -> list[Hypothesis]:
    """Build hypotheses from extracted elements, skipping any that is not an object.

    A missing or non-numeric rank becomes the element's 1-based position.
    """
    hypotheses: list[Hypothesis] = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            logger.warning("Skipping hypothesis %d: not an object", position)
            continue
        data = dict(item)
        if _as_number(data.get("rank")) is None:
            data["rank"] = position
        try:
            hypotheses.append(Hypothesis.model_validate(data))
        except ValidationError as e:
            logger.warning("Skipping hypothesis %d: %s", position, e.errors()[0]["msg"])
    return hypotheses
