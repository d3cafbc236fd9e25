"""
Prompt templates for the three workflows.

The JSON layouts requested here are a contract offered to the model; only
the hypothesis layout is validated on the way back (see core.models).
"""

from __future__ import annotations

from dataclasses import dataclass

from metabohyp.core.models import Hypothesis

# ---------------------------------------------------------------------------
# System prompts
# ---------------------------------------------------------------------------

HYPOTHESIS_SYSTEM = """You are an expert in systems biology, metabolomics, and biomedical research.
You analyze differential metabolomics data and generate scientific hypotheses.

CRITICAL REQUIREMENTS:
1. Each hypothesis must be SPECIFIC and TESTABLE
2. Evidence must cite EXACT metabolite names and fold-change values from the provided data
3. Mechanisms must connect to known biochemistry with specific pathway names
4. Confidence levels must be justified with explicit Bayesian reasoning
5. Predictions must be experimentally verifiable

For each hypothesis, assess:
- Prior probability (based on existing literature)
- Likelihood (how well the data supports this hypothesis)
- Posterior probability (updated belief after seeing data)

OUTPUT FORMAT: JSON array with structured hypothesis objects."""

EXPERIMENTAL_SYSTEM = """You are an expert in experimental design for metabolomics and biomedical research.
Given a hypothesis, design a rigorous experimental validation protocol.

Include:
1. Primary experiment with controls
2. Sample size calculations with power analysis
3. Expected outcomes and decision criteria
4. Timeline and resource estimates
5. Potential pitfalls and mitigation strategies
6. Alternative approaches if primary experiment fails

OUTPUT FORMAT: Structured experimental protocol in JSON."""

LITERATURE_SYSTEM = """You are a scientific literature expert specializing in metabolomics and systems biology.
Analyze the provided metabolites and findings in the context of published research.

Provide:
1. Relevant PubMed references (cite specific PMIDs if known)
2. Key findings from related studies
3. How current data aligns or conflicts with literature
4. Knowledge gaps that this data could address
5. Suggested follow-up literature searches

OUTPUT FORMAT: Structured literature analysis in JSON."""


# ---------------------------------------------------------------------------
# Hypothesis types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HypothesisType:
    id: str
    label: str
    prompt: str


CUSTOM = "custom"

HYPOTHESIS_TYPES: dict[str, HypothesisType] = {
    t.id: t
    for t in [
        HypothesisType(
            "mechanisms",
            "Biological Mechanisms",
            "Generate hypotheses about the biological mechanisms underlying these metabolic changes.",
        ),
        HypothesisType(
            "disease",
            "Disease Association",
            "Generate hypotheses about disease associations and clinical implications of these metabolic patterns.",
        ),
        HypothesisType(
            "biomarkers",
            "Biomarker Discovery",
            "Identify potential biomarker panels from these metabolic changes.",
        ),
        HypothesisType(
            "therapeutics",
            "Therapeutic Targets",
            "Propose therapeutic interventions based on these metabolic findings.",
        ),
        HypothesisType(
            "pathways",
            "Pathway Analysis",
            "Analyze pathway-level changes and their biological significance.",
        ),
        HypothesisType(CUSTOM, "Custom Query", ""),
    ]
}


def task_prompt(hypothesis_type: str | None, custom_query: str = "") -> str:
    """Task line for a hypothesis type; "" when the selection is incomplete."""
    if not hypothesis_type or hypothesis_type not in HYPOTHESIS_TYPES:
        return ""
    if hypothesis_type == CUSTOM:
        return custom_query.strip()
    return HYPOTHESIS_TYPES[hypothesis_type].prompt


# ---------------------------------------------------------------------------
# User prompts
# ---------------------------------------------------------------------------


def hypothesis_prompt(context: str, task: str) -> str:
    return f"""{context}

TASK: {task}

Generate exactly 3 ranked hypotheses. For each hypothesis, provide:
1. rank (1-3)
2. title (brief)
3. hypothesis (full statement)
4. evidence (array of supporting data points with exact values)
5. mechanism (proposed biological mechanism with pathway names)
6. bayesian_analysis:
   - prior_probability (0-1, based on literature)
   - prior_rationale (why this prior)
   - likelihood (0-1, how well data supports)
   - likelihood_rationale (why this likelihood)
   - posterior_probability (0-1, updated belief)
   - confidence_interval ([lower, upper] 95% CI)
7. predictions (array of testable predictions)
8. literature_support (relevant studies/PMIDs)
9. alternative_explanations (what else could explain this)

Return ONLY valid JSON array, no other text."""


def experimental_prompt(hypothesis: Hypothesis) -> str:
    return f"""HYPOTHESIS TO VALIDATE:
Title: {hypothesis.title}
Statement: {hypothesis.statement}
Proposed Mechanism: {hypothesis.mechanism}
Key Predictions: {'; '.join(hypothesis.predictions)}

Design a comprehensive experimental validation protocol including:
1. primary_experiment:
   - objective
   - methodology (detailed steps)
   - controls (positive, negative, vehicle)
   - sample_groups (with n per group)
   - measurements (what to measure, how)
   - statistical_analysis (tests to use)

2. power_analysis:
   - effect_size_expected
   - alpha
   - power
   - sample_size_calculation

3. expected_outcomes:
   - if_hypothesis_true (specific predictions)
   - if_hypothesis_false (what would you see)
   - decision_criteria (how to conclude)

4. timeline:
   - phases (array with duration and activities)
   - total_duration

5. resources:
   - equipment
   - reagents
   - estimated_cost

6. potential_pitfalls:
   - risks (array of potential issues)
   - mitigations (how to address each)

7. alternative_approaches:
   - backup_experiments (if primary fails)

Return ONLY valid JSON object, no other text."""


def literature_prompt(context: str) -> str:
    return f"""{context}

Provide a comprehensive literature analysis:

1. key_metabolites_literature:
   - For each top changed metabolite, provide:
     - metabolite_name
     - known_functions
     - disease_associations
     - relevant_pmids (if known)

2. pathway_context:
   - affected_pathways
   - pathway_interactions
   - upstream_regulators
   - downstream_effects

3. similar_studies:
   - study_descriptions (array of relevant studies)
   - how_current_data_compares

4. knowledge_gaps:
   - what_is_unknown
   - how_this_data_helps

5. suggested_searches:
   - pubmed_queries (array of search strings)
   - databases_to_check

Return ONLY valid JSON object, no other text."""
