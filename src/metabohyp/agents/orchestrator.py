"""
Orchestrator — runs the three LLM workflows against a session.

Each workflow is a single request/response: build the prompt, call the
completion provider once, salvage the JSON, and store the result in the
workflow's own slot. There is no retry, no streaming and no queueing; two
overlapping calls to the same workflow both run, and whichever finishes
last owns the slot.

Usage:
    orchestrator = Orchestrator(config)
    orchestrator.session.load_table(csv_text)
    hypotheses = await orchestrator.generate_hypotheses("mechanisms")
    protocol = await orchestrator.design_experiment(hypotheses[0])
    literature = await orchestrator.analyze_literature()
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable

from metabohyp.agents import LLMProvider, create_llm
from metabohyp.agents import prompts
from metabohyp.agents.extraction import Shape, extract
from metabohyp.core import MetaboConfig, load_config
from metabohyp.core.errors import (
    ConfigurationError,
    ExtractionError,
    FormatError,
    MetaboError,
)
from metabohyp.core.models import (
    ExperimentalProtocol,
    Hypothesis,
    LiteratureAnalysis,
    hypotheses_from_payload,
)
from metabohyp.core.session import Session, Workflow

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Top-level controller for hypothesis, experimental-design and
    literature workflows.
    """

    def __init__(
        self,
        config: MetaboConfig | None = None,
        llm: LLMProvider | None = None,
        session: Session | None = None,
    ) -> None:
        self.config = config or load_config()
        self.session = session or Session()
        self._llm = llm

    @property
    def llm(self) -> LLMProvider:
        if self._llm is None:
            self._llm = create_llm(self.config.api.default_provider, self._require_key())
        return self._llm

    def _require_key(self) -> str:
        key = self.config.api.get_key()
        if not key:
            raise ConfigurationError(
                f"No {self.config.api.default_provider} API key. "
                "Run 'metabohyp init' or set it in the environment."
            )
        return key

    # ------------------------------------------------------------------
    # Shared request path
    # ------------------------------------------------------------------

    async def _request(
        self, workflow: Workflow, system: str, user: str, shape: Shape
    ) -> Any:
        self._require_key()
        if not self.session.has_data and workflow != Workflow.EXPERIMENTAL:
            logger.warning("Running %s without a loaded dataset", workflow.value)

        logger.info("Requesting %s from %s", workflow.value, self.config.llm.model)
        response = await self.llm.complete(system, user, self.config.llm)
        logger.info(
            "Received %s response (%d output tokens)",
            workflow.value,
            response.output_tokens,
        )
        return extract(response.text, shape)

    async def _run(self, workflow: Workflow, call: Awaitable[Any]) -> Any:
        """Await ``call``; store its value on success, record the error otherwise."""
        slot = self.session.slot(workflow)
        try:
            value = await call
        except MetaboError as e:
            slot.fail(str(e))
            logger.warning("%s failed: %s", workflow.value, e)
            raise
        slot.succeed(value)
        return value

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def generate_hypotheses(
        self, hypothesis_type: str | None, custom_query: str = ""
    ) -> list[Hypothesis] | None:
        """
        Generate three ranked hypotheses.

        Returns None without calling the provider when no hypothesis type is
        selected, or when a custom query is selected but empty.
        """
        task = prompts.task_prompt(hypothesis_type, custom_query)
        if not task:
            logger.debug("No hypothesis type selected; nothing to do")
            return None
        return await self._run(Workflow.HYPOTHESES, self._hypotheses(task))

    async def _hypotheses(self, task: str) -> list[Hypothesis]:
        user = prompts.hypothesis_prompt(self.session.context(), task)
        parsed = await self._request(
            Workflow.HYPOTHESES, prompts.HYPOTHESIS_SYSTEM, user, "array"
        )
        hypotheses = hypotheses_from_payload(parsed) if isinstance(parsed, list) else []
        if not hypotheses:
            raise ExtractionError("Could not parse hypotheses from response.")
        return hypotheses

    async def design_experiment(
        self, hypothesis: Hypothesis | dict[str, Any]
    ) -> ExperimentalProtocol:
        """Design a validation protocol for one hypothesis."""
        return await self._run(Workflow.EXPERIMENTAL, self._experimental(hypothesis))

    async def _experimental(
        self, hypothesis: Hypothesis | dict[str, Any]
    ) -> ExperimentalProtocol:
        if not isinstance(hypothesis, Hypothesis):
            converted = hypotheses_from_payload([hypothesis])
            if not converted:
                raise FormatError("The hypothesis to design for is not an object.")
            hypothesis = converted[0]
        user = prompts.experimental_prompt(hypothesis)
        parsed = await self._request(
            Workflow.EXPERIMENTAL, prompts.EXPERIMENTAL_SYSTEM, user, "object"
        )
        if not isinstance(parsed, dict):
            raise ExtractionError("Could not parse experimental design.")
        return {"hypothesis": hypothesis.title, **parsed}

    async def analyze_literature(self) -> LiteratureAnalysis:
        """Place the dataset's top findings in the context of published work."""
        return await self._run(Workflow.LITERATURE, self._literature())

    async def _literature(self) -> LiteratureAnalysis:
        user = prompts.literature_prompt(self.session.context())
        parsed = await self._request(
            Workflow.LITERATURE, prompts.LITERATURE_SYSTEM, user, "object"
        )
        if not isinstance(parsed, dict):
            raise ExtractionError("Could not parse literature analysis.")
        return parsed
