#All stuff for running a whole story generation is here

import logging
import time
from datetime import datetime
from typing import List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from storychain.core.chain_generator import BRANCH_ERRORS, ChainGenerator
from storychain.core.prompt_builder import build_opening_prompt
from storychain.data.artifacts import ArtifactManager
from storychain.errors import AllBranchesFailed
from storychain.graph.graph_storages.networkx_graph import NetworkXNarrativeGraph
from storychain.graph.graph_structures import ExtensionResult, GenerationProgress, ScenePayload
from storychain.graph.narrative_graph import NarrativeGraph
from storychain.llm.scene_generator import GenerationPort, request_scene

logger = logging.getLogger(__name__)


class StoryRunResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    chain: NarrativeGraph
    rounds: List[ExtensionResult] = Field(default_factory=list)
    halted: bool = False
    halted_at: Optional[str] = None

    @property
    def rounds_completed(self) -> int:
        return len(self.rounds)

    @property
    def lost_branches(self) -> int:
        return sum(r.failure_count for r in self.rounds)


class StoryRunner:
    """Opens a story from a premise and grows it one round at a time,
    always continuing from the first scene the previous round produced."""

    def __init__(
        self,
        port: GenerationPort,
        artifacts: ArtifactManager,
        generator: Optional[ChainGenerator] = None,
        graph_class: Type[NarrativeGraph] = NetworkXNarrativeGraph
    ) -> None:
        self.port = port
        self.artifacts = artifacts
        self.generator = generator or ChainGenerator(port)
        self.graph_class = graph_class

    def _retrying(self, retries: int, errors) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(retries + 1),
            retry=retry_if_exception_type(errors),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "Attempt %d failed (%s), retrying", state.attempt_number, state.outcome.exception()
            ),
        )

    def start_chain(self, premise: str, branch_count: int = 1, retries: int = 0) -> NarrativeGraph:
        logger.info("Generating initial scene")
        started = time.monotonic()
        prompt = build_opening_prompt(premise)
        reasoning, content = self._retrying(retries, BRANCH_ERRORS)(
            request_scene, self.port, prompt
        )
        logger.info("Initial scene generation took %.2fs", time.monotonic() - started)
        payload = ScenePayload(
            content=content,
            reasoning=reasoning,
            metadata={"generated_at": datetime.now().isoformat(timespec="seconds"), "kind": "opening"},
        )
        return self.graph_class.create(payload, branch_ratio=branch_count)

    def continue_chain(
        self,
        chain: NarrativeGraph,
        premise: Optional[str],
        epochs: int,
        start_id: Optional[str] = None,
        branch_count: Optional[int] = None,
        round_retries: int = 0
    ) -> StoryRunResult:
        # each round continues from a scene it created
        if branch_count is not None and branch_count < 1:
            raise ValueError(f"branch_count must be >= 1 for a story run, got {branch_count}")
        result = StoryRunResult(chain=chain)
        current_id = start_id or chain.root_id
        for epoch in range(epochs):
            epoch_started = time.monotonic()
            logger.info("Starting epoch %d of %d from %s", epoch + 1, epochs, current_id)
            progress = GenerationProgress(epoch=epoch, total_epochs=epochs)
            try:
                extension = self._retrying(round_retries, AllBranchesFailed)(
                    self.generator.extend,
                    chain,
                    current_id,
                    premise=premise,
                    branch_count=branch_count,
                    progress=progress,
                    raise_on_total_failure=True,
                )
            except AllBranchesFailed as e:
                logger.error("Stopping generation at %s: %s", current_id, e)
                result.halted = True
                result.halted_at = current_id
                break
            if extension.failures:
                logger.warning(
                    "Epoch %d lost %d branch(es): %s",
                    epoch + 1, extension.failure_count,
                    ", ".join(f"#{f.branch_index} {f.error_type}" for f in extension.failures)
                )
            result.rounds.append(extension)
            current_id = extension.new_ids[0]
            logger.info("Epoch %d took %.2fs", epoch + 1, time.monotonic() - epoch_started)
        return result

    def run(self, premise_id: str, epochs: int, branch_count: int = 1, round_retries: int = 0) -> StoryRunResult:
        if branch_count < 1:
            raise ValueError(f"branch_count must be >= 1 for a story run, got {branch_count}")
        started = time.monotonic()
        premise = self.artifacts.get_text(premise_id)
        logger.info("Loaded premise %s", premise_id)
        logger.info("Starting story generation with %d epochs", epochs)
        chain = self.start_chain(premise, branch_count, retries=round_retries)
        result = self.continue_chain(chain, premise, epochs, branch_count=branch_count, round_retries=round_retries)
        logger.info(
            "Story generation took %.2fs: %d scenes, %d rounds, %d lost branch(es)",
            time.monotonic() - started, len(chain), result.rounds_completed, result.lost_branches
        )
        return result
