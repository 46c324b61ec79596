#All stuff with growing the story chain is here



#--------------------------
#---------imports----------
#--------------------------

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional

from storychain.core.prompt_builder import build_continuation_prompt
from storychain.errors import AllBranchesFailed, GenerationBackendError, MalformedResponse
from storychain.graph.graph_structures import BranchFailure, ExtensionResult, GenerationProgress, Scene, ScenePayload
from storychain.graph.narrative_graph import NarrativeGraph
from storychain.llm.scene_generator import GenerationPort, request_scene

logger = logging.getLogger(__name__)

# A failed branch is dropped and its siblings are still committed.
BRANCH_FAILURE_POLICY = "collect_partial"

BRANCH_ERRORS = (MalformedResponse, GenerationBackendError)



#------------------------------
#-----chain generator----------
#------------------------------

class ChainGenerator:
    """Expands scenes of a narrative graph through a generation port.

    Every branch of one ``extend`` call reads the same parent snapshot and
    is committed on its own, so branches may run on a thread pool. A
    branch that fails to generate or parse never touches the graph; port
    errors outside the storychain hierarchy count as backend failures.
    """

    def __init__(self, port: GenerationPort, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.port = port
        self.max_workers = max_workers

    def _scene_metadata(self, branch_index: int, progress: Optional[GenerationProgress]) -> Dict[str, str]:
        metadata = {
            "generated_at": datetime.now().isoformat(timespec="seconds"),
            "branch_index": str(branch_index),
        }
        if progress is not None:
            metadata["epoch"] = str(progress.epoch)
            if progress.total_epochs is not None:
                metadata["total_epochs"] = str(progress.total_epochs)
        model_name = getattr(self.port, "model_name", "")
        if model_name:
            metadata["model"] = model_name
        return metadata

    def _run_branch(
        self,
        graph: NarrativeGraph,
        parent: Scene,
        branch_index: int,
        branch_count: int,
        premise: Optional[str],
        progress: Optional[GenerationProgress],
        committed: List[str],
        commit_lock: threading.Lock
    ) -> str:
        prompt = build_continuation_prompt(parent, premise, progress, branch_index, branch_count)
        reasoning, content = request_scene(self.port, prompt)
        payload = ScenePayload(
            content=content,
            reasoning=reasoning,
            metadata=self._scene_metadata(branch_index, progress),
        )
        with commit_lock:
            scene_id = graph.add_scene(parent.id, payload)
            committed.append(scene_id)
        return scene_id

    def extend(
        self,
        graph: NarrativeGraph,
        from_node_id: str,
        premise: Optional[str] = None,
        branch_count: Optional[int] = None,
        progress: Optional[GenerationProgress] = None,
        raise_on_total_failure: bool = False
    ) -> ExtensionResult:
        started = time.monotonic()
        parent = graph.get_scene(from_node_id)
        if branch_count is None:
            branch_count = graph.branch_ratio
        if branch_count < 0:
            raise ValueError(f"branch_count must be >= 0, got {branch_count}")
        result = ExtensionResult(parent_id=from_node_id)
        if branch_count == 0:
            return result

        logger.debug("Generating %d branch(es) from %s", branch_count, from_node_id)
        committed: List[str] = []
        commit_lock = threading.Lock()
        failures: List[BranchFailure] = []

        def attempt(branch_index: int) -> None:
            try:
                self._run_branch(graph, parent, branch_index, branch_count, premise, progress, committed, commit_lock)
            except BRANCH_ERRORS as e:
                logger.warning("Branch %d from %s failed: %s", branch_index, from_node_id, e)
                failures.append(BranchFailure(branch_index=branch_index, error_type=type(e).__name__, message=str(e)))

        workers = min(self.max_workers, branch_count)
        if workers == 1:
            for branch_index in range(branch_count):
                attempt(branch_index)
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="branch") as executor:
                futures = [executor.submit(attempt, branch_index) for branch_index in range(branch_count)]
                for future in as_completed(futures):
                    future.result()

        result.new_ids = list(committed)
        result.failures = sorted(failures, key=lambda f: f.branch_index)
        logger.info(
            "Extended %s with %d of %d branch(es) in %.2fs",
            from_node_id, len(result.new_ids), branch_count, time.monotonic() - started
        )
        if not result.new_ids:
            logger.error("All %d branch(es) failed for node %s", branch_count, from_node_id)
            if raise_on_total_failure:
                raise AllBranchesFailed(from_node_id, result.failures)
        return result


def extend(
    graph: NarrativeGraph,
    from_node_id: str,
    generation_port: GenerationPort,
    premise: Optional[str] = None,
    branch_count: Optional[int] = None,
    progress: Optional[GenerationProgress] = None,
    raise_on_total_failure: bool = False
) -> ExtensionResult:
    return ChainGenerator(generation_port).extend(
        graph,
        from_node_id,
        premise=premise,
        branch_count=branch_count,
        progress=progress,
        raise_on_total_failure=raise_on_total_failure,
    )
