"""
Pytest configuration and shared fixtures.
"""

import threading
from typing import Callable, List, Sequence, Union

import pytest

from storychain.data.artifacts import ArtifactManager
from storychain.graph.graph_storages.networkx_graph import NetworkXNarrativeGraph
from storychain.graph.graph_structures import ScenePayload


class ScriptedPort:
    """Generation port replaying canned outputs in call order.

    Items may be raw text, a (reasoning, content) pair, an exception
    instance to raise, or a callable receiving the prompt.
    """

    def __init__(self, outputs: Sequence[Union[str, tuple, Exception, Callable]], model_name: str = ""):
        self.outputs = list(outputs)
        self.prompts: List[str] = []
        self.model_name = model_name
        self._lock = threading.Lock()

    def generate(self, prompt: str):
        with self._lock:
            if len(self.prompts) >= len(self.outputs):
                raise AssertionError("ScriptedPort ran out of outputs")
            item = self.outputs[len(self.prompts)]
            self.prompts.append(prompt)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(prompt)
        return item

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def make_port():
    return ScriptedPort


@pytest.fixture
def chain():
    """A fresh chain holding only the root scene C0/R0, branch ratio 2."""
    return NetworkXNarrativeGraph.create(ScenePayload(content="C0", reasoning="R0"), branch_ratio=2)


@pytest.fixture
def artifacts(tmp_path):
    manager = ArtifactManager(str(tmp_path / "artifacts"))
    manager.load_from_dir()
    return manager


def payload(text: str) -> ScenePayload:
    return ScenePayload(content=f"content {text}", reasoning=f"reasoning {text}")


@pytest.fixture
def make_payload():
    return payload


def assert_links_symmetric(graph) -> None:
    for scene in graph.get_all_scenes():
        for target in scene.successors:
            assert scene.id in graph.get_scene(target).predecessors
        for source in scene.predecessors:
            assert scene.id in graph.get_scene(source).successors
        if scene.id != graph.root_id:
            assert scene.predecessors


@pytest.fixture
def check_links():
    return assert_links_symmetric
