#Abstract class for narrative graph

from typing import Dict, List, Sequence, Tuple

from abc import ABC, abstractmethod

from storychain.graph.graph_structures import Scene, ScenePayload

class NarrativeGraph(ABC):
    """Append-only store of scenes and their predecessor/successor links.

    Scenes never change once committed; the only mutation of an existing
    scene is a new link appended to its successors (and, on the other
    end, to the target's predecessors).
    """

    @property
    @abstractmethod
    def root_id(self) -> str:
        pass

    @property
    @abstractmethod
    def branch_ratio(self) -> int:
        pass

    @abstractmethod
    def add_scene(self, parent_id: str, payload: ScenePayload) -> str: #commits the scene and its parent link together
        pass

    @abstractmethod
    def link(self, source_id: str, target_id: str) -> None:
        pass

    @abstractmethod
    def get_scene(self, scene_id: str) -> Scene:
        pass

    @abstractmethod
    def has_scene(self, scene_id: str) -> bool:
        pass

    @abstractmethod
    def get_all_scenes(self) -> List[Scene]:
        pass

    @abstractmethod
    def successors(self, scene_id: str) -> List[str]:
        pass

    @abstractmethod
    def predecessors(self, scene_id: str) -> List[str]:
        pass

    @abstractmethod
    def leaves(self) -> List[str]:
        pass

    @abstractmethod
    def visualize(self, filepath: str) -> None:
        pass

    @classmethod
    @abstractmethod
    def create(cls, root_payload: ScenePayload, branch_ratio: int = 1) -> "NarrativeGraph":
        pass

    @classmethod
    @abstractmethod
    def restore(
        cls,
        root_id: str,
        branch_ratio: int,
        payloads: Dict[str, ScenePayload],
        edges: Sequence[Tuple[str, str]]
    ) -> "NarrativeGraph": #edges must already be in link order
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass
