#In case of using NetworkX as narrative graph storage

import html
import logging
import threading
from typing import Dict, List, Sequence, Tuple

import networkx as nx
from pyvis.network import Network

from storychain.errors import NodeNotFound
from storychain.graph.graph_structures import ROOT_ID, Scene, ScenePayload
from storychain.graph.narrative_graph import NarrativeGraph

logger = logging.getLogger(__name__)


class NetworkXNarrativeGraph(NarrativeGraph):
    def __init__(self, root_id: str = ROOT_ID, branch_ratio: int = 1):
        if branch_ratio < 1:
            raise ValueError(f"branch_ratio must be >= 1, got {branch_ratio}")
        self.graph = nx.DiGraph()
        self._root_id = root_id
        self._branch_ratio = branch_ratio
        self._lock = threading.RLock()

    @classmethod
    def create(cls, root_payload: ScenePayload, branch_ratio: int = 1) -> "NetworkXNarrativeGraph":
        chain = cls(root_id=ROOT_ID, branch_ratio=branch_ratio)
        chain.graph.add_node(ROOT_ID, data=root_payload.model_dump())
        logger.info("Created story chain with branch ratio %d", branch_ratio)
        return chain

    @classmethod
    def restore(
        cls,
        root_id: str,
        branch_ratio: int,
        payloads: Dict[str, ScenePayload],
        edges: Sequence[Tuple[str, str]]
    ) -> "NetworkXNarrativeGraph":
        if root_id not in payloads:
            raise NodeNotFound(root_id)
        chain = cls(root_id=root_id, branch_ratio=branch_ratio)
        for scene_id, payload in payloads.items():
            chain.graph.add_node(scene_id, data=payload.model_dump())
        for source, target in edges:
            for scene_id in (source, target):
                if scene_id not in payloads:
                    raise NodeNotFound(scene_id)
            chain.graph.add_edge(source, target)
        return chain

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def branch_ratio(self) -> int:
        return self._branch_ratio

    def _require(self, scene_id: str) -> None:
        if scene_id not in self.graph:
            raise NodeNotFound(scene_id)

    def _allocate_id(self, parent_id: str) -> str:
        ordinal = self.graph.out_degree(parent_id)
        candidate = f"{parent_id}_{ordinal}"
        while candidate in self.graph:
            ordinal += 1
            candidate = f"{parent_id}_{ordinal}"
        return candidate

    def add_scene(self, parent_id: str, payload: ScenePayload) -> str:
        with self._lock:
            self._require(parent_id)
            scene_id = self._allocate_id(parent_id)
            self.graph.add_node(scene_id, data=payload.model_dump())
            self.graph.add_edge(parent_id, scene_id)
        logger.debug("Committed scene %s under %s", scene_id, parent_id)
        return scene_id

    def link(self, source_id: str, target_id: str) -> None:
        if source_id == target_id:
            raise ValueError(f"Cannot link scene {source_id} to itself")
        with self._lock:
            self._require(source_id)
            self._require(target_id)
            if self.graph.has_edge(source_id, target_id):
                return
            self.graph.add_edge(source_id, target_id)
        logger.debug("Linked %s -> %s", source_id, target_id)

    def get_scene(self, scene_id: str) -> Scene:
        with self._lock:
            self._require(scene_id)
            data = self.graph.nodes[scene_id]["data"]
            return Scene(
                id=scene_id,
                content=data["content"],
                reasoning=data["reasoning"],
                predecessors=list(self.graph.predecessors(scene_id)),
                successors=list(self.graph.successors(scene_id)),
                metadata=dict(data.get("metadata", {})),
            )

    def has_scene(self, scene_id: str) -> bool:
        return scene_id in self.graph

    def get_all_scenes(self) -> List[Scene]:
        with self._lock:
            return [self.get_scene(scene_id) for scene_id in list(self.graph.nodes)]

    def successors(self, scene_id: str) -> List[str]:
        with self._lock:
            self._require(scene_id)
            return list(self.graph.successors(scene_id))

    def predecessors(self, scene_id: str) -> List[str]:
        with self._lock:
            self._require(scene_id)
            return list(self.graph.predecessors(scene_id))

    def leaves(self) -> List[str]:
        with self._lock:
            return [n for n in self.graph.nodes if self.graph.out_degree(n) == 0]

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def visualize(self, filepath: str) -> None:

        SCENE_COLORS = {
            "root": "#ffa94d",
            "leaf": "#69db7c",
            "scene": "#4dabf7",
        }
        net = Network(
            height="800px",
            width="100%",
            bgcolor="#222222",
            font_color="white",
            directed=True
        )
        net.barnes_hut(
            gravity=-8000,
            central_gravity=0.3,
            spring_length=150,
            spring_strength=0.01,
            damping=0.9
        )
        leaves = set(self.leaves())
        for scene in self.get_all_scenes():
            if scene.id == self.root_id:
                kind = "root"
            elif scene.id in leaves:
                kind = "leaf"
            else:
                kind = "scene"
            preview = scene.content if len(scene.content) <= 200 else scene.content[:200] + "..."
            net.add_node(
                n_id=scene.id,
                label=scene.id,
                color=SCENE_COLORS[kind],
                title=html.escape(preview),
                data=scene.model_dump()
            )
        for source, target in self.graph.edges:
            net.add_edge(source, target)
        net.write_html(filepath)
        with open(filepath, "r", encoding="utf8") as f:
            page = f.read()

        scene_panel_js = r"""
            <style>
            #scenePanel {
                position: fixed;
                top: 20px;
                right: 20px;
                max-width: 600px;
                max-height: 90%;
                overflow-y: auto;
                background: #1e1e1e;
                color: white;
                padding: 16px;
                border-radius: 8px;
                border: 1px solid #444;
                font-family: Georgia, serif;
                font-size: 14px;
                display: none;
                z-index: 9999;
                white-space: pre-wrap;
            }
            #scenePanel details { color: #aaaaaa; margin-top: 12px; }
            </style>
            <div id="scenePanel"></div>
            <script>
            function escapeText(text) {
                const div = document.createElement("div");
                div.innerText = text || "";
                return div.innerHTML;
            }
            setTimeout(() => {
                if (!window.network) return;
                network.on("click", function (params) {
                    const panel = document.getElementById("scenePanel");
                    if (params.nodes.length !== 1) {
                        panel.style.display = "none";
                        return;
                    }
                    const scene = network.body.data.nodes.get(params.nodes[0]).data || {};
                    panel.innerHTML = "<h3>" + escapeText(scene.id) + "</h3>" +
                        "<div>" + escapeText(scene.content) + "</div>" +
                        "<details><summary>Reasoning</summary>" + escapeText(scene.reasoning) + "</details>";
                    panel.style.display = "block";
                });
            }, 300);
            </script>
        """
        page = page.replace("</body>", scene_panel_js + "\n</body>")
        with open(filepath, "w", encoding="utf8") as f:
            f.write(page)
        logger.info("Wrote graph visualisation to %s", filepath)
