#All stuff for exporting and loading story chains is here



#--------------------------
#---------imports----------
#--------------------------

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Type

from pydantic import ValidationError

from storychain.errors import NodeNotFound, PersistenceError
from storychain.graph.graph_storages.networkx_graph import NetworkXNarrativeGraph
from storychain.graph.graph_structures import ChainRecord, SceneRecord, ScenePayload
from storychain.graph.narrative_graph import NarrativeGraph

logger = logging.getLogger(__name__)

MARKDOWN_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"



#------------------------------
#-----structured export--------
#------------------------------

def to_record(graph: NarrativeGraph) -> ChainRecord:
    scenes = sorted(graph.get_all_scenes(), key=lambda s: s.id)
    return ChainRecord(
        nodes={scene.id: SceneRecord(**scene.model_dump()) for scene in scenes},
        root_id=graph.root_id,
        branch_ratio=graph.branch_ratio,
    )

def _check_links(record: ChainRecord) -> None:
    if record.root_id not in record.nodes:
        raise PersistenceError(f"Root node {record.root_id!r} missing from chain record")
    for scene_id, scene in record.nodes.items():
        if scene.id != scene_id:
            raise PersistenceError(f"Node key {scene_id!r} does not match its id {scene.id!r}")
        if len(set(scene.successors)) != len(scene.successors) or len(set(scene.predecessors)) != len(scene.predecessors):
            raise PersistenceError(f"Node {scene_id!r} lists the same link twice")
        if scene_id in scene.successors:
            raise PersistenceError(f"Node {scene_id!r} links to itself")
        for target in scene.successors:
            if target not in record.nodes:
                raise PersistenceError(f"Node {scene_id!r} links to unknown node {target!r}")
            if scene_id not in record.nodes[target].predecessors:
                raise PersistenceError(f"Link {scene_id!r} -> {target!r} is not mirrored in predecessors")
        for source in scene.predecessors:
            if source not in record.nodes:
                raise PersistenceError(f"Node {scene_id!r} has unknown predecessor {source!r}")
            if scene_id not in record.nodes[source].successors:
                raise PersistenceError(f"Link {source!r} -> {scene_id!r} is not mirrored in successors")

def _edge_order(record: ChainRecord) -> List[Tuple[str, str]]:
    """Order the links so that replaying them rebuilds every successor
    list and every predecessor list exactly as recorded."""
    out_queue: Dict[str, List[str]] = {sid: list(s.successors) for sid, s in record.nodes.items()}
    in_queue: Dict[str, List[str]] = {sid: list(s.predecessors) for sid, s in record.nodes.items()}
    remaining = sum(len(targets) for targets in out_queue.values())
    edges: List[Tuple[str, str]] = []
    while remaining:
        progressed = False
        for source in sorted(out_queue):
            while out_queue[source]:
                target = out_queue[source][0]
                if not in_queue[target] or in_queue[target][0] != source:
                    break
                out_queue[source].pop(0)
                in_queue[target].pop(0)
                edges.append((source, target))
                remaining -= 1
                progressed = True
        if not progressed:
            raise PersistenceError("Successor and predecessor orders in chain record contradict each other")
    return edges

def from_record(record: ChainRecord, graph_class: Type[NarrativeGraph] = NetworkXNarrativeGraph) -> NarrativeGraph:
    _check_links(record)
    payloads = {}
    try:
        for scene_id, scene in record.nodes.items():
            payloads[scene_id] = ScenePayload(content=scene.content, reasoning=scene.reasoning, metadata=scene.metadata)
        return graph_class.restore(record.root_id, record.branch_ratio, payloads, _edge_order(record))
    except (ValidationError, ValueError, NodeNotFound) as e:
        raise PersistenceError(f"Invalid chain record: {e}") from e

def save_chain(graph: NarrativeGraph, filepath: str) -> None:
    logger.info("Exporting story chain to %s", filepath)
    serialized = to_record(graph).model_dump_json(indent=2)
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(serialized)
    except OSError as e:
        raise PersistenceError(f"Could not write chain to {filepath}: {e}") from e
    logger.info("Exported %d scenes", len(graph))

def load_chain(filepath: str, graph_class: Type[NarrativeGraph] = NetworkXNarrativeGraph) -> NarrativeGraph:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise PersistenceError(f"Could not read chain from {filepath}: {e}") from e
    try:
        record = ChainRecord.model_validate_json(raw)
    except ValidationError as e:
        raise PersistenceError(f"Malformed chain file {filepath}: {e}") from e
    graph = from_record(record, graph_class)
    logger.info("Loaded %d scenes from %s", len(graph), filepath)
    return graph



#------------------------------
#-----linear rendering---------
#------------------------------

def first_successor_path(graph: NarrativeGraph) -> List[str]:
    path = []
    visited = set()
    current: Optional[str] = graph.root_id
    while current is not None and current not in visited:
        visited.add(current)
        path.append(current)
        successors = graph.successors(current)
        current = successors[0] if successors else None
    return path

def render_markdown(graph: NarrativeGraph, title: str = "Generated Story", generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    parts = [
        f"# {title}\n\n",
        f"*Generated on {generated_at.strftime(MARKDOWN_TIMESTAMP_FORMAT)}*\n\n",
        "---\n\n",
    ]
    for scene_number, scene_id in enumerate(first_successor_path(graph), start=1):
        scene = graph.get_scene(scene_id)
        parts.append(f"## Scene {scene_number}\n\n")
        parts.append(f"{scene.content}\n\n")
        parts.append("<details>\n<summary>AI's Reasoning</summary>\n\n")
        parts.append(f"{scene.reasoning}\n</details>\n\n---\n\n")
    return "".join(parts)

def export_markdown(graph: NarrativeGraph, filepath: str, title: str = "Generated Story", generated_at: Optional[datetime] = None) -> None:
    rendered = render_markdown(graph, title=title, generated_at=generated_at)
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(rendered)
    except OSError as e:
        raise PersistenceError(f"Could not write markdown to {filepath}: {e}") from e
    logger.info("Rendered story to %s", filepath)
