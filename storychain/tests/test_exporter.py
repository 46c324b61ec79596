import json
from datetime import datetime

import pytest

from storychain.errors import PersistenceError
from storychain.graph.exporter import (
    export_markdown,
    first_successor_path,
    from_record,
    load_chain,
    render_markdown,
    save_chain,
    to_record,
)
from storychain.graph.graph_structures import ROOT_ID, ChainRecord, SceneRecord


@pytest.fixture
def branching_chain(chain, make_payload):
    a = chain.add_scene(ROOT_ID, make_payload("a"))
    b = chain.add_scene(ROOT_ID, make_payload("b"))
    chain.add_scene(a, make_payload("a child"))
    joined = chain.add_scene(b, make_payload("joined"))
    chain.link(a, joined)
    return chain


def test_round_trip_is_exact(branching_chain, tmp_path):
    path = tmp_path / "story.json"
    save_chain(branching_chain, str(path))
    loaded = load_chain(str(path))

    assert to_record(loaded) == to_record(branching_chain)
    assert loaded.root_id == ROOT_ID
    assert loaded.branch_ratio == branching_chain.branch_ratio


def test_round_trip_keeps_predecessor_order(branching_chain, tmp_path):
    assert branching_chain.predecessors("root_1_0") == ["root_1", "root_0"]
    path = tmp_path / "story.json"
    save_chain(branching_chain, str(path))
    assert load_chain(str(path)).predecessors("root_1_0") == ["root_1", "root_0"]


def test_saved_file_layout(branching_chain, tmp_path):
    path = tmp_path / "story.json"
    save_chain(branching_chain, str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["root_id"] == ROOT_ID
    assert list(data["nodes"]) == sorted(data["nodes"])
    node = data["nodes"]["root_0"]
    assert set(node) == {"id", "content", "reasoning", "predecessors", "successors", "metadata"}
    assert node["successors"] == ["root_0_0", "root_1_0"]


def test_saving_twice_is_stable(branching_chain, tmp_path):
    first, second = tmp_path / "one.json", tmp_path / "two.json"
    save_chain(branching_chain, str(first))
    save_chain(load_chain(str(first)), str(second))
    assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")


def _record(nodes, root_id=ROOT_ID):
    return ChainRecord(
        root_id=root_id,
        nodes={
            sid: SceneRecord(id=sid, content=f"c {sid}", reasoning=f"r {sid}", predecessors=preds, successors=succs)
            for sid, (preds, succs) in nodes.items()
        },
    )


def test_unmirrored_link_is_rejected():
    record = _record({ROOT_ID: ([], ["a"]), "a": ([], [])})
    with pytest.raises(PersistenceError, match="mirrored"):
        from_record(record)


def test_missing_root_is_rejected():
    with pytest.raises(PersistenceError, match="Root"):
        from_record(_record({"a": ([], [])}))


def test_contradicting_orders_are_rejected():
    record = _record({
        ROOT_ID: ([], ["a", "b"]),
        "a": ([ROOT_ID], ["x", "y"]),
        "b": ([ROOT_ID], ["y", "x"]),
        "x": (["b", "a"], []),
        "y": (["a", "b"], []),
    })
    with pytest.raises(PersistenceError, match="contradict"):
        from_record(record)


def test_empty_scene_text_is_rejected():
    record = _record({ROOT_ID: ([], [])})
    record.nodes[ROOT_ID].content = "  "
    with pytest.raises(PersistenceError):
        from_record(record)


def test_unreadable_files(tmp_path):
    with pytest.raises(PersistenceError):
        load_chain(str(tmp_path / "missing.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        load_chain(str(broken))


def test_save_into_missing_directory(chain, tmp_path):
    with pytest.raises(PersistenceError):
        save_chain(chain, str(tmp_path / "nope" / "story.json"))


def test_linear_path_follows_first_successor(chain, make_payload):
    a = chain.add_scene(ROOT_ID, make_payload("a"))
    b = chain.add_scene(ROOT_ID, make_payload("b"))
    chain.add_scene(b, make_payload("b child"))
    a_child = chain.add_scene(a, make_payload("a child"))

    assert chain.successors(ROOT_ID) == [a, b]
    assert first_successor_path(chain) == [ROOT_ID, a, a_child]
    rendered = render_markdown(chain)
    assert "content a\n" in rendered
    assert "content b" not in rendered


def test_linear_path_stops_on_cycles(chain, make_payload):
    a = chain.add_scene(ROOT_ID, make_payload("a"))
    chain.link(a, ROOT_ID)
    assert first_successor_path(chain) == [ROOT_ID, a]


def test_markdown_layout(chain, make_payload):
    chain.add_scene(ROOT_ID, make_payload("a"))
    rendered = render_markdown(chain, title="Lighthouse", generated_at=datetime(2024, 5, 1, 9, 30, 0))
    assert rendered.startswith("# Lighthouse\n\n*Generated on 2024-05-01 09:30:00*\n\n---\n\n")
    assert rendered.count("<details>\n<summary>AI's Reasoning</summary>\n\n") == 2
    assert "## Scene 1\n\nC0\n\n<details>\n<summary>AI's Reasoning</summary>\n\nR0\n</details>\n\n---\n\n" in rendered
    assert "## Scene 2\n\ncontent a\n\n" in rendered
    assert "## Scene 3" not in rendered


def test_export_markdown_writes_file(chain, tmp_path):
    path = tmp_path / "story.md"
    export_markdown(chain, str(path))
    assert path.read_text(encoding="utf-8").startswith("# Generated Story")
