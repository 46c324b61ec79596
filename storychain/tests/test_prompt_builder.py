from storychain.core.prompt_builder import build_continuation_prompt, build_opening_prompt, format_progress
from storychain.graph.graph_structures import GenerationProgress, Scene

SCENE = Scene(id="root", content="The door creaked open.", reasoning="Start with tension.")


def test_premise_block_comes_first():
    prompt = build_continuation_prompt(SCENE, premise="A haunted lighthouse.")
    assert prompt.startswith("Story Premise:\nA haunted lighthouse.\n\n")
    assert prompt.index("Story Premise:") < prompt.index("Previous Scene Reasoning:")


def test_without_premise():
    prompt = build_continuation_prompt(SCENE)
    assert prompt.startswith("You are continuing a story.")
    assert "Story Premise:" not in prompt


def test_includes_scene_verbatim_and_format_rules():
    prompt = build_continuation_prompt(SCENE)
    assert "Previous Scene Reasoning:\nStart with tension.\n\n" in prompt
    assert "Previous Scene Content:\nThe door creaked open.\n\n" in prompt
    assert "<think>" in prompt and "</think>" in prompt
    assert "maintaining consistency with the previous scene" in prompt


def test_braces_in_scene_text_survive():
    scene = Scene(id="x", content="She wrote {name} on the wall.", reasoning="Use a {placeholder}.")
    prompt = build_continuation_prompt(scene, premise="Template {vars} everywhere")
    assert "She wrote {name} on the wall." in prompt
    assert "Template {vars} everywhere" in prompt


def test_progress_and_branch_lines():
    prompt = build_continuation_prompt(SCENE, progress=GenerationProgress(epoch=0, total_epochs=5), branch_index=1, branch_count=3)
    assert "This is scene 2 of 6.\n" in prompt
    assert "alternative continuation 2 of 3" in prompt


def test_no_progress_lines_by_default():
    assert format_progress(None) == ""
    assert format_progress(None, branch_index=0, branch_count=1) == ""
    assert format_progress(GenerationProgress(epoch=3)) == "This is scene 5 of the story.\n\n"


def test_opening_prompt_embeds_premise():
    prompt = build_opening_prompt("Two rival chefs.")
    assert "Story Premise:\nTwo rival chefs.\n\n" in prompt
    assert prompt.startswith("You are tasked with writing a scene")
