#All stuff related to prompt construction is here

from typing import Optional

from langchain_core.prompts import PromptTemplate

from storychain.graph.graph_structures import GenerationProgress, Scene
from storychain.prompts import scene_prompts

premise_template = PromptTemplate.from_template(scene_prompts.PREMISE_BLOCK)
opening_template = PromptTemplate.from_template(scene_prompts.OPENING_SCENE_PROMPT)
continuation_template = PromptTemplate.from_template(scene_prompts.CONTINUATION_PROMPT)


def build_opening_prompt(premise: str) -> str:
    return opening_template.format(premise=premise)

def format_progress(progress: Optional[GenerationProgress], branch_index: int = 0, branch_count: int = 1) -> str:
    lines = ""
    if progress is not None:
        # the root is scene 1, so round 0 writes scene 2
        scene_number = progress.epoch + 2
        if progress.total_epochs is not None:
            lines += scene_prompts.SCENE_PROGRESS.format(scene_number=scene_number, total_scenes=progress.total_epochs + 1)
        else:
            lines += scene_prompts.OPEN_ENDED_PROGRESS.format(scene_number=scene_number)
    if branch_count > 1:
        lines += scene_prompts.BRANCH_PROGRESS.format(branch_number=branch_index + 1, branch_count=branch_count)
    return lines + "\n" if lines else ""

def build_continuation_prompt(
    scene: Scene,
    premise: Optional[str] = None,
    progress: Optional[GenerationProgress] = None,
    branch_index: int = 0,
    branch_count: int = 1
) -> str:
    prompt = ""
    if premise is not None:
        prompt += premise_template.format(premise=premise)
    prompt += continuation_template.format(
        reasoning=scene.reasoning,
        content=scene.content,
        progress=format_progress(progress, branch_index, branch_count),
    )
    return prompt
