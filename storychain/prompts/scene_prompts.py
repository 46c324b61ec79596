


PREMISE_BLOCK = "Story Premise:\n{premise}\n\n"

OPENING_SCENE_PROMPT = (
    "You are tasked with writing a scene in the style specified by the premise.\n\n"
    "IMPORTANT: Format your response EXACTLY as follows:\n"
    "<think>\n"
    "Write your reasoning here in a single paragraph, explaining your narrative choices and how they connect to the premise.\n"
    "</think>\n"
    "Write your scene content here, using proper paragraphs and formatting.\n\n"
    "Story Premise:\n{premise}\n\n"
    "Remember: \n"
    "- Put your reasoning in a SINGLE paragraph inside <think> tags\n"
    "- Write your scene content immediately after the </think> tag\n"
    "- Use proper paragraphs in your scene content\n"
    "- Do NOT add any extra formatting or tags"
)

CONTINUATION_PROMPT = (
    "You are continuing a story. Here is the previous scene and its reasoning:\n\n"
    "Previous Scene Reasoning:\n{reasoning}\n\n"
    "Previous Scene Content:\n{content}\n\n"
    "{progress}"
    "Now continue the story, maintaining consistency with the previous scene and the overall premise.\n\n"
    "IMPORTANT: Format your response EXACTLY as follows:\n"
    "<think>\n"
    "Your reasoning about how this scene continues the story and develops the narrative.\n"
    "</think>\n"
    "Write your scene content here, making sure it flows naturally from the previous scene..."
)

SCENE_PROGRESS = "This is scene {scene_number} of {total_scenes}.\n"

OPEN_ENDED_PROGRESS = "This is scene {scene_number} of the story.\n"

BRANCH_PROGRESS = (
    "You are writing alternative continuation {branch_number} of {branch_count}; "
    "make it distinct from the other alternatives.\n"
)
