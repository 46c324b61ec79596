#All stuff for splitting model output into reasoning and content is here

import logging
import re
from typing import Tuple

from storychain.errors import MalformedResponse

logger = logging.getLogger(__name__)

REASONING_OPEN = "<think>"
REASONING_CLOSE = "</think>"

RESPONSE_PATTERN = re.compile(
    re.escape(REASONING_OPEN) + r"(.*?)" + re.escape(REASONING_CLOSE) + r"\s*(.*)",
    re.DOTALL,
)

PREVIEW_LENGTH = 200


def _preview(text: str) -> str:
    text = text.strip()
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."

def validate_pair(reasoning: str, content: str) -> Tuple[str, str]:
    reasoning = (reasoning or "").strip()
    content = (content or "").strip()
    if not reasoning:
        raise MalformedResponse("Empty reasoning in response")
    if not content:
        raise MalformedResponse("Empty content in response")
    return reasoning, content

def parse_response(raw_text: str) -> Tuple[str, str]:
    """Split raw model output into (reasoning, content).

    The first reasoning block wins; anything before the opening marker is
    dropped and everything after the first closing marker is the content.
    """
    match = RESPONSE_PATTERN.search(raw_text or "")
    if match is None:
        logger.error("Could not parse AI response: %s", _preview(raw_text or ""))
        raise MalformedResponse(
            f"Could not parse AI response into reasoning and content. Response: {_preview(raw_text or '')}"
        )
    reasoning, content = validate_pair(match.group(1), match.group(2))
    logger.debug("Parsed reasoning (%d chars) and content (%d chars)", len(reasoning), len(content))
    return reasoning, content
