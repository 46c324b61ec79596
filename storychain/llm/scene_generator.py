#All stuff for turning a prompt into scene text is here

import logging
import threading
import time
from datetime import datetime
from typing import Optional, Protocol, Tuple, Union

from langchain_core.language_models import BaseLanguageModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate

from storychain.errors import GenerationBackendError, MalformedResponse, PersistenceError, StoryChainError
from storychain.llm.response_parser import parse_response, validate_pair

logger = logging.getLogger(__name__)

GenerationOutput = Union[str, Tuple[str, str]]


class GenerationPort(Protocol):
    """Turns a prompt into either raw model text or a (reasoning, content) pair."""

    def generate(self, prompt: str) -> GenerationOutput:
        ...


def to_scene_pair(output: GenerationOutput) -> Tuple[str, str]:
    if isinstance(output, str):
        return parse_response(output)
    if not isinstance(output, (tuple, list)) or len(output) != 2:
        raise MalformedResponse(f"Expected raw text or a (reasoning, content) pair, got {type(output).__name__}")
    reasoning, content = output
    if not isinstance(reasoning, str) or not isinstance(content, str):
        raise MalformedResponse(
            f"Expected text in the (reasoning, content) pair, got ({type(reasoning).__name__}, {type(content).__name__})"
        )
    return validate_pair(reasoning, content)

def request_scene(port: GenerationPort, prompt: str) -> Tuple[str, str]:
    """Ask a port for one scene; any non-storychain failure becomes GenerationBackendError."""
    try:
        output = port.generate(prompt)
    except StoryChainError:
        raise
    except Exception as e:
        logger.error("Generation port failed: %s", e)
        raise GenerationBackendError(f"Generation failed: {type(e).__name__}: {e}") from e
    return to_scene_pair(output)


class ResponseLog:
    def __init__(self, filepath: str):
        self.filepath = filepath
        self._lock = threading.Lock()

    def write(self, prompt: str, response: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        entry = (
            f"=== AI Response at {timestamp} ===\n"
            f"Prompt: {prompt}\n"
            f"Response: {response}\n"
            "=== End Response ===\n\n"
        )
        try:
            with self._lock, open(self.filepath, "a", encoding="utf-8") as f:
                f.write(entry)
        except OSError as e:
            raise PersistenceError(f"Could not append to response log {self.filepath}: {e}") from e


# Prompts are sent verbatim; the template only exists to pipe into the model.
_passthrough_template = PromptTemplate.from_template("{prompt}")


class LLMSceneGenerator:
    def __init__(
        self,
        llm: BaseLanguageModel,
        model_name: str = "",
        response_log: Optional[ResponseLog] = None
    ) -> None:
        self.llm = llm
        self.model_name = model_name
        self.response_log = response_log
        self.chain = _passthrough_template | llm | StrOutputParser()

    def generate(self, prompt: str) -> str:
        logger.info("Sending request to model %s", self.model_name or type(self.llm).__name__)
        logger.debug("Prompt: %s", prompt)
        started = time.monotonic()
        try:
            response = self.chain.invoke({"prompt": prompt})
        except Exception as e:
            logger.error("Model call failed: %s", e)
            raise GenerationBackendError(f"Model call failed: {e}") from e
        logger.info("Model generation took %.2fs", time.monotonic() - started)
        logger.debug("Raw AI response: %s", response)
        if self.response_log is not None:
            self.response_log.write(prompt, response)
        return response

    def generate_scene(self, prompt: str) -> Tuple[str, str]:
        return request_scene(self, prompt)
