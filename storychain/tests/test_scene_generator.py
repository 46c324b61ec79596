from typing import Any, List, Optional

import pytest
from langchain_core.language_models import FakeListLLM
from langchain_core.language_models.llms import LLM

from storychain.errors import GenerationBackendError, MalformedResponse, PersistenceError
from storychain.llm.manager import ModelManager
from storychain.llm.providers import ModelConfig
from storychain.llm.scene_generator import LLMSceneGenerator, ResponseLog, to_scene_pair


class UnreachableLLM(LLM):
    @property
    def _llm_type(self) -> str:
        return "unreachable"

    def _call(self, prompt: str, stop: Optional[List[str]] = None, run_manager: Any = None, **kwargs: Any) -> str:
        raise ConnectionError("connection refused")


def test_returns_raw_model_text():
    generator = LLMSceneGenerator(FakeListLLM(responses=["<think>why</think>what"]))
    assert generator.generate("prompt") == "<think>why</think>what"


def test_generate_scene_parses():
    generator = LLMSceneGenerator(FakeListLLM(responses=["<think> why </think>\nwhat"]))
    assert generator.generate_scene("prompt") == ("why", "what")


def test_generate_scene_rejects_bad_shape():
    generator = LLMSceneGenerator(FakeListLLM(responses=["no markers"]))
    with pytest.raises(MalformedResponse):
        generator.generate_scene("prompt")


def test_backend_failures_are_wrapped():
    generator = LLMSceneGenerator(UnreachableLLM())
    with pytest.raises(GenerationBackendError, match="connection refused") as info:
        generator.generate("prompt")
    assert isinstance(info.value.__cause__, ConnectionError)


def test_response_log_appends_blocks(tmp_path):
    log_path = tmp_path / "ai_responses.log"
    generator = LLMSceneGenerator(
        FakeListLLM(responses=["<think>a</think>b", "<think>c</think>d"]),
        response_log=ResponseLog(str(log_path)),
    )
    generator.generate("first prompt")
    generator.generate("second prompt")
    text = log_path.read_text(encoding="utf-8")
    assert text.count("=== AI Response at ") == 2
    assert text.count("=== End Response ===") == 2
    assert "Prompt: first prompt\nResponse: <think>a</think>b\n" in text


def test_response_log_failure_is_persistence_error(tmp_path):
    generator = LLMSceneGenerator(
        FakeListLLM(responses=["<think>a</think>b"]),
        response_log=ResponseLog(str(tmp_path / "missing" / "log.txt")),
    )
    with pytest.raises(PersistenceError):
        generator.generate("prompt")


def test_manager_rejects_unknown_provider():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        ModelManager().create_chat_model("carrier-pigeon", ModelConfig())


def test_manager_builds_ollama_model():
    config = ModelConfig(model_name="llama3.2:latest", temperature=0.1, timeout=30)
    model = ModelManager().create_chat_model("ollama", config)
    assert model.model == "llama3.2:latest"
    assert model.client_kwargs == {"timeout": 30}


@pytest.mark.parametrize("pair", [(1, "content"), ("reasoning", None)])
def test_pair_must_hold_text(pair):
    with pytest.raises(MalformedResponse, match="Expected text"):
        to_scene_pair(pair)
