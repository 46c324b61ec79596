#All providers for different llms

from typing import Optional
from abc import ABC, abstractmethod

from langchain_core.language_models import BaseLanguageModel

from langchain_ollama import OllamaLLM
from langchain_openai import ChatOpenAI


DEFAULT_MODEL = "deepseek-r1:32b"


class ModelConfig:
    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        **kwargs
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.extra = kwargs


class BaseModelProvider(ABC):
    @abstractmethod
    def create_model(self, config: ModelConfig) -> BaseLanguageModel:
        pass


class OllamaProvider(BaseModelProvider):
    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url

    def create_model(self, config: ModelConfig) -> BaseLanguageModel:
        client_kwargs = {}
        if config.timeout is not None:
            client_kwargs["timeout"] = config.timeout
        return OllamaLLM(
            model=config.model_name,
            temperature=config.temperature,
            num_predict=config.max_tokens,
            base_url=self.base_url,
            client_kwargs=client_kwargs,
            **config.extra,
        )


class OpenAIProvider(BaseModelProvider):
    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def create_model(self, config: ModelConfig) -> BaseLanguageModel:
        return ChatOpenAI(
            model=config.model_name,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            api_key=self.api_key,
            **config.extra,
        )
