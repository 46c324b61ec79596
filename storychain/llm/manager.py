#All stuff with llm selection is here

from typing import Optional
from langchain_core.language_models import BaseLanguageModel

from storychain.llm import providers


PROVIDER_OPTIONS = ("ollama", "openai")


class ModelManager:

    def create_chat_model(
        self,
        option: str,
        config: providers.ModelConfig,
        api_info: Optional[str] = None
    ) -> BaseLanguageModel:
        match option:
            case "ollama":
                return providers.OllamaProvider(api_info).create_model(config)
            case "openai":
                return providers.OpenAIProvider(api_info).create_model(config)
            case _:
                raise ValueError(f"Unknown LLM provider: {option}")
