from typing import TypedDict

from langchain.chat_models import init_chat_model
from langchain_core.language_models import BaseChatModel

from readcoach.schemas import Provider, ProviderConfig
from readcoach.settings import settings


class ProviderCatalogEntry(TypedDict):
    name: str
    description: str
    models: list[str]


DEFAULT_MODELS: dict[Provider, str] = {
    Provider.OPENAI: "gpt-3.5-turbo",
    Provider.CLAUDE: "claude-3-haiku-20240307",
    Provider.GEMINI: "gemini-1.5-flash",
    Provider.COHERE: "command",
}
# Integration name understood by init_chat_model; cohere has none yet.
LANGCHAIN_PROVIDERS: dict[Provider, str] = {
    Provider.OPENAI: "openai",
    Provider.CLAUDE: "anthropic",
    Provider.GEMINI: "google_genai",
}
DISPLAY_NAMES: dict[Provider, str] = {
    Provider.OPENAI: "OpenAI",
    Provider.CLAUDE: "Claude",
    Provider.GEMINI: "Gemini",
    Provider.COHERE: "Cohere",
}
PROVIDER_CATALOG: dict[Provider, ProviderCatalogEntry] = {
    Provider.OPENAI: {
        "name": "OpenAI",
        "description": "ChatGPT & GPT-4 models",
        "models": ["gpt-3.5-turbo", "gpt-4", "gpt-4-turbo"],
    },
    Provider.CLAUDE: {
        "name": "Anthropic Claude",
        "description": "Claude 3 models",
        "models": ["claude-3-haiku-20240307", "claude-3-sonnet-20240229"],
    },
    Provider.GEMINI: {
        "name": "Google Gemini",
        "description": "Google Gemini models",
        "models": ["gemini-2.5-flash", "gemini-1.5-flash"],
    },
    Provider.COHERE: {
        "name": "Cohere",
        "description": "Cohere models",
        "models": ["command", "command-light"],
    },
}


def parse_provider(tag: str) -> Provider | None:
    try:
        return Provider(tag)
    except ValueError:
        return None


def resolve_model(provider: Provider, model: str | None = None) -> str:
    return model or DEFAULT_MODELS[provider]


def start_chat_model(config: ProviderConfig, max_tokens: int) -> BaseChatModel:
    """
    Builds a fresh chat model for a single request.

    Nothing is cached: the key and the client die with the request. SDK
    retries are disabled so one request reaches the vendor at most once.
    """
    return init_chat_model(
        config["model"],
        model_provider=LANGCHAIN_PROVIDERS[config["provider"]],
        api_key=config["api_key"].get_secret_value(),
        max_tokens=max_tokens,
        temperature=settings.temperature,
        max_retries=0,
    )
