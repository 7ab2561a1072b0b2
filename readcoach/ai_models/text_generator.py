import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterator, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import SecretStr

from readcoach.ai_models.chat_model_initializer import (
    DISPLAY_NAMES,
    parse_provider,
    resolve_model,
    start_chat_model,
)
from readcoach.schemas import (
    GenerationResult,
    Provider,
    ProviderConfig,
    ProviderErrorKind,
)
from readcoach.settings import settings

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown AI service error"
SECRET_MASK = "***"

# Checked in order; the first category whose marker appears wins.
ERROR_CATEGORIES: tuple[tuple[ProviderErrorKind, tuple[str, ...], str], ...] = (
    (
        ProviderErrorKind.INVALID_CREDENTIAL,
        ("api key", "api_key_invalid", "unauthorized"),
        "Invalid {provider} API key. Please check your API key and try again.",
    ),
    (
        ProviderErrorKind.RATE_LIMITED,
        ("rate limit", "quota", "too many requests"),
        "{provider} rate limit exceeded. Please try again in a few minutes.",
    ),
    (
        ProviderErrorKind.NETWORK_ERROR,
        ("network", "connection", "timeout"),
        "Network error connecting to {provider}. Please check your internet connection.",
    ),
    (
        ProviderErrorKind.BAD_REQUEST,
        ("400", "bad request"),
        "Invalid request to {provider}. Please check your API key configuration.",
    ),
    (
        ProviderErrorKind.UPSTREAM_UNAVAILABLE,
        ("500", "internal server error"),
        "{provider} service is temporarily unavailable. Please try again later.",
    ),
)

AUTH_FAILURE_MESSAGES: dict[Provider, str] = {
    Provider.OPENAI: (
        "Invalid OpenAI API key. Please check your API key at "
        "https://platform.openai.com/api-keys"
    ),
    Provider.CLAUDE: (
        "Invalid Claude API key. Please check your API key at "
        "https://console.anthropic.com/"
    ),
    Provider.GEMINI: (
        "Invalid Gemini API key. Please get a valid API key from "
        "https://makersuite.google.com/app/apikey"
    ),
}


class ProviderCallError(Exception):
    """Raised when the vendor client fails while serving a call."""

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        super().__init__(message if message is not None else str(cause))
        self.cause = cause


def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yields the error and the exceptions it was raised from, outermost first."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def get_status_code(error: BaseException) -> Optional[int]:
    """
    Reads the HTTP status the vendor SDK attached to its exception, if any.

    Integrations often re-raise the SDK error inside their own exception type,
    so the chain is searched as well.
    """
    for link in iter_error_chain(error):
        for attr in ("status_code", "code", "status"):
            value = getattr(link, attr, None)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
    return None


def mask_secret(message: str, api_key: Optional[SecretStr]) -> str:
    secret = api_key.get_secret_value() if api_key else ""
    if secret and secret in message:
        return message.replace(secret, SECRET_MASK)
    return message


def is_auth_failure(provider: Provider, error: BaseException) -> bool:
    status = get_status_code(error)
    if provider in (Provider.OPENAI, Provider.CLAUDE):
        return status == 401
    if provider == Provider.GEMINI:
        return status == 400 and any(
            "api key not valid" in str(link).lower()
            for link in iter_error_chain(error)
        )
    return False


def classify_message(message: str) -> ProviderErrorKind:
    lowered = message.lower()
    for kind, markers, _ in ERROR_CATEGORIES:
        if any(marker in lowered for marker in markers):
            return kind
    return ProviderErrorKind.UNCLASSIFIED


def user_message(kind: ProviderErrorKind, provider: str, raw_message: str) -> str:
    for category, _, template in ERROR_CATEGORIES:
        if category == kind:
            return template.format(provider=provider.upper())
    return raw_message or UNKNOWN_ERROR


def classify_error(config: ProviderConfig, error: ProviderCallError) -> GenerationResult:
    """
    Converts a failed vendor call into a failure result.

    A 401-style rejection reported by the SDK itself maps straight to the
    vendor's credential message; everything else is sniffed from the message.
    """
    provider = config["provider"]
    if is_auth_failure(provider, error.cause):
        return GenerationResult.fail(
            AUTH_FAILURE_MESSAGES[provider], ProviderErrorKind.INVALID_CREDENTIAL
        )
    raw_message = mask_secret(str(error), config["api_key"])
    kind = classify_message(raw_message)
    return GenerationResult.fail(user_message(kind, provider.value, raw_message), kind)


async def ainvoke_model(model: BaseChatModel, messages: list[BaseMessage]) -> Any:
    """
    Invokes the chat model once.

    No deadline is applied unless `request_timeout` is configured. Any failure
    is wrapped in ProviderCallError so the caller can classify it.
    """
    try:
        if settings.request_timeout:
            return await asyncio.wait_for(
                model.ainvoke(messages), timeout=settings.request_timeout
            )
        return await model.ainvoke(messages)
    except asyncio.TimeoutError as e:
        raise ProviderCallError(
            e, f"Request timeout after {settings.request_timeout} seconds"
        ) from e
    except Exception as e:
        raise ProviderCallError(e) from e


def _non_empty(text: Any) -> Optional[str]:
    if isinstance(text, str) and text.strip():
        return text
    return None


def text_from_choice(response: Any) -> Optional[str]:
    return _non_empty(getattr(response, "content", None))


def text_from_content_blocks(response: Any) -> Optional[str]:
    content = getattr(response, "content", None)
    if isinstance(content, str):
        return _non_empty(content)
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            return _non_empty(block.get("text"))
    return None


def text_from_parts(response: Any) -> Optional[str]:
    content = getattr(response, "content", None)
    if isinstance(content, str):
        return _non_empty(content)
    if not isinstance(content, list) or not content:
        return None
    part = content[0]
    if isinstance(part, dict):
        return _non_empty(part.get("text"))
    return _non_empty(part)


def _no_text(provider: Provider) -> GenerationResult:
    return GenerationResult.fail(
        f"No text generated from {DISPLAY_NAMES[provider]}",
        ProviderErrorKind.NO_TEXT_GENERATED,
    )


async def generate_with_openai(
    config: ProviderConfig, prompt: str, system_prompt: str, max_tokens: int
) -> GenerationResult:
    model = start_chat_model(config, max_tokens)
    messages = [SystemMessage(content=system_prompt), HumanMessage(content=prompt)]
    text = text_from_choice(await ainvoke_model(model, messages))
    return GenerationResult.ok(text) if text else _no_text(config["provider"])


async def generate_with_claude(
    config: ProviderConfig, prompt: str, system_prompt: str, max_tokens: int
) -> GenerationResult:
    # The anthropic integration lifts the SystemMessage into the `system` field.
    model = start_chat_model(config, max_tokens)
    messages = [SystemMessage(content=system_prompt), HumanMessage(content=prompt)]
    text = text_from_content_blocks(await ainvoke_model(model, messages))
    return GenerationResult.ok(text) if text else _no_text(config["provider"])


async def generate_with_gemini(
    config: ProviderConfig, prompt: str, system_prompt: str, max_tokens: int
) -> GenerationResult:
    # No system role here: the persona is prepended to the prompt.
    model = start_chat_model(config, max_tokens)
    messages = [HumanMessage(content=f"{system_prompt}\n\n{prompt}")]
    text = text_from_parts(await ainvoke_model(model, messages))
    return GenerationResult.ok(text) if text else _no_text(config["provider"])


async def generate_with_cohere(
    config: ProviderConfig, prompt: str, system_prompt: str, max_tokens: int
) -> GenerationResult:
    return GenerationResult.fail(
        f"{DISPLAY_NAMES[config['provider']]} integration not yet implemented",
        ProviderErrorKind.UNIMPLEMENTED,
    )


ProviderHandler = Callable[
    [ProviderConfig, str, str, int], Awaitable[GenerationResult]
]
PROVIDER_HANDLERS: dict[Provider, ProviderHandler] = {
    Provider.OPENAI: generate_with_openai,
    Provider.CLAUDE: generate_with_claude,
    Provider.GEMINI: generate_with_gemini,
    Provider.COHERE: generate_with_cohere,
}


async def generate(
    config: ProviderConfig, prompt: str, system_prompt: str, max_tokens: int
) -> GenerationResult:
    provider = config["provider"]
    handler = PROVIDER_HANDLERS[provider]
    logger.debug("Invoking %s model %s", provider.value, config["model"])
    try:
        return await handler(config, prompt, system_prompt, max_tokens)
    except ProviderCallError as e:
        logger.error(
            "AI generation error (%s): %s",
            provider.value,
            mask_secret(str(e), config["api_key"]),
        )
        return classify_error(config, e)


async def generate_text(
    provider_tag: str,
    api_key: SecretStr,
    model: Optional[str],
    prompt: str,
    system_prompt: str,
    max_tokens: int,
) -> GenerationResult:
    """
    Entry point used by the routers: resolves the provider tag and model, then
    dispatches to the vendor handler.
    """
    provider = parse_provider(provider_tag)
    if provider is None:
        return GenerationResult.fail(
            f"Unsupported AI provider: {provider_tag}",
            ProviderErrorKind.UNSUPPORTED_PROVIDER,
        )
    config: ProviderConfig = {
        "provider": provider,
        "api_key": api_key,
        "model": resolve_model(provider, model),
    }
    return await generate(config, prompt, system_prompt, max_tokens)
