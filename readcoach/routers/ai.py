import logging

from fastapi import APIRouter, HTTPException, status

from readcoach.ai_models.chat_model_initializer import (
    DEFAULT_MODELS,
    PROVIDER_CATALOG,
)
from readcoach.ai_models.text_generator import generate_text
from readcoach.prompts import (
    TRANSLATION_LEVEL,
    TRANSLATION_MAX_TOKENS,
    build_prompt,
    build_translation_prompt,
    get_max_tokens,
    get_system_prompt,
)
from readcoach.schemas import (
    GenerateTextRequest,
    MessageResponse,
    ProviderInfo,
    ProvidersResponse,
    TextResponse,
    TranslateWordRequest,
    TranslationResponse,
    ValidateTokenRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["ai"])

WELCOME_MESSAGE = (
    "Hello! I am your personal English teacher. I am ready to help you learn. "
    "Please select your proficiency level to begin."
)
TOKEN_REQUIRED = "API token is required"
GENERATION_FIELDS_REQUIRED = "Level, API token, provider, and model are required"
TRANSLATION_FIELDS_REQUIRED = "Word, target language, and language code are required"
TRANSLATION_CREDENTIALS_REQUIRED = "AI token and provider are required for translation"
UNEXPECTED_ERROR = "An unexpected error occurred on the server."
TRANSLATION_FAILED = "Failed to translate word"


def has_secret(value) -> bool:
    return value is not None and bool(value.get_secret_value())


@router.post("/validate-token")
async def validate_token(request: ValidateTokenRequest) -> MessageResponse:
    """
    Accepts an API token and greets the learner.

    The token is only checked for presence; it is first exercised against a
    vendor on the next generation call.
    """
    if not has_secret(request.api_token):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TOKEN_REQUIRED)
    return MessageResponse(message=WELCOME_MESSAGE)


@router.post("/generate-text")
async def generate_reading_text(request: GenerateTextRequest) -> TextResponse:
    """
    Generates a reading passage for the requested level.

    A custom prompt replaces the reading template and gets a smaller token
    budget. Provider failures come back as 400 with the provider's message.
    """
    if not (
        request.level
        and has_secret(request.api_token)
        and request.provider
        and request.model
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=GENERATION_FIELDS_REQUIRED
        )
    logger.info(
        "Generating text with %s (model: %s) for %s level",
        request.provider,
        request.model,
        request.level,
    )
    try:
        result = await generate_text(
            request.provider,
            request.api_token,
            request.model,
            build_prompt(request.level, request.custom_prompt),
            get_system_prompt(request.level),
            get_max_tokens(request.level, request.custom_prompt),
        )
    except Exception:
        logger.exception("Unhandled text generation error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UNEXPECTED_ERROR
        )

    if not result.success:
        logger.warning("AI generation failed for %s: %s", request.provider, result.error)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"AI text generation failed: {result.error}.",
        )
    logger.info("Successfully generated AI text with %s", request.provider)
    return TextResponse(text=result.text)


@router.post("/translate-word", response_model_exclude_none=True)
async def translate_word(request: TranslateWordRequest) -> TranslationResponse:
    """
    Translates a single English word with the learner's own provider.

    Missing credentials are an expected client state and answer 200 with
    success false.
    """
    if not (request.word and request.target_language and request.language_code):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=TRANSLATION_FIELDS_REQUIRED
        )
    logger.info(
        'Translating "%s" to %s (%s)',
        request.word,
        request.target_language,
        request.language_code,
    )
    if not (has_secret(request.ai_token) and request.provider):
        logger.info("No AI token or provider provided for translation")
        return TranslationResponse(success=False, error=TRANSLATION_CREDENTIALS_REQUIRED)

    try:
        result = await generate_text(
            request.provider,
            request.ai_token,
            request.model,
            build_translation_prompt(request.word, request.target_language),
            get_system_prompt(TRANSLATION_LEVEL),
            TRANSLATION_MAX_TOKENS,
        )
    except Exception:
        logger.exception("Word translation error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=TRANSLATION_FAILED
        )

    if not result.success:
        logger.warning("AI translation failed: %s", result.error)
        return TranslationResponse(
            success=False, error=f'Unable to translate "{request.word}". {result.error}'
        )
    translation = result.text.strip()
    logger.info('AI translation successful: "%s" -> "%s"', request.word, translation)
    return TranslationResponse(success=True, translation=translation)


@router.get("/providers")
async def list_providers() -> ProvidersResponse:
    return ProvidersResponse(
        providers=[
            ProviderInfo(
                id=provider,
                name=entry["name"],
                description=entry["description"],
                models=entry["models"],
                default_model=DEFAULT_MODELS[provider],
            )
            for provider, entry in PROVIDER_CATALOG.items()
        ]
    )
