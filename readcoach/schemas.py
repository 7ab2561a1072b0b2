from enum import Enum
from typing import Optional, TypedDict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr


class Provider(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    COHERE = "cohere"


class ProviderErrorKind(str, Enum):
    INVALID_CREDENTIAL = "InvalidCredential"
    RATE_LIMITED = "RateLimited"
    NETWORK_ERROR = "NetworkError"
    BAD_REQUEST = "BadRequest"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    UNCLASSIFIED = "Unclassified"
    NO_TEXT_GENERATED = "NoTextGenerated"
    UNSUPPORTED_PROVIDER = "UnsupportedProvider"
    UNIMPLEMENTED = "Unimplemented"


class ProviderConfig(TypedDict):
    provider: Provider
    api_key: SecretStr
    model: str


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ValidateTokenRequest(CamelModel):
    api_token: Optional[SecretStr] = Field(default=None, alias="apiToken")


class GenerateTextRequest(CamelModel):
    level: Optional[str] = None
    api_token: Optional[SecretStr] = Field(default=None, alias="apiToken")
    provider: Optional[str] = None
    model: Optional[str] = None
    custom_prompt: Optional[str] = Field(default=None, alias="customPrompt")


class TranslateWordRequest(CamelModel):
    word: Optional[str] = None
    target_language: Optional[str] = Field(default=None, alias="targetLanguage")
    language_code: Optional[str] = Field(default=None, alias="languageCode")
    ai_token: Optional[SecretStr] = Field(
        default=None,
        alias="aiToken",
        validation_alias=AliasChoices("aiToken", "apiToken"),
    )
    provider: Optional[str] = None
    model: Optional[str] = None


class GenerationResult(BaseModel):
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[ProviderErrorKind] = Field(default=None, exclude=True)

    @classmethod
    def ok(cls, text: str) -> "GenerationResult":
        return cls(success=True, text=text)

    @classmethod
    def fail(cls, error: str, kind: ProviderErrorKind) -> "GenerationResult":
        return cls(success=False, error=error, kind=kind)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TextResponse(BaseModel):
    success: bool = True
    text: str


class TranslationResponse(BaseModel):
    success: bool
    translation: Optional[str] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class ProviderInfo(BaseModel):
    id: Provider
    name: str
    description: str
    models: list[str]
    default_model: str = Field(serialization_alias="defaultModel")


class ProvidersResponse(BaseModel):
    success: bool = True
    providers: list[ProviderInfo]


class HealthResponse(BaseModel):
    status: str = "ok"
