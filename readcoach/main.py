import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from readcoach.ai_models.chat_model_initializer import DEFAULT_MODELS
from readcoach.prompts import LEVELS, WORD_COUNT_RANGES
from readcoach.routers import ai
from readcoach.schemas import ErrorResponse, HealthResponse, MessageResponse
from readcoach.settings import settings

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred on the server."
INVALID_BODY = "Invalid request body"

levels_table = "\n".join(
    f"| {level} | {WORD_COUNT_RANGES[level]} |" for level in LEVELS
)
providers_table = "\n".join(
    f"| {provider.value} | {model} |" for provider, model in DEFAULT_MODELS.items()
)

description = f"""
ReadCoach API generates graded English reading passages and single-word
translations using the learner's own AI provider credentials. Keys are sent
with each request and are never stored.

## Levels

| level | target word count |
| :---- | :---------------- |
{levels_table}

## Providers

| provider | default model |
| :------- | :------------ |
{providers_table}

`cohere` is listed but not implemented yet; calls to it fail with a fixed message.

## Responses

Every endpoint answers with `{{"success": true, ...}}` or
`{{"success": false, "error": "..."}}`.
"""


app = FastAPI(title=settings.app_name, version="0.1.0", description=description)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(ai.router)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Rejected malformed body on %s", request.url.path)
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_BODY)


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s", request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, UNEXPECTED_ERROR)


@app.get("/")
async def get_welcome_message() -> MessageResponse:
    return MessageResponse(
        message="Welcome to ReadCoach API! To access the docs, go to /docs or /redoc"
    )


@app.get("/health")
async def health() -> HealthResponse:
    return HealthResponse()
