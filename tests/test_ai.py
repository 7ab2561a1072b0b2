from http import HTTPStatus
import logging

from langchain_core.messages import SystemMessage
import pytest

from readcoach.prompts import SYSTEM_PROMPTS
from readcoach.routers.ai import WELCOME_MESSAGE


class DummyResponse:
    def __init__(self, content):
        self.content = content


class DummyModel:
    def __init__(self, content, model_name="dummy_model"):
        self.content = content
        self.model_name = model_name
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        return DummyResponse(content=self.content)


class ErrorDummyModel:
    def __init__(self, error):
        self.error = error
        self.model_name = "error_model"

    async def ainvoke(self, messages):
        raise self.error


@pytest.fixture
def chat_models(monkeypatch):
    """Collects every chat model the adapter asks for; no vendor is reached."""
    state = {"model": DummyModel("The cat sat."), "calls": []}

    def fake_start_chat_model(config, max_tokens):
        state["calls"].append({"config": config, "max_tokens": max_tokens})
        return state["model"]

    monkeypatch.setattr(
        "readcoach.ai_models.text_generator.start_chat_model", fake_start_chat_model
    )
    return state


GENERATE_BODY = {
    "level": "Elementary",
    "apiToken": "sk-x",
    "provider": "openai",
    "model": "gpt-3.5-turbo",
}
TRANSLATE_BODY = {
    "word": "hello",
    "targetLanguage": "Spanish",
    "languageCode": "es",
    "aiToken": "sk-x",
    "provider": "openai",
    "model": "gpt-3.5-turbo",
}


# ----- VALIDATE TOKEN


def test_validate_token_returns_welcome_without_calling_vendor(client, chat_models):
    """The token is only checked for presence, never against a vendor."""
    response = client.post("/api/ai/validate-token", json={"apiToken": "not-a-real-key"})

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"success": True, "message": WELCOME_MESSAGE}
    assert chat_models["calls"] == []


@pytest.mark.parametrize("body", [{}, {"apiToken": ""}, {"apiToken": None}])
def test_validate_token_requires_token(client, body):
    response = client.post("/api/ai/validate-token", json=body)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"success": False, "error": "API token is required"}


# ----- GENERATE TEXT


def test_generate_text_success(client, chat_models):
    response = client.post("/api/ai/generate-text", json=GENERATE_BODY)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"success": True, "text": "The cat sat."}
    call = chat_models["calls"][0]
    assert call["max_tokens"] == 500
    assert call["config"]["model"] == "gpt-3.5-turbo"
    assert chat_models["model"].messages[0] == SystemMessage(
        content=SYSTEM_PROMPTS["Elementary"]
    )
    assert "150-200 words" in chat_models["model"].messages[1].content


def test_generate_text_advanced_budget(client, chat_models):
    client.post("/api/ai/generate-text", json={**GENERATE_BODY, "level": "Advanced"})

    assert chat_models["calls"][0]["max_tokens"] == 700


def test_generate_text_custom_prompt(client, chat_models):
    body = {**GENERATE_BODY, "level": "Advanced", "customPrompt": "Greet the student."}

    response = client.post("/api/ai/generate-text", json=body)

    assert response.status_code == HTTPStatus.OK
    assert chat_models["calls"][0]["max_tokens"] == 200
    assert chat_models["model"].messages[1].content == "Greet the student."


@pytest.mark.parametrize("missing", ["level", "apiToken", "provider", "model"])
def test_generate_text_missing_field(client, chat_models, missing):
    body = {key: value for key, value in GENERATE_BODY.items() if key != missing}

    response = client.post("/api/ai/generate-text", json=body)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {
        "success": False,
        "error": "Level, API token, provider, and model are required",
    }
    assert chat_models["calls"] == []


def test_generate_text_provider_failure_is_wrapped(client, chat_models):
    chat_models["model"] = ErrorDummyModel(RuntimeError("401 Unauthorized"))

    response = client.post("/api/ai/generate-text", json=GENERATE_BODY)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {
        "success": False,
        "error": "AI text generation failed: Invalid OPENAI API key. "
        "Please check your API key and try again..",
    }


def test_generate_text_no_text_is_a_400(client, chat_models):
    chat_models["model"] = DummyModel("")

    response = client.post("/api/ai/generate-text", json=GENERATE_BODY)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["error"] == (
        "AI text generation failed: No text generated from OpenAI."
    )


def test_generate_text_cohere_not_implemented(client, chat_models):
    body = {**GENERATE_BODY, "provider": "cohere", "model": "command"}

    response = client.post("/api/ai/generate-text", json=body)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["error"] == (
        "AI text generation failed: Cohere integration not yet implemented."
    )
    assert chat_models["calls"] == []


def test_generate_text_unexpected_error_is_a_500(client, monkeypatch):
    async def broken_generate_text(*args, **kwargs):
        raise RuntimeError("sk-x leaked internals")

    monkeypatch.setattr("readcoach.routers.ai.generate_text", broken_generate_text)

    response = client.post("/api/ai/generate-text", json=GENERATE_BODY)

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json() == {
        "success": False,
        "error": "An unexpected error occurred on the server.",
    }


def test_generate_text_rejects_malformed_body(client, chat_models):
    response = client.post("/api/ai/generate-text", json={**GENERATE_BODY, "level": 5})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"success": False, "error": "Invalid request body"}
    assert chat_models["calls"] == []


def test_generate_text_does_not_log_token(client, chat_models, caplog):
    caplog.set_level(logging.DEBUG)
    chat_models["model"] = ErrorDummyModel(RuntimeError("bad key sk-x-secret-value"))

    client.post(
        "/api/ai/generate-text", json={**GENERATE_BODY, "apiToken": "sk-x-secret-value"}
    )

    assert "sk-x-secret-value" not in caplog.text


# ----- TRANSLATE WORD


def test_translate_word_success_is_trimmed(client, chat_models):
    chat_models["model"] = DummyModel("  hola\n")

    response = client.post("/api/ai/translate-word", json=TRANSLATE_BODY)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"success": True, "translation": "hola"}
    assert chat_models["calls"][0]["max_tokens"] == 50
    assert chat_models["model"].messages[0] == SystemMessage(
        content=SYSTEM_PROMPTS["Elementary"]
    )


def test_translate_word_accepts_api_token_alias(client, chat_models):
    body = {key: value for key, value in TRANSLATE_BODY.items() if key != "aiToken"}
    body["apiToken"] = "sk-x"

    response = client.post("/api/ai/translate-word", json=body)

    assert response.json() == {"success": True, "translation": "The cat sat."}


@pytest.mark.parametrize("missing", ["aiToken", "provider"])
def test_translate_word_without_credentials(client, chat_models, missing):
    body = {key: value for key, value in TRANSLATE_BODY.items() if key != missing}

    response = client.post("/api/ai/translate-word", json=body)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {
        "success": False,
        "error": "AI token and provider are required for translation",
    }
    assert chat_models["calls"] == []


def test_translate_word_example_without_token(client, chat_models):
    response = client.post(
        "/api/ai/translate-word",
        json={"word": "hello", "targetLanguage": "Spanish", "languageCode": "es"},
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {
        "success": False,
        "error": "AI token and provider are required for translation",
    }


@pytest.mark.parametrize("missing", ["word", "targetLanguage", "languageCode"])
def test_translate_word_missing_field(client, chat_models, missing):
    body = {key: value for key, value in TRANSLATE_BODY.items() if key != missing}

    response = client.post("/api/ai/translate-word", json=body)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {
        "success": False,
        "error": "Word, target language, and language code are required",
    }


def test_translate_word_provider_failure(client, chat_models):
    chat_models["model"] = ErrorDummyModel(RuntimeError("Too Many Requests"))

    response = client.post("/api/ai/translate-word", json=TRANSLATE_BODY)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {
        "success": False,
        "error": 'Unable to translate "hello". '
        "OPENAI rate limit exceeded. Please try again in a few minutes.",
    }


def test_translate_word_unexpected_error_is_a_500(client, monkeypatch):
    async def broken_generate_text(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr("readcoach.routers.ai.generate_text", broken_generate_text)

    response = client.post("/api/ai/translate-word", json=TRANSLATE_BODY)

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "error": "Failed to translate word"}


# ----- PROVIDERS


def test_list_providers(client):
    response = client.get("/api/ai/providers")

    assert response.status_code == HTTPStatus.OK
    providers = {entry["id"]: entry for entry in response.json()["providers"]}
    assert list(providers) == ["openai", "claude", "gemini", "cohere"]
    assert providers["openai"]["defaultModel"] == "gpt-3.5-turbo"
    assert "gpt-4" in providers["openai"]["models"]
    assert providers["claude"]["name"] == "Anthropic Claude"
