from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from relay.server import create_app
from relay.settings import Settings

FRONTEND = "http://localhost:5173"


def make_fake_openai():
    """Заглушка AsyncOpenAI: только те методы, которые дёргает relay."""
    return SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=AsyncMock())),
        beta=SimpleNamespace(
            threads=SimpleNamespace(
                create=AsyncMock(),
                messages=SimpleNamespace(create=AsyncMock(), list=AsyncMock()),
                runs=SimpleNamespace(create=AsyncMock(), retrieve=AsyncMock(), cancel=AsyncMock()),
            )
        ),
    )


def api_status_error(status: int, message: str, type: str | None = None, code: str | None = None):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    body = {"message": message, "type": type, "code": code}
    return openai.APIStatusError(message, response=response, body=body)


@pytest.fixture
def fake_openai():
    return make_fake_openai()


@pytest.fixture
def settings():
    return Settings(openai_api_key="sk-test")


@pytest.fixture
def app(settings, fake_openai):
    return create_app(settings, client=fake_openai)


@pytest.fixture
def client(app):
    return TestClient(app)


def make_real_openai(handler):
    """Настоящий AsyncOpenAI, но ответы отдаёт handler вместо api.openai.com."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return openai.AsyncOpenAI(
        api_key="sk-test",
        base_url="https://openai.test/v1",
        http_client=http_client,
        max_retries=0,
    )
