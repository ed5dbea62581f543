"""Маршруты /api/openai/*: каждый — ровно один вызов OpenAI."""

import inspect
import json
from typing import Any, Callable

from fastapi import APIRouter, Depends, Request
from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict

from relay.errors import UpstreamError, call_provider, invalid_request, respond
from relay.log import log
from relay.settings import Settings

router = APIRouter(prefix="/api/openai")

# параметры самого SDK и путь: из тела запроса их не принимаем
RESERVED_KEYS = {"thread_id", "extra_headers", "extra_query", "extra_body", "timeout"}


class ChatCompletionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    messages: list[dict[str, Any]]
    temperature: float | None = None
    max_tokens: int | None = None
    response_format: dict[str, Any] | None = None


class InvalidBody(Exception):
    pass


def get_client(request: Request) -> AsyncOpenAI:
    return request.app.state.openai_client


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def read_body(request: Request) -> dict[str, Any]:
    """Тело запроса как dict; пустое тело — {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise InvalidBody("Тело запроса не является корректным JSON") from None
    if not isinstance(body, dict):
        raise InvalidBody("Тело запроса должно быть JSON-объектом")
    return body


def split_body(method: Callable[..., Any], body: dict[str, Any]) -> dict[str, Any]:
    """
    Ключи, которые знает метод SDK, идут именованными аргументами,
    остальные уходят в extra_body и попадают в JSON запроса как есть.
    """
    params = inspect.signature(method).parameters.values()
    accepts_any = any(p.kind is p.VAR_KEYWORD for p in params)
    known = {p.name for p in params if p.kind is p.KEYWORD_ONLY}

    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in body.items():
        if key not in RESERVED_KEYS and (accepts_any or key in known):
            kwargs[key] = value
        else:
            extra[key] = value
    if extra:
        kwargs["extra_body"] = extra
    return kwargs


def build_completion_params(req: ChatCompletionRequest, settings: Settings) -> dict[str, Any]:
    params: dict[str, Any] = {
        "model": req.model or settings.default_model,
        "messages": req.messages,
        "temperature": req.temperature if req.temperature is not None else settings.default_temperature,
    }
    # необязательные поля не отправляем вовсе, если их не передали
    if req.max_tokens is not None:
        params["max_tokens"] = req.max_tokens
    if req.response_format is not None:
        params["response_format"] = req.response_format
    return params


@router.post("/chat/completions")
async def chat_completions(
    req: ChatCompletionRequest,
    client: AsyncOpenAI = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    log.info(f"Запрос к OpenAI: model={req.model}, сообщений={len(req.messages)}")
    params = build_completion_params(req, settings)

    result = await call_provider(lambda: client.chat.completions.create(**params), "chat completion")
    if not isinstance(result, UpstreamError):
        log.info("Ответ OpenAI получен")
    return respond(result, detailed=True)


@router.post("/threads")
async def create_thread(client: AsyncOpenAI = Depends(get_client)):
    result = await call_provider(lambda: client.beta.threads.create(), "создание треда")
    return respond(result)


@router.post("/threads/{thread_id}/messages")
async def create_message(thread_id: str, request: Request, client: AsyncOpenAI = Depends(get_client)):
    try:
        body = await read_body(request)
    except InvalidBody as e:
        return invalid_request(str(e))

    create = client.beta.threads.messages.create
    params = split_body(create, body)
    result = await call_provider(
        lambda: create(thread_id, **params),
        "добавление сообщения",
    )
    return respond(result)


@router.get("/threads/{thread_id}/messages")
async def list_messages(thread_id: str, client: AsyncOpenAI = Depends(get_client)):
    result = await call_provider(
        lambda: client.beta.threads.messages.list(thread_id),
        "получение сообщений",
    )
    return respond(result)


@router.post("/threads/{thread_id}/runs")
async def create_run(thread_id: str, request: Request, client: AsyncOpenAI = Depends(get_client)):
    try:
        body = await read_body(request)
    except InvalidBody as e:
        return invalid_request(str(e))

    create = client.beta.threads.runs.create
    params = split_body(create, body)
    result = await call_provider(
        lambda: create(thread_id, **params),
        "создание run",
    )
    return respond(result)


@router.get("/threads/{thread_id}/runs/{run_id}")
async def retrieve_run(thread_id: str, run_id: str, client: AsyncOpenAI = Depends(get_client)):
    result = await call_provider(
        lambda: client.beta.threads.runs.retrieve(run_id, thread_id=thread_id),
        "получение run",
    )
    return respond(result)


@router.post("/threads/{thread_id}/runs/{run_id}/cancel")
async def cancel_run(thread_id: str, run_id: str, client: AsyncOpenAI = Depends(get_client)):
    result = await call_provider(
        lambda: client.beta.threads.runs.cancel(run_id, thread_id=thread_id),
        "отмена run",
    )
    return respond(result)
