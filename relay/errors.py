"""
Ошибки провайдера
=================
Любой вызов OpenAI оборачивается в call_provider: на выходе либо JSON-ответ
провайдера как есть, либо UpstreamError. В HTTP-ответ ошибку превращает
только UpstreamError.to_response.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from relay.log import log


def provider_message(exc: Exception) -> str | None:
    """Текст ошибки из тела ответа OpenAI, без обёртки "Error code: 429 - {...}"."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        # SDK обычно уже снимает внешний {"error": ...}, но не всегда
        inner = body.get("error")
        if isinstance(inner, dict):
            body = inner
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


@dataclass(frozen=True)
class UpstreamError:
    message: str
    status: int = 500
    type: str | None = None
    code: str | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> "UpstreamError":
        # APIStatusError несёт status_code, APIError — type/code;
        # у остальных исключений их нет, тогда 500
        status = getattr(exc, "status_code", None)
        if not isinstance(status, int):
            status = 500
        message = provider_message(exc) or getattr(exc, "message", None) or str(exc)
        code = getattr(exc, "code", None)
        return cls(
            message=message,
            status=status,
            type=getattr(exc, "type", None),
            code=str(code) if code is not None else None,
        )

    def to_response(self, detailed: bool = False) -> JSONResponse:
        error: dict[str, Any] = {"message": self.message}
        if detailed:
            if self.type is not None:
                error["type"] = self.type
            if self.code is not None:
                error["code"] = self.code
        return JSONResponse({"error": error}, status_code=self.status)


def to_payload(result: Any) -> Any:
    """Модель SDK → JSON ровно с теми полями, что прислал провайдер."""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", exclude_unset=True)
    return result


async def call_provider(call: Callable[[], Awaitable[Any]], action: str) -> Any | UpstreamError:
    try:
        result = await call()
    except Exception as e:
        error = UpstreamError.from_exception(e)
        log.error(f"Ошибка OpenAI ({action}): {error.message}")
        return error
    return to_payload(result)


def respond(result: Any | UpstreamError, detailed: bool = False) -> JSONResponse:
    if isinstance(result, UpstreamError):
        return result.to_response(detailed=detailed)
    return JSONResponse(content=result)


def invalid_request(message: str) -> JSONResponse:
    return JSONResponse(
        {"error": {"message": message, "type": "invalid_request_error"}},
        status_code=400,
    )
