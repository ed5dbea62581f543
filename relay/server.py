"""
OpenAI Relay Server
===================
Пробрасывает запросы браузерного фронтенда в OpenAI, чтобы обойти CORS
и не светить API-ключ на клиенте.
Запуск: python server.py
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from relay.errors import invalid_request
from relay.log import log
from relay.routes import router
from relay.settings import Settings


def utc_timestamp() -> str:
    """ISO 8601 в UTC с миллисекундами: 2024-05-01T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_app(settings: Settings, client: AsyncOpenAI | None = None) -> FastAPI:
    if client is None:
        client = AsyncOpenAI(api_key=settings.openai_api_key)

    app = FastAPI(title="OpenAI Relay")
    app.state.settings = settings
    app.state.openai_client = client

    allowed = set(settings.allowed_origins)

    # CORSMiddleware отсекает только preflight, поэтому чужой Origin
    # отбиваем сами, до маршрутов
    @app.middleware("http")
    async def reject_foreign_origin(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in allowed:
            log.warning(f"Отклонён запрос с чужого origin: {origin} {request.method} {request.url.path}")
            return JSONResponse(
                {"error": {"message": f"Origin {origin} не разрешён"}},
                status_code=403,
            )
        return await call_next(request)

    # добавлен последним, значит стоит снаружи и отвечает на preflight сам
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
            for err in exc.errors()
        )
        return invalid_request(problems or "Некорректный запрос")

    @app.get("/health")
    async def health():
        return JSONResponse({"status": "ok", "timestamp": utc_timestamp()})

    app.include_router(router)
    return app
