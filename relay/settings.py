"""
Настройки relay
===============
Собираются один раз при старте из переменных окружения (и .env, если есть)
и дальше не меняются.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# ── Настройки ──────────────────────────────────────────────────────────────────
DEFAULT_HOST        = "0.0.0.0"
DEFAULT_PORT        = 3001
DEFAULT_MODEL       = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7

# Фронтенды, которым разрешено ходить в relay из браузера
ALLOWED_ORIGINS = (
    "https://keen-tiramisu-104b8a.netlify.app",
    "http://localhost:5575",
    "http://localhost:5173",
)
# ───────────────────────────────────────────────────────────────────────────────


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    openai_api_key: str | None = None
    allowed_origins: tuple[str, ...] = ALLOWED_ORIGINS
    default_model: str = DEFAULT_MODEL
    default_temperature: float = DEFAULT_TEMPERATURE
    log_file: str | None = None


def load_settings() -> Settings:
    load_dotenv()

    raw_port = os.getenv("PORT") or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"PORT должен быть числом, получено: {raw_port!r}") from None

    return Settings(
        host=os.getenv("HOST") or DEFAULT_HOST,
        port=port,
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        log_file=os.getenv("RELAY_LOG_FILE") or None,
    )
