"""
OpenAI Relay
============
Запуск: python server.py
Порт и ключ берутся из окружения (или .env): PORT, OPENAI_API_KEY.
"""

import uvicorn

from relay.log import setup_logging
from relay.server import create_app
from relay.settings import load_settings


def main():
    settings = load_settings()
    log = setup_logging(settings.log_file)

    app = create_app(settings)

    log.info(f"🚀 OpenAI Relay запущен на порту {settings.port}")
    log.info(f"✅ CORS разрешён для: {', '.join(settings.allowed_origins)}")
    log.info("📡 Готов принимать запросы к OpenAI")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    main()
