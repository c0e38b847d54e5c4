import logging
import threading
from typing import Optional

import uvicorn
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse
from telebot import TeleBot
from telebot.types import Update

from travelbot.bot import build_relay, create_bot, register_handlers, verify_identity
from travelbot.config import get_settings
from travelbot.logging_setup import setup_logging
from travelbot.services.completion import CompletionClient

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "Bot is running"


def create_app(
    bot: Optional[TeleBot] = None, webhook_secret: Optional[str] = None
) -> FastAPI:
    """Build the HTTP surface: liveness checks, plus the webhook when a bot is given."""
    app = FastAPI(
        title="TravelBot",
        description="Telegram travel-guide bot backed by a chat-completion API.",
        version="0.1.0",
    )

    @app.get("/", response_class=PlainTextResponse)
    async def liveness() -> str:
        return LIVENESS_TEXT

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Simple health-check endpoint."""
        return {"status": "ok", "model": CompletionClient.MODEL}

    if bot is not None:

        @app.post("/webhook")
        async def webhook(
            request: Request,
            secret_token: Optional[str] = Header(
                default=None, alias="X-Telegram-Bot-Api-Secret-Token"
            ),
        ) -> dict[str, bool]:
            """Accept one Telegram update and hand it to the bot's dispatch threads."""
            if webhook_secret and secret_token != webhook_secret:
                raise HTTPException(status_code=403, detail="Invalid secret token.")
            body = await request.body()
            try:
                update = Update.de_json(body.decode("utf-8"))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Rejected undecodable webhook update: %s", exc)
                raise HTTPException(status_code=400, detail="Invalid update.") from exc
            if update is None:
                raise HTTPException(status_code=400, detail="Invalid update.")
            bot.process_new_updates([update])
            return {"ok": True}

    return app


app = create_app()


def run() -> None:
    """Start the bot in long-polling or webhook mode."""
    settings = get_settings()
    setup_logging(settings.log_level)

    bot = create_bot(settings)
    relay, completion, dispatcher = build_relay(settings, bot)
    register_handlers(bot, relay)
    verify_identity(bot, settings)

    try:
        if settings.use_webhook:
            bot.remove_webhook()
            bot.set_webhook(
                url=settings.webhook_url, secret_token=settings.webhook_secret
            )
            logger.info("Webhook registered at %s", settings.webhook_url)
            uvicorn.run(
                create_app(bot, settings.webhook_secret),
                host="0.0.0.0",
                port=settings.port,
            )
        else:
            bot.remove_webhook()
            server = threading.Thread(
                target=uvicorn.run,
                args=(create_app(),),
                kwargs={"host": "0.0.0.0", "port": settings.port},
                name="health-server",
                daemon=True,
            )
            server.start()
            logger.info("Bot listening via long polling")
            bot.infinity_polling()
    finally:
        dispatcher.shutdown(wait=False)
        completion.close()


if __name__ == "__main__":
    run()
