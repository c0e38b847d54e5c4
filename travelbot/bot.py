from __future__ import annotations

import logging
from typing import Tuple

import requests
from telebot import TeleBot, util
from telebot.apihelper import ApiException

from travelbot.config import Settings
from travelbot.services.completion import CompletionClient
from travelbot.services.dispatcher import ReplyDispatcher
from travelbot.services.relay import RelayHandler
from travelbot.services.telegram import TelegramSender

logger = logging.getLogger(__name__)


def create_bot(settings: Settings) -> TeleBot:
    return TeleBot(settings.require_telegram_bot_token(), threaded=True)


def build_relay(
    settings: Settings, bot: TeleBot
) -> Tuple[RelayHandler, CompletionClient, ReplyDispatcher]:
    """Construct the relay and the resources it owns.

    The completion client and dispatcher are returned as well so the caller
    can release them on shutdown.
    """
    completion = CompletionClient.from_settings(settings)
    dispatcher = ReplyDispatcher(settings.max_workers, settings.max_pending)
    relay = RelayHandler(completion, TelegramSender(bot), dispatcher)
    return relay, completion, dispatcher


def register_handlers(bot: TeleBot, relay: RelayHandler) -> None:
    # Every media type is routed in so that non-text messages are dropped by
    # the relay itself.
    bot.register_message_handler(
        relay.on_message, content_types=util.content_type_media
    )


def verify_identity(bot: TeleBot, settings: Settings) -> bool:
    """Check the token belongs to the configured username.

    Returns ``False`` on a mismatch or when Telegram cannot be reached; both
    are only logged.
    """
    expected = settings.require_telegram_bot_username().lstrip("@")
    try:
        me = bot.get_me()
    except (ApiException, requests.RequestException) as exc:
        logger.error("Could not verify bot identity: %s", exc)
        return False
    if (me.username or "").lower() != expected.lower():
        logger.warning(
            "Bot token belongs to @%s but TELEGRAM_BOT_USERNAME is @%s",
            me.username,
            expected,
        )
        return False
    logger.info("Bot @%s registered", me.username)
    return True
