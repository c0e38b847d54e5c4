from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests
from telebot import TeleBot
from telebot.apihelper import ApiException


@dataclass(frozen=True)
class SendResult:
    """Outcome of one Telegram send; callers decide whether to log or retry."""

    ok: bool
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return not self.ok


class TelegramSender:
    """Delivers replies and presence indicators to a Telegram chat."""

    TYPING = "typing"

    def __init__(self, bot: TeleBot) -> None:
        self._bot = bot

    def send_text(self, chat_id: int, text: str) -> SendResult:
        try:
            self._bot.send_message(chat_id, text)
        except (ApiException, requests.RequestException) as exc:
            return SendResult(ok=False, error=exc)
        return SendResult(ok=True)

    def send_typing(self, chat_id: int) -> SendResult:
        try:
            self._bot.send_chat_action(chat_id, self.TYPING)
        except (ApiException, requests.RequestException) as exc:
            return SendResult(ok=False, error=exc)
        return SendResult(ok=True)
