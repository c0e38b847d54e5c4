from __future__ import annotations

import logging

from telebot.types import Message

from travelbot.schemas import IncomingMessage
from travelbot.services.completion import CompletionClient
from travelbot.services.dispatcher import ReplyDispatcher
from travelbot.services.telegram import SendResult, TelegramSender

logger = logging.getLogger(__name__)

START_COMMAND = "/start"
WELCOME_MESSAGE = (
    "¡Hola! 👋 Soy tu guía turístico virtual.\n\n"
    "Pregúntame lo que quieras sobre cualquier destino del mundo:\n"
    "🗺️ ¿Qué ver en París?\n"
    "🍽️ ¿Dónde comer la mejor pasta en Roma?\n"
)
PROCESSING_ERROR_REPLY = "❌ Lo siento, ocurrió un error al procesar tu consulta."
BUSY_REPLY = (
    "⏳ Estoy atendiendo muchas consultas ahora mismo. "
    "Inténtalo de nuevo en un momento."
)


class RelayHandler:
    """Relays each chat message to the completion service and back."""

    def __init__(
        self,
        completion: CompletionClient,
        sender: TelegramSender,
        dispatcher: ReplyDispatcher,
    ) -> None:
        self._completion = completion
        self._sender = sender
        self._dispatcher = dispatcher

    def on_message(self, message: Message) -> None:
        """Telegram handler entry point."""
        self.handle(IncomingMessage(chat_id=message.chat.id, text=message.text))

    def handle(self, message: IncomingMessage) -> None:
        if not message.has_text:
            return

        chat_id = message.chat_id
        if message.text == START_COMMAND:
            result = self._sender.send_text(chat_id, WELCOME_MESSAGE)
            self._log_failure("welcome", chat_id, result)
            return

        self._log_failure("typing", chat_id, self._sender.send_typing(chat_id))
        if not self._dispatcher.submit(self.reply, chat_id, message.text):
            logger.warning("Reply pool saturated, rejecting message from chat %s", chat_id)
            self._log_failure("busy", chat_id, self._sender.send_text(chat_id, BUSY_REPLY))

    def reply(self, chat_id: int, text: str) -> None:
        """Worker job: one completion call followed by one text reply."""
        try:
            answer = self._completion.complete(text)
        except Exception:
            logger.exception("Failed to generate reply for chat %s", chat_id)
            answer = PROCESSING_ERROR_REPLY
        self._log_failure("reply", chat_id, self._sender.send_text(chat_id, answer))

    @staticmethod
    def _log_failure(kind: str, chat_id: int, result: SendResult) -> None:
        if result.failed:
            logger.warning("Could not send %s to chat %s: %s", kind, chat_id, result.error)
