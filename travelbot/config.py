import os
from functools import lru_cache


class Settings:
    """Bot configuration values derived from environment variables."""

    def __init__(self) -> None:
        self.telegram_bot_token: str | None = os.getenv("TELEGRAM_BOT_TOKEN")
        self.telegram_bot_username: str | None = os.getenv("TELEGRAM_BOT_USERNAME")
        self.groq_api_key: str | None = os.getenv("GROQ_API_KEY")
        self.groq_api_url: str = os.getenv(
            "GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions"
        )
        self.http_timeout_seconds: float = float(
            os.getenv("HTTP_TIMEOUT_SECONDS", "10")
        )
        self.max_workers: int = int(os.getenv("BOT_MAX_WORKERS", "4"))
        self.max_pending: int = int(os.getenv("BOT_MAX_PENDING", "32"))
        self.webhook_url: str | None = os.getenv("WEBHOOK_URL") or None
        self.webhook_secret: str | None = os.getenv("WEBHOOK_SECRET") or None
        self.port: int = int(os.getenv("PORT", "8080"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def use_webhook(self) -> bool:
        return self.webhook_url is not None

    def require_telegram_bot_token(self) -> str:
        """Return the configured bot token, raising if it is missing."""
        if not self.telegram_bot_token:
            raise RuntimeError(
                "Missing TELEGRAM_BOT_TOKEN environment variable. "
                "Set it before starting the bot."
            )
        return self.telegram_bot_token

    def require_telegram_bot_username(self) -> str:
        """Return the configured bot username, raising if it is missing."""
        if not self.telegram_bot_username:
            raise RuntimeError(
                "Missing TELEGRAM_BOT_USERNAME environment variable. "
                "Set it before starting the bot."
            )
        return self.telegram_bot_username

    def require_groq_api_key(self) -> str:
        """Return the completion-service API key, raising if it is missing."""
        if not self.groq_api_key:
            raise RuntimeError(
                "Missing GROQ_API_KEY environment variable required for "
                "completion requests."
            )
        return self.groq_api_key


@lru_cache
def get_settings() -> Settings:
    """Provide a cached Settings instance."""
    return Settings()
