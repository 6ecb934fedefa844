"""Centralized configuration — all env vars in one place."""

import os

ONE_WEEK_SECONDS = 60 * 60 * 24 * 7


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Gmail
        self.gmail_api_base: str = os.getenv(
            "GMAIL_API_BASE", "https://gmail.googleapis.com/gmail/v1/users/me"
        )
        self.gmail_timeout: float = float(os.getenv("GMAIL_TIMEOUT", "10"))
        self.newsletter_label_name: str = os.getenv("NEWSLETTER_LABEL_NAME", "Newsletters")
        self.messages_max_results: int = int(os.getenv("MESSAGES_MAX_RESULTS", "50"))

        # Label ids rarely change, so the lookup is cached for a week by default
        self.label_cache_ttl: float = float(os.getenv("LABEL_CACHE_TTL", str(ONE_WEEK_SECONDS)))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return warnings about settings that degrade behavior."""
        warnings = []
        if self.label_cache_ttl <= 0:
            warnings.append("LABEL_CACHE_TTL <= 0: newsletter label lookups will not be cached")
        if not 1 <= self.messages_max_results <= 500:
            warnings.append(
                f"MESSAGES_MAX_RESULTS={self.messages_max_results} is outside Gmail's 1-500 range"
            )
        return warnings


settings = Settings()
