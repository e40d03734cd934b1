import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream catalog (Jikan)
    jikan_base_url: str = os.getenv("JIKAN_BASE_URL", "https://api.jikan.moe/v4")
    jikan_timeout: float = float(os.getenv("JIKAN_TIMEOUT", "10.0"))
    jikan_max_attempts: int = int(os.getenv("JIKAN_MAX_ATTEMPTS", "3"))

    # Catalog cache
    search_cache_ttl: float = float(os.getenv("SEARCH_CACHE_TTL", "60"))  # 1 minute
    anime_cache_ttl: float = float(os.getenv("ANIME_CACHE_TTL", "600"))  # 10 minutes

    # Database
    database_path: str = os.getenv("DATABASE_PATH", os.path.join("data", "app.db"))
    seed_demo_user: bool = os.getenv("SEED_DEMO_USER", "true").lower() == "true"

    # Sessions
    session_secret: str = os.getenv("SESSION_SECRET", "dev-only-session-secret-change-me")
    session_ttl_days: int = int(os.getenv("SESSION_TTL_DAYS", "7"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "4000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origin_list(self) -> list[str]:
        """Split the comma separated CORS_ORIGINS value.

        Returns:
            List of allowed origins, without blanks
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.jikan_max_attempts < 1:
            raise ValueError("JIKAN_MAX_ATTEMPTS must be at least 1")

        if self.search_cache_ttl <= 0 or self.anime_cache_ttl <= 0:
            raise ValueError("SEARCH_CACHE_TTL and ANIME_CACHE_TTL must be positive")

        if self.session_ttl_days < 1:
            raise ValueError("SESSION_TTL_DAYS must be at least 1")

        if not 4 <= self.bcrypt_rounds <= 20:
            raise ValueError(f"BCRYPT_ROUNDS must be between 4 and 20, got {self.bcrypt_rounds}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
