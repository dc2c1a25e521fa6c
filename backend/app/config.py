import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

try:
    from backend.app.services.youtube_client import FallbackPolicy
except ModuleNotFoundError:
    from app.services.youtube_client import FallbackPolicy


DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def parse_cors_origins(raw: str | None) -> tuple[list[str], bool]:
    raw = (raw or "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS), True
    if raw == "*":
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        return list(DEFAULT_CORS_ORIGINS), True
    return origins, True


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from the environment (and backend/.env)."""

    youtube_api_key: str | None = None
    youtube_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_timeout: int = 10
    fallback_policy: FallbackPolicy = FallbackPolicy.SYNTHETIC
    default_region: str = "oaxaca"
    search_history_limit: int = 10
    watch_history_limit: int = 20
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    cors_credentials: bool = True
    log_level: str = "INFO"
    environment: str = "development"
    version: str = "1.0.0"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        cors_origins, cors_credentials = parse_cors_origins(os.getenv("CORS_ALLOWED_ORIGINS"))
        return cls(
            youtube_api_key=(os.getenv("YOUTUBE_API_KEY") or "").strip() or None,
            youtube_base_url=(os.getenv("YOUTUBE_API_BASE_URL") or cls.youtube_base_url).rstrip("/"),
            youtube_timeout=_int_env("YOUTUBE_TIMEOUT_SECONDS", 10, minimum=1),
            fallback_policy=FallbackPolicy.parse(os.getenv("FALLBACK_POLICY")),
            default_region=(os.getenv("DEFAULT_REGION") or "oaxaca").strip().lower(),
            search_history_limit=_int_env("SEARCH_HISTORY_LIMIT", 10, minimum=1),
            watch_history_limit=_int_env("WATCH_HISTORY_LIMIT", 20, minimum=1),
            cors_origins=cors_origins,
            cors_credentials=cors_credentials,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            environment=(os.getenv("ENVIRONMENT") or "development").lower(),
            version=os.getenv("APP_VERSION") or "1.0.0",
        )
