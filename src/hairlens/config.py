from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including database name, e.g. mongodb://localhost:27017/hairlens
    redis_url: str = "redis://localhost:6379/0"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = []
    session_default_ttl_ms: int = 24 * 60 * 60 * 1000
    cache_timeout_seconds: float = 0.5  # Cache calls slower than this are treated as misses
    admin_key: str | None = None  # Required in X-Admin-Key for the cleanup endpoint; endpoint is disabled when unset
    cookie_secure: bool = False
    quiet_loggers: list[str] = ["pymongo", "redis", "asyncio"]  # Raised to WARNING regardless of debug
    access_log: bool = True
    forwarded_allow_ips: str = "127.0.0.1"  # Proxies trusted for X-Forwarded-* headers at the edge

    model_config = {
        "env_file": [".env"],
        "env_prefix": "HAIRLENS_",
        "extra": "ignore",
    }
