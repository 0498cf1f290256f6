import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Application settings loaded from TOML configuration files.

    Load order (each layer overrides the previous):
        1. config_path    - base settings (committed to git)
        2. secrets_path   - sensitive overrides (gitignored, mounted in prod)
        3. override_path  - per-worker overrides (e.g. config.live-sync.toml)

    Usage:
        Settings()                                        # config.toml + secrets
        Settings(config_path="config.test.toml")          # test config
        Settings(override_path="config.live-sync.toml")   # base + secrets + worker
    """

    model_config = ConfigDict(extra="forbid")

    def __init__(
        self,
        config_path: str = "config.toml",
        override_path: str | None = None,
        secrets_path: str = "secrets.toml",
    ) -> None:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        if Path(secrets_path).is_file():
            with open(secrets_path, "rb") as f:
                data |= tomllib.load(f)
        if override_path:
            with open(override_path, "rb") as f:
                data |= tomllib.load(f)
        super().__init__(**data)

    PROJECT_NAME: str = "notifyhub"
    DATABASE_NAME: str = "notifyhub"
    API_V1_STR: str = "/api/v1"
    MONGODB_URL: str = "mongodb://mongo:27017/notifyhub"

    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    TESTING: bool = False

    # Redis Configuration
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_SSL: bool = False
    REDIS_MAX_CONNECTIONS: int = 100
    BROADCAST_CHANNEL_PREFIX: str = "notifyhub:room:"

    # Fan-out
    FANOUT_BATCH_SIZE: int = Field(default=1000, ge=1, le=1000)
    FANOUT_MAX_BATCH_RETRIES: int = Field(default=3, ge=0)
    FANOUT_RETRY_BASE_DELAY: float = Field(default=0.5, ge=0.0)

    LIST_DEFAULT_LIMIT: int = Field(default=20, ge=1)

    # Live sync (MongoDB change streams)
    ENABLE_LIVE_SYNC: bool = True
    SYNC_REMOVE_STALE_ON_ROLE_CHANGE: bool = True
    SYNC_RECONNECT_DELAY: float = 1.0
    SYNC_MAX_RECONNECT_DELAY: float = 60.0
    SYNC_MAX_RECONNECT_ATTEMPTS: int = 10
    SYNC_QUEUE_SIZE: int = 1000

    # Recycle bin
    RECYCLEBIN_ROOT: str = "public/recyclebin"

    # Auto-delete of stale user accounts (dry-run unless enabled)
    AUTO_DELETE_ENABLED: bool = False
    AUTO_DELETE_AGE_DAYS: int = Field(default=30, ge=0)
    AUTO_DELETE_NOTIFY_ROLES: list[str] = Field(default_factory=lambda: ["admin", "operator", "manager"])
    AUTO_DELETE_RUN_HOUR: int = Field(default=1, ge=0, le=23)

    # Service metadata
    SERVICE_NAME: str = "notifyhub"
    SERVICE_VERSION: str = "1.0.0"

    # OpenTelemetry Configuration
    ENABLE_METRICS: bool = True
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
