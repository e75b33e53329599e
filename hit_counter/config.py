from enum import Enum
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceName(Enum):
    """The two processes that embed the hit storage"""
    HIT_LOGGER = "hit-logger"
    HIT_COUNTER = "hit-counter"


DEFAULT_PORTS = {
    ServiceName.HIT_LOGGER: 3001,
    ServiceName.HIT_COUNTER: 3002,
}


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    Both services read the same variables, so pointing them at the same
    CONNECTION_STRING makes them share one durable store.
    """

    # Environment
    environment: str = "development"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: Optional[int] = None  # None -> per-service default (3001 / 3002)

    # Storage
    db_type: Optional[str] = None  # Options: "document", "relational" (or "cosmos", "sql")
    connection_string: Optional[str] = None  # Absent -> in-memory storage
    document_container: str = "HitCounterDB:Hits"  # Redis hash holding hit documents

    # Queries
    recent_hits_limit: int = 10
    stats_timezone: Optional[str] = None  # IANA zone for "today", None -> server local time

    # Logging
    log_level: str = "info"
    log_format: str = "console"  # Options: "console", "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def port_for(self, service: ServiceName) -> int:
        """Configured port, or the service's default"""
        if self.port is not None:
            return self.port
        return DEFAULT_PORTS[service]
