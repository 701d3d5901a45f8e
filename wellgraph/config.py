"""Runtime settings read from the environment (and a local .env file)."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# load environment variables from .env file
load_dotenv()

DEFAULT_SERVER_URL = "http://localhost:8000"


class Settings(BaseModel):
    """Environment-driven settings for the SDK, CLI and server."""

    log_level: str = "WARNING"
    worker_threads: int = Field(default=1, ge=1)
    server_url: str = DEFAULT_SERVER_URL
    # comma-separated in the environment, "*" for all (development only)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    lineage_path: str | None = None  # JSONL mirror of request lineage, when set

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = str(value or "").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*").split(",")
        return cls(
            log_level=os.getenv("WELLGRAPH_LOG_LEVEL", "WARNING"),
            worker_threads=int(os.getenv("WELLGRAPH_WORKER_THREADS", "1")),
            server_url=os.getenv("WELLGRAPH_SERVER_URL", DEFAULT_SERVER_URL),
            cors_origins=[origin.strip() for origin in origins if origin.strip()] or ["*"],
            lineage_path=os.getenv("WELLGRAPH_LINEAGE_PATH") or None,
        )


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured level to the ``wellgraph`` logger tree."""
    settings = settings or Settings.from_env()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("wellgraph").setLevel(settings.log_level)
