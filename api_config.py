import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_MODEL = "gpt-4o"
MAX_IMAGE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    text_model: str = DEFAULT_MODEL
    vision_model: str = DEFAULT_MODEL
    completion_timeout: float = 60.0
    api_base_url: str = DEFAULT_API_BASE_URL
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    """Reads .env and the environment once. A missing API key means demo mode."""
    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY") or os.getenv("API_KEY") or None
    return Settings(
        openai_api_key=api_key,
        text_model=os.getenv("CHEMSIGHT_TEXT_MODEL", DEFAULT_MODEL),
        vision_model=os.getenv("CHEMSIGHT_VISION_MODEL", DEFAULT_MODEL),
        completion_timeout=float(os.getenv("CHEMSIGHT_COMPLETION_TIMEOUT", "60")),
        api_base_url=os.getenv("CHEMSIGHT_API_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        log_level=os.getenv("CHEMSIGHT_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
