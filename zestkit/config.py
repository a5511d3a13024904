import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    identicon_block_count: int = Field(3, ge=1, le=4)
    identicon_size: Optional[float] = Field(None, gt=0)
    identicon_foreground: Optional[str] = None
    identicon_background: Optional[str] = None
    text_encoding: str = "utf-8"
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="ZESTKIT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stream handler to the root logger.

    Library code only logs through module loggers; applications that want
    to see those records call this once at startup.
    """
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ]
    )
