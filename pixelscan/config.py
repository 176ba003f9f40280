"""
Runtime settings of PixelScan.

Settings are read from environment variables prefixed with ``PIXELSCAN_``
and validated with pydantic::

    PIXELSCAN_LOG_LEVEL=DEBUG PIXELSCAN_GLASS_SEED=7 pixelscan apply in.png out.png -f glass
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "PIXELSCAN_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Validated runtime settings.

    Every field can be set through ``PIXELSCAN_<FIELD>``, empty variables
    are ignored. Keyword arguments take precedence over the environment.

    :param log_level: Level of the ``pixelscan`` logger
    :param jpeg_quality: Quality used when saving JPEG files
    :param glass_seed: Seed for Glass filters created without an explicit seed
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra='ignore',
        frozen=True,
    )

    log_level: str = Field(default="WARNING")
    jpeg_quality: int = Field(default=90, ge=0, le=100)
    glass_seed: Optional[int] = Field(default=None)

    @field_validator('log_level', mode='before')
    @classmethod
    def _validate_log_level(cls, value):
        if isinstance(value, str):
            value = value.strip().upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level has to be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
        return value


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a stderr handler to the ``pixelscan`` logger and set its level.

    Repeated calls only update the level.
    """
    logger = logging.getLogger("pixelscan")
    logger.setLevel(settings.log_level)
    for handler in logger.handlers:
        if (isinstance(handler, logging.StreamHandler)
                and handler.formatter is not None
                and handler.formatter._fmt == LOG_FORMAT):
            return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["Settings", "configure_logging", "ENV_PREFIX"]
