"""
Engine settings.

Settings are a small pydantic model so they can be saved to and restored
from a JSON config file::

    settings = load_settings("./config/engine.json")
    configure_logging(settings)
    store = ConceptStore(settings=settings)
"""

import json
import logging
import os
from typing import Literal

from pydantic import BaseModel, Field

from conceptgraph.utils import setup_logging

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class EngineSettings(BaseModel):
    """Tunable defaults for queries, planning, and validation."""

    default_subgraph_depth: int = Field(default=2, ge=0)
    recommendation_limit: int = Field(default=5, ge=1)
    unknown_time_marker: str = "Unknown"
    strict_validation: bool = False
    log_level: LogLevel = "INFO"


DEFAULT_SETTINGS = EngineSettings()


def configure_logging(settings: EngineSettings = DEFAULT_SETTINGS) -> None:
    """Set up root logging at the level named by *settings*."""
    setup_logging(settings.log_level)


def load_settings(path: str) -> EngineSettings:
    """Read settings from a JSON file; missing keys keep their defaults."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    settings = EngineSettings.model_validate(data)
    logger.info("Loaded engine settings from %s.", path)
    return settings


def save_settings(settings: EngineSettings, path: str) -> None:
    """Write *settings* to *path* as indented JSON."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(settings.model_dump(), fh, indent=2)
    logger.info("Settings saved → %s", path)
