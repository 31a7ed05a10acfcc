"""Environment-driven settings for the graph build CLI."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_YAML_DIR = "03_data/System_of_Record"
DEFAULT_OUTPUT_PATH = "03_data/graph.json"
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    yaml_dir: Path
    output_path: Path
    sync_source: Optional[Path]
    log_level: str


def load_settings() -> Settings:
    """Read settings from the process environment and an optional .env file."""
    load_dotenv()
    sync_source = os.getenv("SOR_GRAPH_SYNC_SOURCE")
    log_level = os.getenv("SOR_GRAPH_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Unknown SOR_GRAPH_LOG_LEVEL %r; using %s", log_level, DEFAULT_LOG_LEVEL)
        log_level = DEFAULT_LOG_LEVEL
    return Settings(
        yaml_dir=Path(os.getenv("SOR_GRAPH_YAML_DIR", DEFAULT_YAML_DIR)),
        output_path=Path(os.getenv("SOR_GRAPH_OUTPUT_PATH", DEFAULT_OUTPUT_PATH)),
        sync_source=Path(sync_source) if sync_source else None,
        log_level=log_level,
    )
