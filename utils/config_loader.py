#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Config Loader

- Centralized YAML loader for validator settings
- Validates structure (top-level mapping) before returning
- Logs the parsed settings at debug level
- Provides consistent logging for config load operations
"""

from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from utils.logger import get_logger


def load_config(path: str, logger: Optional[Any] = None) -> Dict[str, Any]:

    """
    Load a YAML config file with structured logging.

    Args:
        path: Path to config file
        logger: Optional logger; if None, uses default config logger

    Returns:
        Parsed configuration dict (empty dict for an empty file)
    """
    log = logger or get_logger("config_loader", "INFO", "config_loader.log")

    config_path = Path(path)
    if not config_path.exists():
        log.error("Config file not found: %s", config_path)
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        log.error("Failed to parse YAML config %s: %s", config_path, e, exc_info=True)
        raise

    if not isinstance(config, dict):
        log.error("Config %s must contain a mapping, got %s", config_path, type(config).__name__)
        raise ValueError(f"Config file {path} must contain a mapping at the top level")

    log.info("Loaded config file: %s", config_path)
    log.debug("Config contents: %s", config)
    return config
