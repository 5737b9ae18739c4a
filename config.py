import logging
import os
import sys
from pathlib import Path

import json5

LOGGER = logging.getLogger(__name__)

CONFIG_PATH = Path(os.environ.get("TCPING_CONFIG_PATH", "tcping.jsonc"))

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _load_config(path: Path):
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json5.load(fh)
    except (OSError, ValueError):
        LOGGER.exception("Failed to load configuration from %s", path)
        return {}
    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring configuration in %s: top level must be an object", path)
        return {}
    LOGGER.info("Loaded configuration from %s", path)
    return payload


def _resolve_config():
    candidates = [CONFIG_PATH, Path.home() / ".config" / "tcping.jsonc"]
    for candidate in candidates:
        cfg = _load_config(candidate)
        if cfg:
            return cfg
    LOGGER.debug("No configuration file found; falling back to environment variables")
    return {}

CONFIG = _resolve_config()


def get_setting(env_key: str, json_key: str, default=None):
    return os.environ.get(env_key) or CONFIG.get(json_key, default)


def get_int_setting(env_key: str, json_key: str, default: int) -> int:
    raw = get_setting(env_key, json_key, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid integer %r for %s; using %d", raw, env_key, default)
        return default


def get_float_setting(env_key: str, json_key: str, default: float) -> float:
    raw = get_setting(env_key, json_key, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid number %r for %s; using %s", raw, env_key, default)
        return default


def color_enabled() -> bool:
    # https://no-color.org: any non-empty value disables color
    return not get_setting("NO_COLOR", "no_color")


def setup_logging():
    raw = str(get_setting("LOG_LEVEL", "log_level", "INFO")).upper()
    if raw not in LOG_LEVELS:
        raw = "INFO"
    level = logging.WARNING if raw == "WARN" else getattr(logging, raw)
    fmt = "[%(asctime)s] [%(levelname)s] %(message)s" if raw == "DEBUG" else "%(message)s"
    logging.basicConfig(level=level, format=fmt, stream=sys.stdout)
