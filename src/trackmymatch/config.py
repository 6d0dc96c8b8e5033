import os
import re
from typing import Any, Dict, Optional, Union

from .match_types import STORAGE_KEY, StoreConfig

DATA_DIR_ENV = "TRACKMYMATCH_DATA_DIR"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _expand_env_string(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _ENV_PATTERN.sub(lambda match: os.getenv(match.group(1), match.group(0)), value)


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _default_data_dir() -> str:
    return os.getenv(DATA_DIR_ENV) or StoreConfig.data_dir


def _log_level(value: Any) -> str:
    level = str(value or "WARNING").strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}; expected one of {', '.join(LOG_LEVELS)}")
    return level


def resolve_store_config(config: Optional[Union[StoreConfig, Dict[str, Any]]] = None) -> StoreConfig:
    if isinstance(config, StoreConfig):
        return config
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError("resolve_store_config requires a config dict or StoreConfig")

    expanded = {key: _expand_env_string(value) for key, value in config.items()}
    log_file = expanded.get("log_file")

    return StoreConfig(
        data_dir=str(expanded.get("data_dir") or _default_data_dir()),
        storage_key=str(expanded.get("storage_key") or STORAGE_KEY),
        autosave=_as_bool(expanded.get("autosave"), True),
        seed_when_missing=_as_bool(expanded.get("seed_when_missing"), True),
        log_level=_log_level(expanded.get("log_level")),
        log_file=str(log_file) if log_file else None,
    )
