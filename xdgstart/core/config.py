# core/config.py
"""
Configuration management for xdgstart.

Responsibilities:
- Define default configuration
- Load config.toml if it exists
- Create config.toml with defaults on request
- Normalize and validate values
- Write config atomically

This module MUST NOT:
- Scan autostart directories
- Launch anything
- Configure logging handlers
"""
from __future__ import annotations

import copy
import os
import tempfile
from pathlib import Path
from typing import Dict, Any

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib

import tomli_w


DEFAULT_CONFIG: Dict[str, Any] = {
    "launcher": {
        # Log what would be launched without spawning anything
        "dry_run": False,
        # Same as passing --verbose
        "verbose": False,
    },
    "logging": {
        "file_logging": True,
        # Empty string = $XDG_STATE_HOME/xdgstart/logs
        "logs_dir": "",
        "max_bytes": 5 * 1024 * 1024,
        "backup_count": 3,
    },
}


class ConfigError(ValueError):
    """Raised when config.toml holds a value of the wrong type or range."""


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _expand_path(p: str) -> str:
    """Expand ~ and environment variables and return absolute path."""
    return str(Path(os.path.expandvars(os.path.expanduser(p))).resolve())


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = cfg.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def _normalize_paths(cfg: Dict[str, Any]) -> None:
    """Normalize all path values in-place."""
    log_cfg = _section(cfg, "logging")
    v = log_cfg.get("logs_dir")
    if isinstance(v, str) and v:
        log_cfg["logs_dir"] = _expand_path(v)


def _validate(cfg: Dict[str, Any]) -> None:
    """Validate settings for correctness."""
    launcher = _section(cfg, "launcher")
    for k in ("dry_run", "verbose"):
        if not isinstance(launcher.get(k), bool):
            raise ConfigError(f"launcher.{k} must be true or false")

    log_cfg = _section(cfg, "logging")
    if not isinstance(log_cfg.get("file_logging"), bool):
        raise ConfigError("logging.file_logging must be true or false")

    if not isinstance(log_cfg.get("logs_dir"), str):
        raise ConfigError("logging.logs_dir must be a string")

    for k in ("max_bytes", "backup_count"):
        v = log_cfg.get(k)
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise ConfigError(f"logging.{k} must be a non-negative integer")


def _deep_merge(default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override onto default recursively."""
    result = copy.deepcopy(default)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def default_config() -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    _normalize_paths(cfg)
    return cfg


# ---------------------------------------------------------
# Public API
# ---------------------------------------------------------
def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load config.toml from disk.
    Returns merged config (defaults + user overrides).
    Does NOT write to disk.

    Raises ConfigError for invalid values and tomllib.TOMLDecodeError
    for malformed files.
    """
    if not config_path.exists():
        return default_config()

    with config_path.open("rb") as f:
        user_cfg = tomllib.load(f)

    cfg = _deep_merge(DEFAULT_CONFIG, user_cfg)
    _normalize_paths(cfg)
    _validate(cfg)
    return cfg


def write_config(config_path: Path, cfg: Dict[str, Any]) -> None:
    """
    Write config.toml atomically.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=str(config_path.parent), prefix=".config.", suffix=".toml"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(tomli_w.dumps(cfg).encode("utf-8"))
            f.flush()
            os.fsync(f.fileno())
        Path(tmp_name).replace(config_path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def ensure_config(config_path: Path) -> Dict[str, Any]:
    """
    Ensure config_path exists.
    If missing → create with defaults.
    Returns loaded config dict.
    """
    if not config_path.exists():
        cfg = default_config()
        write_config(config_path, cfg)
        return cfg

    return load_config(config_path)


def apply_config_to_paths(paths, cfg: Dict[str, Any]):
    """
    Override the logs directory using config.
    config_dir is NOT overridden (bootstrap invariant).
    """
    logs_dir = cfg.get("logging", {}).get("logs_dir")
    if logs_dir:
        paths.logs_dir = Path(logs_dir).expanduser().resolve()
    return paths
