"""
Configuration for Spanmark.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/spanmark/config.toml) if exists
3. Environment variables (SPANMARK_*) override file
4. CLI flags and keyword arguments override everything
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Markup generation settings."""
    leading_space_marker: str = "&nbsp;"  # leading spaces collapse when displayed
    escape_text: bool = True


@dataclass
class ValidationConfig:
    """Precondition checks on span lists."""
    check_normalized: bool = True  # fail fast on overlapping or unmerged spans


@dataclass
class MarkupConfig:
    """Markup format selection."""
    default_format: str = "html"


@dataclass
class Config:
    """Root config with all settings."""
    render: RenderConfig = field(default_factory=RenderConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    markup: MarkupConfig = field(default_factory=MarkupConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "spanmark" / "config.toml"
    return Path.home() / ".config" / "spanmark" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            config = Config()

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "render" in data:
        r = data["render"]
        if "leading_space_marker" in r:
            config.render.leading_space_marker = str(r["leading_space_marker"])
        if "escape_text" in r:
            config.render.escape_text = bool(r["escape_text"])

    if "validation" in data:
        v = data["validation"]
        if "check_normalized" in v:
            config.validation.check_normalized = bool(v["check_normalized"])

    if "markup" in data:
        m = data["markup"]
        if "default_format" in m:
            config.markup.default_format = str(m["default_format"])

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, type]] = {
        "SPANMARK_LEADING_SPACE_MARKER": ("render", "leading_space_marker", str),
        "SPANMARK_ESCAPE_TEXT": ("render", "escape_text", bool),
        "SPANMARK_CHECK_NORMALIZED": ("validation", "check_normalized", bool),
        "SPANMARK_DEFAULT_FORMAT": ("markup", "default_format", str),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError, AttributeError):
                # Bool needs special handling: "true", "1", "yes" -> True
                converted = val.lower() in ("true", "1", "yes") if conv is bool else conv(val)
                setattr(getattr(config, section), attr, converted)

    return config


# Module-level config instance, loaded on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached instance so the next get_config() reloads."""
    global _config
    _config = None
