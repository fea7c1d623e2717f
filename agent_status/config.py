from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from agent_status.parsing.models import GlyphSet

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass
class ParserConfig:
    """Buffer sizes and limits for one output parser."""

    buffer_cap: int = 2000
    window_size: int = 500
    max_message_length: int = 60
    idle_timeout_ms: int = 1000
    # An open approval menu is silent; keep it WAITING through idle checks
    keep_waiting_on_idle: bool = False

    @property
    def idle_timeout(self) -> float:
        """Idle timeout in seconds, as asyncio timers expect it."""
        return self.idle_timeout_ms / 1000


@dataclass
class DebugConfig:
    """Debug mode settings."""

    enabled: bool = False
    trace: bool = False
    verbose: bool = False


@dataclass
class AppConfig:
    """Top-level configuration aggregating all subsections."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    glyphs: GlyphSet = field(default_factory=GlyphSet)
    debug: DebugConfig = field(default_factory=DebugConfig)


_SIZE_FIELDS = ("buffer_cap", "window_size", "max_message_length", "idle_timeout_ms")


def validate_parser_config(parser: ParserConfig) -> None:
    """Check parser sizes for consistency.

    Raises:
        ConfigError: If a size is not a positive integer, the window is
            larger than the buffer, or the message limit cannot hold an
            ellipsis plus text.
    """
    for name in _SIZE_FIELDS:
        value = getattr(parser, name)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"parser.{name} must be a positive integer, got {value!r}")
    if parser.window_size > parser.buffer_cap:
        raise ConfigError(
            f"parser.window_size ({parser.window_size}) must not exceed "
            f"parser.buffer_cap ({parser.buffer_cap})"
        )
    if parser.max_message_length < 4:
        raise ConfigError("parser.max_message_length must be at least 4")


def _load_glyphs(raw: dict) -> GlyphSet:
    if not isinstance(raw, dict):
        raise ConfigError("glyphs must be a mapping")
    defaults = GlyphSet()
    values = {}
    for f in fields(GlyphSet):
        if f.name not in raw or raw[f.name] is None:
            continue
        value = raw[f.name]
        if f.name == "agent_names":
            if isinstance(value, str) or not value:
                raise ConfigError("glyphs.agent_names must be a non-empty list")
            values[f.name] = tuple(str(v) for v in value)
        else:
            if not isinstance(value, str) or not value:
                raise ConfigError(f"glyphs.{f.name} must be a non-empty string")
            values[f.name] = value
    unknown = set(raw) - {f.name for f in fields(GlyphSet)}
    if unknown:
        logger.warning("Ignoring unknown glyph keys: %s", ", ".join(sorted(unknown)))
    return replace(defaults, **values)


def load_config(path: str) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Every section is optional; missing or null sections fall back to their
    defaults, so an empty file yields the default configuration.

    Args:
        path: Filesystem path to the YAML configuration file.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigError: If the file does not exist, is not a YAML mapping, or
            holds invalid values.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    # An empty file loads as None
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}")

    # `or {}` fallback handles YAML null values for optional sections
    parser_raw = raw.get("parser", {}) or {}
    glyphs_raw = raw.get("glyphs", {}) or {}
    debug_raw = raw.get("debug", {}) or {}

    parser = ParserConfig(
        buffer_cap=parser_raw.get("buffer_cap", 2000),
        window_size=parser_raw.get("window_size", 500),
        max_message_length=parser_raw.get("max_message_length", 60),
        idle_timeout_ms=parser_raw.get("idle_timeout_ms", 1000),
        keep_waiting_on_idle=bool(parser_raw.get("keep_waiting_on_idle", False)),
    )
    validate_parser_config(parser)

    logger.debug("Loaded config from %s", path)
    logger.debug(
        "Parser buffer_cap=%d window_size=%d", parser.buffer_cap, parser.window_size
    )

    return AppConfig(
        parser=parser,
        glyphs=_load_glyphs(glyphs_raw),
        debug=DebugConfig(
            enabled=bool(debug_raw.get("enabled", False)),
            trace=bool(debug_raw.get("trace", False)),
            verbose=bool(debug_raw.get("verbose", False)),
        ),
    )
