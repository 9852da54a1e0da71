from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)

ENV_VAR = "TREESHEETS_CONFIG"
DEFAULT_FILENAME = "treesheets.yaml"


class ConfigError(Exception):
    """Configuration file missing, unreadable or malformed."""


@dataclass
class Settings:
    """User settings for the command line.

    json_indent: indentation used when writing sheets (None = compact).
    outline_indent: per-level prefix of the printed outline.
    respect_folds: hide children of folded cells when printing.
    log_level: level name handed to setup_logging.
    """

    json_indent: Optional[int] = 2
    outline_indent: str = "  "
    respect_folds: bool = False
    log_level: str = "WARNING"


def _settings_from_map(data: dict, origin: Path) -> Settings:
    s = Settings()
    indent: Any = data.get("json_indent", s.json_indent)
    if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int) or indent < 0):
        raise ConfigError(f"{origin}: json_indent must be a non-negative integer or null")
    s.json_indent = indent

    outline: Any = data.get("outline", {}) or {}
    if not isinstance(outline, dict):
        raise ConfigError(f"{origin}: outline must be a mapping")
    oi = outline.get("indent", s.outline_indent)
    if isinstance(oi, int) and not isinstance(oi, bool):
        oi = " " * oi
    if not isinstance(oi, str):
        raise ConfigError(f"{origin}: outline.indent must be a string or a number of spaces")
    s.outline_indent = oi
    rf = outline.get("respect_folds", s.respect_folds)
    if not isinstance(rf, bool):
        raise ConfigError(f"{origin}: outline.respect_folds must be a boolean")
    s.respect_folds = rf

    lvl = data.get("log_level", s.log_level)
    if not isinstance(lvl, str) or not isinstance(logging.getLevelName(lvl.upper()), int):
        raise ConfigError(f"{origin}: unknown log_level {lvl!r}")
    s.log_level = lvl.upper()
    return s


def _resolve_path(path: Optional[str]) -> tuple[Optional[Path], bool]:
    """Return (candidate path, whether it was asked for explicitly)."""
    if path:
        return Path(path), True
    env = os.environ.get(ENV_VAR)
    if env:
        return Path(env), True
    return Path.cwd() / DEFAULT_FILENAME, False


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from YAML.

    Looks at ``path``, then $TREESHEETS_CONFIG, then ./treesheets.yaml. Only the
    implicit default may be absent; it then yields default settings.
    """
    candidate, explicit = _resolve_path(path)
    if not candidate.exists():
        if explicit:
            raise ConfigError(f"config file not found: {candidate}")
        return Settings()

    yaml = YAML(typ="safe")
    try:
        data = yaml.load(candidate.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read config {candidate}: {exc}") from exc
    except YAMLError as exc:
        raise ConfigError(f"invalid YAML in {candidate}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{candidate}: top level must be a mapping")
    logger.debug("Loaded settings from %s", candidate)
    return _settings_from_map(data, candidate)
