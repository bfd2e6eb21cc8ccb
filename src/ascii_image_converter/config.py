"""
Settings for the command-line converter.

Values are layered: defaults, then a YAML config file, then environment variables.
Command-line flags are applied on top by the CLI.

The config file is either given explicitly or looked up in the home directory as
``.ascii-image-converter.yaml`` (or ``.yml``). Example::

    complex: true
    dimensions: [100, 30]
    color: false
    save: true
    save_path: art.txt
    char_aspect: 0.5
    transparency: exclude

Environment variables use the ``ASCII_IMAGE_CONVERTER_`` prefix followed by the
upper-cased key, e.g. ``ASCII_IMAGE_CONVERTER_COMPLEX=1`` or
``ASCII_IMAGE_CONVERTER_DIMENSIONS=100,30``.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from ascii_image_converter.errors import ConfigError
from ascii_image_converter.grid import CHAR_ASPECT
from ascii_image_converter.sampling import TransparencyPolicy

logger = logging.getLogger(__name__)

CONFIG_NAME = ".ascii-image-converter"
CONFIG_SUFFIXES = (".yaml", ".yml")
ENV_PREFIX = "ASCII_IMAGE_CONVERTER_"
DEFAULT_SAVE_PATH = "ascii-image.txt"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    complex: bool = False
    dimensions: tuple[int, int] | None = None
    save: bool = False
    save_path: str = DEFAULT_SAVE_PATH
    colour: bool = False
    char_aspect: float = CHAR_ASPECT
    transparency: TransparencyPolicy = TransparencyPolicy.OPAQUE


# Accepted spellings of each setting in files and environment variables
_ALIASES = {"color": "colour", "aspect": "char_aspect"}


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def parse_dimensions(value: Any) -> tuple[int, int]:
    """Parse "W,H" or a two-item sequence into a (width, height) pair."""
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",") if p.strip()]
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        raise ConfigError(f"dimensions: expected two integers, got {value!r}")
    if len(parts) != 2:
        raise ConfigError(f"dimensions: requires two dimensions, got {len(parts)}")
    try:
        width, height = (int(p) for p in parts)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"dimensions: expected two integers, got {value!r}") from e
    return width, height


def _coerce(key: str, value: Any) -> Any:
    if key in ("complex", "save", "colour"):
        return _to_bool(key, value)
    if key == "dimensions":
        return None if value is None else parse_dimensions(value)
    if key == "save_path":
        return str(value)
    if key == "char_aspect":
        try:
            aspect = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"char_aspect: expected a number, got {value!r}") from e
        if aspect <= 0:
            raise ConfigError(f"char_aspect: must be positive, got {aspect}")
        return aspect
    if key == "transparency":
        try:
            return TransparencyPolicy(str(value).lower())
        except ValueError as e:
            choices = ", ".join(p.value for p in TransparencyPolicy)
            raise ConfigError(f"transparency: expected one of {choices}, got {value!r}") from e
    raise ConfigError(f"Unknown setting: {key}")


def _normalise(values: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    out = {}
    for raw_key, value in values.items():
        key = _ALIASES.get(str(raw_key).lower(), str(raw_key).lower())
        if key not in known:
            raise ConfigError(f"Unknown setting: {raw_key}")
        out[key] = _coerce(key, value)
    return out


def find_config_file(home: Path | None = None) -> Path | None:
    home = Path.home() if home is None else home
    for suffix in CONFIG_SUFFIXES:
        candidate = home / f"{CONFIG_NAME}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of settings")
    return data


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Prefixed environment variables naming a known setting; others are skipped."""
    known = {f.name for f in fields(Settings)} | set(_ALIASES)
    overrides = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX) :].lower()
        if name in known:
            overrides[name] = value
        else:
            logger.debug("Ignoring unrelated environment variable %s", key)
    return overrides


def load_settings(
    config_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Settings:
    """Build Settings from the config file and environment."""
    environ = os.environ if environ is None else environ

    if config_file is not None:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        path = find_config_file(home)

    settings = Settings()
    if path is not None:
        logger.debug("Reading config file %s", path)
        settings = replace(settings, **_normalise(read_config_file(path)))
    else:
        logger.debug("No config file found")

    overrides = env_overrides(environ)
    if overrides:
        logger.debug("Applying environment overrides: %s", ", ".join(sorted(overrides)))
        settings = replace(settings, **_normalise(overrides))
    return settings
