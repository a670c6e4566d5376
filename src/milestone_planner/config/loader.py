"""Build the effective planner config.

Layers, lowest first: built-in defaults, ``planner.toml``, the selected
profile, ``PLANNER_<SECTION>_<KEY>`` environment variables and ``--set``
overrides. The file layer is validated on its own so a broken file is
reported before anything is stacked on top of it.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from milestone_planner.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "planner.toml"
ENV_PREFIX: Final[str] = "PLANNER_"

# sections that can be overridden key by key from the environment
_ENV_SECTIONS: Final[tuple[str, ...]] = ("analysis", "scheduling", "observability")
_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """The config file could not be read or an override could not be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated config with ``log_dir`` made absolute.

    Without ``config_path`` a ``planner.toml`` in the working directory is
    used when present. ``cli_overrides`` maps dotted keys such as
    ``scheduling.allow_weekends`` to already-parsed values.
    """

    env = os.environ if environ is None else environ
    source = (
        Path.cwd() / DEFAULT_CONFIG_FILE
        if config_path is None
        else Path(config_path).expanduser()
    ).resolve()

    config = assert_valid_config(
        merge_config(default_config(), _read_file(source, required=config_path is not None))
    )
    active_profile = _active_profile(profile, env)
    if active_profile is not None:
        config = apply_profile_overlay(config, active_profile)
    config = merge_config(config, _environment_layer(env))
    config = merge_config(config, _override_layer(cli_overrides or {}))
    config = assert_valid_config(config, active_profile=active_profile)

    for section, key in PATH_FIELDS:
        config[section][key] = _absolute(config[section][key], source.parent)
    return config


def dump_effective_config(config: Mapping[str, object], *, indent: int | None = None) -> str:
    """Sorted JSON rendering of a loaded config."""

    separators = (",", ": ") if indent is not None else (",", ":")
    return json.dumps(
        dict(config), indent=indent, sort_keys=True, separators=separators, ensure_ascii=False
    )


def _read_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _active_profile(profile: str | None, env: Mapping[str, str]) -> str | None:
    name = profile if profile is not None else env.get(f"{ENV_PREFIX}PROFILE", "")
    return name.strip() or None


def _environment_layer(env: Mapping[str, str]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for section in _ENV_SECTIONS:
        for key, default in DEFAULT_CONFIG[section].items():
            name = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            if name in env:
                layer.setdefault(section, {})[key] = _coerce(env[name], default, name)
    return layer


def _coerce(raw: str, default: object, name: str) -> object:
    text = raw.strip()
    if isinstance(default, bool):
        lowered = text.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/yes/no/on/off/1/0)")
    if isinstance(default, int):
        try:
            return int(text)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be an integer, got {raw!r}") from exc
    if isinstance(default, float):
        try:
            return float(text)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be a number, got {raw!r}") from exc
    return text


def _override_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for dotted, value in overrides.items():
        *parents, leaf = dotted.split(".")
        if not leaf or not all(parents):
            raise ConfigLoadError(f"invalid override key {dotted!r}")
        node = layer
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ConfigLoadError(f"override {dotted!r} conflicts with another override")
        node[leaf] = value
    return layer


def _absolute(value: str, base_dir: Path) -> str:
    path = Path(os.path.expandvars(value)).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return Path(os.path.normpath(path)).as_posix()


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ConfigLoadError",
    "dump_effective_config",
    "load_config",
]
