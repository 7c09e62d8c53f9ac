"""Boot loader: read YAML → lower-case keys → env/flag overrides → BootConfig."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from entrykit.config.strvals import parse_env_overrides, parse_flat_overrides
from entrykit.config.values import merge_native
from entrykit.core.errors import ConfigParseError
from entrykit.core.models.boot import BootConfig

_log = logging.getLogger(__name__)

BOOT_FILE_ENV = "ENTRYKIT_BOOT_FILE"
ENV_PREFIX = "ENTRYKIT"

# Variables read by the CLI itself, never treated as boot overrides.
_RESERVED_ENV = (BOOT_FILE_ENV, "ENTRYKIT_LOG_LEVEL")

# Relative to the working directory.
_DEFAULT_BOOT_PATH = Path("boot.yaml")


def resolve_boot_path(boot_path: Path | str | None = None, environ: Mapping[str, str] | None = None) -> Path:
    """Return the boot file to read.

    Order: *boot_path*, then ``ENTRYKIT_BOOT_FILE``, then ``boot.yaml`` in
    the working directory.

    Raises:
        FileNotFoundError: If the chosen file does not exist.
    """
    source = os.environ if environ is None else environ
    if boot_path is not None:
        p = Path(boot_path)
    else:
        env = source.get(BOOT_FILE_ENV)
        p = Path(env) if env else _DEFAULT_BOOT_PATH
    if not p.is_file():
        raise FileNotFoundError(
            f"Boot file not found: {p}\n"
            f"Create boot.yaml or set {BOOT_FILE_ENV} to a valid path."
        )
    return p


def lower_keys(obj: Any) -> Any:
    """Lower-case every mapping key in *obj*, recursively."""
    if isinstance(obj, dict):
        return {str(key).lower(): lower_keys(val) for key, val in obj.items()}
    if isinstance(obj, list):
        return [lower_keys(item) for item in obj]
    return obj


def parse_boot_yaml(text: str, source: str = "<boot>") -> dict[str, Any]:
    """Parse a boot document; an empty document is an empty mapping.

    Raises:
        ConfigParseError: On malformed YAML or a non-mapping top level.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"malformed YAML: {exc}", source=source) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigParseError(
            f"top level must be a mapping, got {type(raw).__name__}", source=source
        )
    return lower_keys(raw)


def load_boot_document(
    boot_path: Path | str | None = None,
    *,
    text: str | None = None,
    environ: Mapping[str, str] | None = None,
    flag_overrides: Iterable[str] = (),
) -> dict[str, Any]:
    """Load the boot document as plain data with every override layer applied.

    Layers, lowest first: the YAML file (or *text* when given), ``ENTRYKIT_*``
    environment variables, then *flag_overrides* (``key=value`` strings).

    Raises:
        FileNotFoundError: If no *text* is given and the boot file is missing.
        ConfigParseError: If the YAML or any override cannot be parsed.
    """
    if text is None:
        path = resolve_boot_path(boot_path, environ)
        _log.info("Loading boot config from %s", path)
        text = path.read_text(encoding="utf-8")
        source = str(path)
    else:
        source = "<boot>"

    document = parse_boot_yaml(text, source)

    env_layer = lower_keys(parse_env_overrides(ENV_PREFIX, environ, exclude=_RESERVED_ENV))
    if env_layer:
        _log.debug("Applying %d env override section(s)", len(env_layer))
        document = merge_native(document, env_layer)

    flags = ",".join(item for item in flag_overrides if item)
    if flags:
        flag_layer = lower_keys(parse_flat_overrides(flags))
        _log.debug("Applying flag overrides: %s", ", ".join(sorted(flag_layer)))
        document = merge_native(document, flag_layer)

    return document


def load_boot_config(
    boot_path: Path | str | None = None,
    *,
    text: str | None = None,
    environ: Mapping[str, str] | None = None,
    flag_overrides: Iterable[str] = (),
) -> BootConfig:
    """Load and validate the boot configuration.

    Returns:
        A validated :class:`BootConfig`.

    Raises:
        FileNotFoundError: If the boot file does not exist.
        ConfigParseError: If the document is malformed or fails validation.
    """
    document = load_boot_document(
        boot_path, text=text, environ=environ, flag_overrides=flag_overrides
    )
    try:
        return BootConfig.model_validate(document)
    except ValidationError as exc:
        raise ConfigParseError(f"invalid boot configuration: {exc}") from exc
