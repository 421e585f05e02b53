"""Configuration loading from ``apigate.toml`` or ``pyproject.toml``."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import ApiGateConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "apigate.toml"
PYPROJECT_FILENAME = "pyproject.toml"


def find_config(start: Path) -> Path | None:
    """Return the nearest ``apigate.toml`` or ``pyproject.toml`` with a
    ``[tool.apigate]`` table, searching *start* and its parents."""
    start = start.resolve()
    for d in [start, *start.parents]:
        candidate = d / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = d / PYPROJECT_FILENAME
        if pyproject.is_file() and "apigate" in _read_toml(pyproject).get("tool", {}):
            return pyproject
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(path: Path | None = None, start: Path | None = None) -> ApiGateConfig:
    """Load configuration from *path*, or discover it from *start*.

    Falls back to defaults when no file is found.  Raises ``ValueError``
    for unreadable TOML or unknown / mistyped keys.
    """
    if path is None:
        path = find_config(start or Path.cwd())
        if path is None:
            logger.debug("No apigate configuration found; using defaults")
            return ApiGateConfig()

    try:
        data = _read_toml(path)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{path}: invalid TOML ({exc})") from exc

    if path.name == PYPROJECT_FILENAME:
        data = data.get("tool", {}).get("apigate", {})

    try:
        cfg = ApiGateConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"{path}: invalid apigate configuration\n{exc}") from exc
    logger.debug("Loaded configuration from %s", path)
    return cfg
