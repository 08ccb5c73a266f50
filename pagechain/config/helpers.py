"""Utility helpers shared by the pagechain configuration loader."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

from .models import SiteConfigError


def _resolve_dir(base: Path, value: object | None, *, key: str) -> Path | None:
    """Return ``value`` as a path relative to ``base``, or None when unset."""
    if value is None or value == "":
        return None
    if not isinstance(value, (str, Path)):
        msg = f"'{key}' must be a path, got {type(value).__name__}"
        raise SiteConfigError(msg)
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def _compile_pattern(value: object, *, key: str) -> re.Pattern[str]:
    """Compile a regular expression from config, reporting the offending key."""
    if isinstance(value, re.Pattern):
        return value
    if not isinstance(value, str) or not value:
        msg = f"'{key}' must be a non-empty regular expression string"
        raise SiteConfigError(msg)
    try:
        return re.compile(value)
    except re.error as exc:
        msg = f"'{key}' is not a valid regular expression: {exc}"
        raise SiteConfigError(msg) from exc


def _compile_patterns(value: object, *, key: str) -> list[re.Pattern[str]]:
    """Compile one pattern or a list of patterns."""
    match value:
        case str() | re.Pattern():
            return [_compile_pattern(value, key=key)]
        case list() | tuple():
            return [
                _compile_pattern(item, key=f"{key}[{idx}]")
                for idx, item in enumerate(value)
            ]
        case _:
            msg = f"'{key}' must be a pattern or a list of patterns"
            raise SiteConfigError(msg)


def _mapping(value: object, *, key: str) -> dict[str, typ.Any]:
    """Return ``value`` as a plain dict, treating null as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping"
        raise SiteConfigError(msg)
    return {str(name): item for name, item in value.items()}


__all__ = [
    "_compile_pattern",
    "_compile_patterns",
    "_mapping",
    "_resolve_dir",
]
