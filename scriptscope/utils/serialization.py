"""Shared serialization helpers for camelCase conversion.

Provides the ``snake_to_camel`` alias generator used by every
Pydantic model the API returns.
"""

from __future__ import annotations

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as ``"dom_path"``.

    Returns:
        The camelCase equivalent, e.g. ``"domPath"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


CAMEL_CONFIG = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)
