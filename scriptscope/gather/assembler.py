"""
Final shaping of correlated script artifacts for output.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from scriptscope.models import scripts


def assemble_artifacts(merged: Iterable[scripts.ScriptArtifact]) -> list[scripts.ScriptArtifact]:
    """Re-validate every artifact so each field is defined, keeping order."""
    return [scripts.ScriptArtifact.model_validate(artifact.model_dump()) for artifact in merged]


def to_payload(artifacts: Iterable[scripts.ScriptArtifact]) -> list[dict[str, Any]]:
    """Dump artifacts as camelCase dicts with every key present."""
    return [artifact.model_dump(by_alias=True, exclude_none=False) for artifact in artifacts]
