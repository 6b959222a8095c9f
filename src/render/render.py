"""Render directories of parameterised YAML manifests into unstructured objects.

Templates are plain YAML files with ``${Name}`` placeholders. Every value is
substituted as its JSON encoding, which is always a valid YAML flow scalar, so
multi-line documents can be embedded as strings without extra quoting.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from string import Template
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

TEMPLATE_PATTERNS = ("*.yaml", "*.yml")


class RenderError(Exception):
    """Raised when a manifest template cannot be read or rendered."""


class RenderData:
    """Named values available to ``${Name}`` placeholders."""

    def __init__(self) -> None:
        self.data: Dict[str, Any] = {}

    def encoded(self) -> Dict[str, str]:
        return {key: json.dumps(value) for key, value in self.data.items()}


def render_dir(manifest_dir: Path, data: RenderData) -> List[Dict[str, Any]]:
    """Render every template in ``manifest_dir`` in filename order."""

    manifest_dir = Path(manifest_dir)
    if not manifest_dir.is_dir():
        raise RenderError(f"manifest directory not found: {manifest_dir}")

    files: List[Path] = []
    for pattern in TEMPLATE_PATTERNS:
        files.extend(manifest_dir.glob(pattern))

    objects: List[Dict[str, Any]] = []
    for path in sorted(files, key=lambda candidate: candidate.name):
        objects.extend(render_template(path, data))
    return objects


def render_template(path: Path, data: RenderData) -> List[Dict[str, Any]]:
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"failed to read template {path}: {exc}") from exc

    try:
        rendered = Template(source).substitute(data.encoded())
    except KeyError as exc:
        raise RenderError(f"template {path} references undefined value {exc}") from exc
    except ValueError as exc:
        raise RenderError(f"template {path} is malformed: {exc}") from exc

    try:
        documents = list(yaml.safe_load_all(rendered))
    except yaml.YAMLError as exc:
        raise RenderError(f"template {path} is not valid YAML: {exc}") from exc

    objects: List[Dict[str, Any]] = []
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, dict):
            raise RenderError(f"template {path} produced a non-object document")
        metadata = document.get("metadata")
        if not isinstance(document.get("kind"), str) or not isinstance(metadata, dict) or not metadata.get("name"):
            raise RenderError(f"template {path} produced an object without kind or metadata.name")
        objects.append(document)
    logger.debug("rendered %d object(s) from %s", len(objects), path)
    return objects


__all__ = ["RenderData", "RenderError", "render_dir", "render_template"]
