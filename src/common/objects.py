"""Helpers for working with unstructured Kubernetes objects (plain dicts)."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple


def kubernetes_id(obj: Dict[str, Any]) -> Tuple[str, str, str]:
    """Return the ``(kind, namespace, name)`` identity of an object.

    Cluster-scoped objects report an empty namespace.
    """

    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    kind = obj.get("kind")
    namespace = metadata.get("namespace")
    name = metadata.get("name")
    return (
        kind if isinstance(kind, str) else "",
        namespace if isinstance(namespace, str) else "",
        name if isinstance(name, str) else "",
    )


def format_id(obj: Dict[str, Any]) -> str:
    kind, namespace, name = kubernetes_id(obj)
    if namespace:
        return f"{kind}/{namespace}/{name}"
    return f"{kind}/{name}"


def nested_get(obj: Any, *path: str) -> Optional[Any]:
    current = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


__all__ = ["kubernetes_id", "format_id", "nested_get"]
