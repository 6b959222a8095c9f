"""Merge rules the apply subsystem uses when updating existing objects.

Fields the cluster assigns at runtime are carried over from the live object
so that re-applying a rendered manifest does not fight the API server.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from src.common.objects import format_id, kubernetes_id

SUPPORTED_KINDS = {
    "Namespace",
    "ServiceAccount",
    "ClusterRole",
    "ClusterRoleBinding",
    "Role",
    "RoleBinding",
    "ConfigMap",
    "Service",
    "DaemonSet",
    "Deployment",
    "CustomResourceDefinition",
}

_RUNTIME_METADATA = ("resourceVersion", "uid", "creationTimestamp", "selfLink", "generation", "managedFields")


class UnsupportedObjectError(Exception):
    """Raised for objects the apply subsystem refuses to manage."""


def is_object_supported(obj: Dict[str, Any]) -> None:
    kind = kubernetes_id(obj)[0]
    if kind not in SUPPORTED_KINDS:
        raise UnsupportedObjectError(f"unsupported kind {kind!r} for {format_id(obj)}")
    if kind == "ServiceAccount" and obj.get("secrets"):
        raise UnsupportedObjectError(f"{format_id(obj)} must not specify secrets")


def merge_object_for_update(current: Dict[str, Any], updated: Dict[str, Any]) -> None:
    """Copy runtime-managed fields from ``current`` into ``updated`` in place."""

    if kubernetes_id(current) != kubernetes_id(updated):
        raise ValueError(f"cannot merge {format_id(current)} into {format_id(updated)}")

    current_meta = current.get("metadata") or {}
    updated_meta = updated.setdefault("metadata", {})
    for key in _RUNTIME_METADATA:
        if key in current_meta:
            updated_meta[key] = copy.deepcopy(current_meta[key])
    # Labels and annotations added by other actors survive; rendered values win.
    for key in ("labels", "annotations"):
        existing = current_meta.get(key)
        if isinstance(existing, dict) and existing:
            merged = dict(existing)
            merged.update(updated_meta.get(key) or {})
            updated_meta[key] = merged

    if "status" in current:
        updated["status"] = copy.deepcopy(current["status"])

    kind = kubernetes_id(current)[0]
    if kind == "ServiceAccount":
        for key in ("secrets", "imagePullSecrets"):
            if key in current and key not in updated:
                updated[key] = copy.deepcopy(current[key])
    elif kind == "Service":
        cluster_ip = (current.get("spec") or {}).get("clusterIP")
        if cluster_ip:
            updated.setdefault("spec", {}).setdefault("clusterIP", cluster_ip)


__all__ = ["SUPPORTED_KINDS", "UnsupportedObjectError", "is_object_supported", "merge_object_for_update"]
