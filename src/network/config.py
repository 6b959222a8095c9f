from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HOST_MTU = 1500
DEFAULT_NODE_IMAGE = "quay.io/openshift/origin-node:latest"
DEFAULT_HYPERSHIFT_IMAGE = "quay.io/openshift/origin-hypershift:latest"


@dataclass
class RenderOptions:
    """Process-level values substituted into the manifest templates."""

    node_image: str = DEFAULT_NODE_IMAGE
    hypershift_image: str = DEFAULT_HYPERSHIFT_IMAGE
    api_server_host: str = ""
    api_server_port: str = ""

    @classmethod
    def from_env(
        cls,
        node_image: Optional[str] = None,
        hypershift_image: Optional[str] = None,
    ) -> "RenderOptions":
        return cls(
            node_image=node_image or os.getenv("NODE_IMAGE", DEFAULT_NODE_IMAGE),
            hypershift_image=hypershift_image or os.getenv("HYPERSHIFT_IMAGE", DEFAULT_HYPERSHIFT_IMAGE),
            api_server_host=os.getenv("KUBERNETES_SERVICE_HOST", ""),
            api_server_port=os.getenv("KUBERNETES_SERVICE_PORT", ""),
        )


__all__ = ["RenderOptions", "DEFAULT_HOST_MTU"]
