from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_HOST_MTU, RenderOptions
from .errors import ConfigInvalidError, UnsafeChangeError
from .network import fill_defaults, is_change_safe, render, validate
from .types import NetworkConfigSpec

logger = logging.getLogger(__name__)


@dataclass
class PreparedNetwork:
    spec: NetworkConfigSpec
    objects: List[Dict[str, Any]]


def prepare(
    conf: NetworkConfigSpec,
    manifest_dir: Path,
    *,
    previous: Optional[NetworkConfigSpec] = None,
    host_mtu: int = DEFAULT_HOST_MTU,
    options: Optional[RenderOptions] = None,
) -> PreparedNetwork:
    """Run one reconcile pass: default, validate, gate on change safety, render.

    ``conf`` is not modified. ``previous`` must be the defaulted spec returned by
    the last successful pass; keep ``PreparedNetwork.spec`` for the next one.
    """

    spec = fill_defaults(copy.deepcopy(conf), previous, host_mtu)

    errors = validate(spec)
    if errors:
        raise ConfigInvalidError(errors)

    if previous is not None:
        errors = is_change_safe(previous, spec)
        if errors:
            raise UnsafeChangeError(errors)

    objects = render(spec, manifest_dir, options)
    logger.info("rendered %d object(s) for %s", len(objects), spec.default_network.type)
    return PreparedNetwork(spec=spec, objects=objects)


__all__ = ["PreparedNetwork", "prepare"]
