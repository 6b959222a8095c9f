"""Defaulting, validation, rendering and change-safety for the cluster network."""

from .errors import ConfigInvalidError, RenderError, SpecError, UnsafeChangeError
from .network import fill_defaults, is_change_safe, render, validate
from .pipeline import PreparedNetwork, prepare
from .types import NetworkConfigSpec

__all__ = [
    "ConfigInvalidError",
    "NetworkConfigSpec",
    "PreparedNetwork",
    "RenderError",
    "SpecError",
    "UnsafeChangeError",
    "fill_defaults",
    "is_change_safe",
    "prepare",
    "render",
    "validate",
]
