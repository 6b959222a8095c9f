from __future__ import annotations

from typing import List, Sequence

from src.render.render import RenderError


class SpecError(ValueError):
    """Raised when a network spec document cannot be decoded."""


class _FindingsError(Exception):
    summary = "network configuration rejected"

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__(f"{self.summary}: {'; '.join(self.errors)}")


class ConfigInvalidError(_FindingsError):
    summary = "invalid network configuration"


class UnsafeChangeError(_FindingsError):
    summary = "unsafe network configuration change"


__all__ = ["SpecError", "RenderError", "ConfigInvalidError", "UnsafeChangeError"]
