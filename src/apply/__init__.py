"""In-process model of the apply subsystem's merge rules."""

from .merge import UnsupportedObjectError, is_object_supported, merge_object_for_update

__all__ = ["UnsupportedObjectError", "is_object_supported", "merge_object_for_update"]
