"""Event log discovery from path specifiers."""

from .resolver import PathResolver
from .schemas import LogDescriptor

__all__ = ["LogDescriptor", "PathResolver"]
