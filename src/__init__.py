"""
assetpal - resource directive rewriter

Rewrites pal(path) calls embedded in templates into relocated or inlined
asset references.
"""

__version__ = "1.0.0"

from .lib import (
    AssetLoader,
    FileSystemResolver,
    SourceStringResolver,
    Scanner,
    LOG,
    state_connectToLogger,
)
from .models import LoaderOptions, Inline, RelocatedName, UnresolvedDirectivesError

__all__ = [
    "AssetLoader",
    "FileSystemResolver",
    "SourceStringResolver",
    "Scanner",
    "LoaderOptions",
    "Inline",
    "RelocatedName",
    "UnresolvedDirectivesError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
