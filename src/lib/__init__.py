"""
assetpal - resource directive rewriter

Replaces pal(path) directives in text documents with relocated or inlined
asset references.
"""

__version__ = "1.0.0"

from .scanner import Scanner, document_scan
from .orchestrator import Orchestrator
from .substitution import Substitutor
from .resolver import ResolutionService, FileSystemResolver, SourceStringResolver, outcome_fromRaw
from .loader import AssetLoader
from .log import LOG, state_connectToLogger

__all__ = [
    "Scanner",
    "document_scan",
    "Orchestrator",
    "Substitutor",
    "ResolutionService",
    "FileSystemResolver",
    "SourceStringResolver",
    "outcome_fromRaw",
    "AssetLoader",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
