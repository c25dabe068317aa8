"""
Models package for assetpal

Contains data structures and type definitions for the rewrite pipeline.
"""

from .state import ProgramState, pipeline
from .directives import Directive, ScanResult, ScanState
from .resolution import (
    Inline,
    RelocatedName,
    ResolutionOutcome,
    ResolutionRequest,
    Resolution,
)
from .errors import AssetPalError, OptionsError, ResolutionError, UnresolvedDirectivesError
from .options import LoaderOptions

__all__ = [
    "ProgramState",
    "pipeline",
    "Directive",
    "ScanResult",
    "ScanState",
    "Inline",
    "RelocatedName",
    "ResolutionOutcome",
    "ResolutionRequest",
    "Resolution",
    "AssetPalError",
    "OptionsError",
    "ResolutionError",
    "UnresolvedDirectivesError",
    "LoaderOptions",
]
