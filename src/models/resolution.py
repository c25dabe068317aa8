"""
Resolution request/outcome models

The resolution service returns a tagged outcome instead of an opaque string:
Inline for data representations that replace the directive verbatim, and
RelocatedName for the base name of a relocated file.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .directives import Directive
from .errors import ResolutionError


@dataclass(frozen=True)
class Inline:
    """Inlined representation (e.g., a data URI) used verbatim"""
    value: str


@dataclass(frozen=True)
class RelocatedName:
    """Base name of the relocated file (e.g., "logo.a1b2.png")"""
    name: str


ResolutionOutcome = Union[Inline, RelocatedName]


@dataclass(frozen=True)
class ResolutionRequest:
    """
    One request handed to the resolution service

    Attributes:
        directive: Directive being resolved
        loadPath: Contextual root joined with the directive's locator
        context: Directory of the document; loadPath is relative to it
    """
    directive: Directive
    loadPath: str
    context: Path


@dataclass
class Resolution:
    """
    Result slot of one request: exactly one of outcome or error is set
    """
    request: ResolutionRequest
    outcome: Optional[ResolutionOutcome] = None
    error: Optional[ResolutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None
