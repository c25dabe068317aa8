"""
Substitution engine

Replaces each directive statement with its resolved reference. Replacement
is positional: every directive carries its span in the scanned text and
spans are rewritten from the end of the document towards the start, so
identical statements never compete for the same occurrence.
"""

import posixpath
from typing import List, Optional

from ..models.errors import UnresolvedDirectivesError
from ..models.resolution import Inline, Resolution, ResolutionOutcome
from ..models.directives import Directive
from .log import LOG


class Substitutor:
    """
    Builds the rewritten document from scan results and resolutions

    Attributes:
        outputPath: Optional prefix (with trailing "/") that replaces the
                    locator's directory for relocated files
    """

    def __init__(self, outputPath: Optional[str] = None) -> None:
        self.outputPath = outputPath

    def replacement_make(self, directive: Directive, outcome: ResolutionOutcome) -> str:
        """
        Text that takes the place of one directive statement

        Example:
            For pal(images/logo.png) relocated as "logo.a1b2.png":
                Substitutor()               -> "images/logo.a1b2.png"
                Substitutor("dist/assets/") -> "dist/assets/logo.a1b2.png"
            For Inline("data:image/png;base64,...") the value is used as-is.
        """
        if isinstance(outcome, Inline):
            return outcome.value
        if self.outputPath:
            return self.outputPath + outcome.name
        directory = posixpath.dirname(directive.resourceLocator)
        return posixpath.join(directory, outcome.name) if directory else outcome.name

    def substitute(self, text: str, resolutions: List[Resolution]) -> str:
        """
        Rewrite every directive span of text

        Args:
            text: Scanned document text (ScanResult.text)
            resolutions: One Resolution per directive, in document order

        Returns:
            Rewritten document; text unchanged when there are no resolutions

        Raises:
            UnresolvedDirectivesError: If any resolution failed. Lists every
                                       failing locator; its output holds the
                                       text with the successful directives
                                       substituted
        """
        ordered = sorted(resolutions, key=lambda resolution: resolution.request.directive.start)
        failures = [resolution.error for resolution in ordered if resolution.error is not None]

        for resolution in reversed(ordered):
            if resolution.error is not None:
                continue
            directive = resolution.request.directive
            replacement = self.replacement_make(directive, resolution.outcome)
            text = text[:directive.start] + replacement + text[directive.end:]
            LOG(f"Replaced {directive.rawStatement} with {replacement[:60]}", level=3)

        if failures:
            raise UnresolvedDirectivesError(failures, output=text)
        return text
