"""
Exception hierarchy for assetpal
"""

from typing import List, Optional


class AssetPalError(Exception):
    """Base class for all assetpal errors"""


class OptionsError(AssetPalError, ValueError):
    """Raised when loader options are missing or invalid"""


class ResolutionError(AssetPalError):
    """
    A single resource locator could not be resolved

    Attributes:
        locator: The directive's resource locator as written in the document
        loadPath: The path handed to the resolution service
        cause: The underlying exception, if any
    """

    def __init__(self, locator: str, loadPath: str, cause: Optional[BaseException] = None) -> None:
        self.locator = locator
        self.loadPath = loadPath
        self.cause = cause
        reason = f": {cause}" if cause is not None and str(cause) else ""
        detail = type(cause).__name__ + reason if cause is not None else "no result"
        super().__init__(f"Cannot resolve '{locator}' (loaded as '{loadPath}'): {detail}")


class UnresolvedDirectivesError(AssetPalError):
    """
    One or more directives of a document failed to resolve

    Aggregates every failure of the run instead of reporting only the first.

    Attributes:
        failures: One ResolutionError per failing directive, in document order
        output: Document with every successful directive substituted and the
                failing statements left as written
    """

    def __init__(self, failures: List[ResolutionError], output: Optional[str] = None) -> None:
        self.failures = failures
        self.output = output
        lines = "\n".join(f"  - {failure}" for failure in failures)
        super().__init__(f"{len(failures)} directive(s) could not be resolved:\n{lines}")

    @property
    def locators(self) -> List[str]:
        """Failing locators in document order"""
        return [failure.locator for failure in self.failures]
