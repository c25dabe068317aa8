"""
Loader options

Validation and normalization of the user-facing options (root, outputPath,
funcName). Options are immutable for the duration of a run.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import appsettings
from .errors import OptionsError


class LoaderOptions(BaseModel):
    """
    Options recognized by the loader

    Attributes:
        root: Directory used as the base for resolving resource locators
        outputPath: Optional prefix for resolved file names in the output,
                    replacing the locator's own directory
        funcName: Directive function name (default from ASSETPAL_FUNC_NAME)

    Example:
        >>> LoaderOptions(root="assets", outputPath="dist/assets").outputPath
        'dist/assets/'
    """

    model_config = ConfigDict(frozen=True)

    root: Path
    outputPath: Optional[str] = None
    funcName: str = Field(default_factory=lambda: appsettings.func_name)

    @field_validator("outputPath")
    @classmethod
    def outputPath_normalize(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.replace(os.sep, "/")
        if not value.endswith("/"):
            value += "/"
        return value

    @field_validator("funcName")
    @classmethod
    def funcName_validate(cls, value: str) -> str:
        if not value:
            raise ValueError("funcName must not be empty")
        if any(ch in value for ch in "()\\") or any(ch.isspace() for ch in value):
            raise ValueError(f"funcName '{value}' may not contain parentheses, backslashes or whitespace")
        return value

    @classmethod
    def options_fromDict(cls, raw: Optional[Dict[str, Any]]) -> "LoaderOptions":
        """
        Build options from a plain mapping, reporting problems as OptionsError.

        Args:
            raw: Mapping with keys root, outputPath, funcName

        Raises:
            OptionsError: If root is missing or a value is invalid
        """
        raw = dict(raw or {})
        if raw.get("root") in (None, ""):
            raise OptionsError("The 'root' option is required")
        try:
            return cls(**raw)
        except ValidationError as e:
            raise OptionsError(str(e)) from e

    def contextualRoot_compute(self, context: Path) -> str:
        """
        Express root relative to the document directory, with a trailing slash.

        Args:
            context: Directory of the document being processed

        Returns:
            Relative POSIX-style prefix for load paths (e.g., "../assets/")
        """
        relative = Path(os.path.relpath(self.root, context)).as_posix()
        if not relative.endswith("/"):
            relative += "/"
        return relative
