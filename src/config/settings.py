"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use ASSETPAL_ prefix (e.g., ASSETPAL_FUNC_NAME=asset).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use ASSETPAL_ prefix.

    Examples:
        ASSETPAL_FUNC_NAME=asset
        ASSETPAL_INLINE_LIMIT=0
        ASSETPAL_MAX_CONCURRENCY=16
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSETPAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Scanner configuration
    func_name: str = Field(
        default="pal",
        description="Directive function name recognized in documents (matched case-insensitively)",
    )

    # Resolution configuration
    inline_limit: int = Field(
        default=8192,
        ge=0,
        description="Largest file size in bytes that is inlined as a data URI instead of emitted",
    )

    inline_mimetypes: str = Field(
        default="image/",
        description="Mimetype prefix of files eligible for inlining",
    )

    inline_marker: str = Field(
        default="data:image",
        description="Marker identifying an inlined representation in opaque resolver output",
    )

    hash_algorithm: str = Field(
        default="md5",
        description="hashlib algorithm used for content-addressed file names",
    )

    hash_length: int = Field(
        default=20,
        ge=1,
        description="Number of hex digest characters kept in emitted file names",
    )

    max_concurrency: Optional[int] = Field(
        default=None,
        ge=1,
        description="Upper bound on in-flight resolution requests (unbounded when unset)",
    )

    resolve_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait for a single resolution request (waits forever when unset)",
    )

    # CLI configuration
    document_pattern: str = Field(
        default="**/*.pug",
        description="Glob (relative to inputdir) selecting the documents to rewrite",
    )

    def hashedName_make(self, stem: str, digest: str, suffix: str) -> str:
        """
        Build a content-addressed file name.

        Args:
            stem: File name without suffix (e.g., "logo")
            digest: Full hex digest of the file content
            suffix: File suffix including the dot (e.g., ".png")

        Returns:
            Name with the truncated digest between stem and suffix

        Example:
            >>> settings = AppSettings(hash_length=4)
            >>> settings.hashedName_make("logo", "a1b2c3d4", ".png")
            'logo.a1b2.png'
        """
        return f"{stem}.{digest[: self.hash_length]}{suffix}"


# Singleton instance - import this in your code
appsettings = AppSettings()
