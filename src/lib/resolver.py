"""
Resolution services

A resolution service takes a ResolutionRequest and asynchronously returns
either Inline(value) or RelocatedName(name), or raises. Two services ship
with assetpal:

- FileSystemResolver: reads the file, inlines small images as data URIs
  and copies everything else to an emit directory under a
  content-addressed name (logo.png -> logo.<hash>.png).
- SourceStringResolver: adapts services that answer with an opaque module
  source string (e.g. 'module.exports = "/static/logo.1f2e.png"') by
  sniffing the inline marker or extracting the file's base name.
"""

import asyncio
import base64
import hashlib
import mimetypes
import os
import posixpath
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol

from ..config import appsettings
from ..models.resolution import Inline, RelocatedName, ResolutionOutcome, ResolutionRequest
from .log import LOG


class ResolutionService(Protocol):
    """Anything that can resolve a ResolutionRequest"""

    async def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        ...


class FileSystemResolver:
    """
    Resolve load paths against the local filesystem

    Attributes:
        emitDir: Directory receiving relocated files
        inlineLimit: Largest file size (bytes) inlined as a data URI; 0 disables inlining
        preserveDirs: Emit under the locator's directory (emitDir/images/logo.<hash>.png)
                      so the default rewritten reference stays valid relative to
                      emitDir; when False, files are emitted flat into emitDir
    """

    def __init__(self, emitDir: Path, inlineLimit: Optional[int] = None, preserveDirs: bool = True) -> None:
        self.emitDir = Path(emitDir)
        self.inlineLimit = appsettings.inline_limit if inlineLimit is None else inlineLimit
        self.preserveDirs = preserveDirs

    async def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        # File IO runs in a worker thread so sibling requests keep progressing
        return await asyncio.to_thread(self.file_process, request)

    def file_process(self, request: ResolutionRequest) -> ResolutionOutcome:
        """
        Inline or relocate the file named by the request

        Raises:
            FileNotFoundError: If the load path does not name a file
        """
        path = Path(request.context) / request.loadPath
        if not path.is_file():
            raise FileNotFoundError(f"No such file: {path}")

        content = path.read_bytes()
        mimetype, _ = mimetypes.guess_type(path.name)
        if self.inline_accepts(mimetype, len(content)):
            encoded = base64.b64encode(content).decode("ascii")
            LOG(f"Inlining {path.name} ({len(content)} bytes)", level=3)
            return Inline(f"data:{mimetype};base64,{encoded}")

        digest = hashlib.new(appsettings.hash_algorithm, content).hexdigest()
        name = appsettings.hashedName_make(path.stem, digest, path.suffix)
        targetDir = self.targetDir_compute(request.directive.resourceLocator)
        target = targetDir / name
        if not target.exists():
            targetDir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            LOG(f"Emitted {target}", level=3)
        return RelocatedName(name)

    def targetDir_compute(self, locator: str) -> Path:
        """
        Directory a relocated file is written to

        Example:
            For emitDir "out" and locator "images/logo.png":
                preserveDirs=True  -> out/images
                preserveDirs=False -> out
        """
        directory = posixpath.dirname(locator.replace("\\", "/"))
        if not self.preserveDirs or not directory:
            return self.emitDir
        return self.emitDir / posixpath.normpath(directory).lstrip("/")

    def inline_accepts(self, mimetype: Optional[str], size: int) -> bool:
        if self.inlineLimit <= 0 or mimetype is None:
            return False
        return mimetype.startswith(appsettings.inline_mimetypes) and size <= self.inlineLimit


def outcome_fromRaw(raw: Optional[str], marker: Optional[str] = None) -> ResolutionOutcome:
    """
    Classify an opaque resolver answer

    If the inline marker occurs, the inlined value runs from the marker to
    the last double quote (or the end of the string). Otherwise the result
    is the base name: the text after the last path separator up to the next
    double quote.

    Args:
        raw: Opaque string returned by a resolver
        marker: Inline marker (default from settings, "data:image")

    Raises:
        ValueError: If raw is empty or contains no usable file name

    Example:
        >>> outcome_fromRaw('module.exports = __webpack_public_path__ + "img/logo.a1b2.png";')
        RelocatedName(name='logo.a1b2.png')
        >>> outcome_fromRaw('module.exports = "data:image/png;base64,iVBO"')
        Inline(value='data:image/png;base64,iVBO')
    """
    if not raw:
        raise ValueError("Resolver returned an empty result")

    marker = marker or appsettings.inline_marker
    marker_index = raw.find(marker)
    if marker_index != -1:
        quote = raw.rfind('"')
        return Inline(raw[marker_index:quote] if quote > marker_index else raw[marker_index:])

    start = max(raw.rfind("/"), raw.rfind(os.sep)) + 1
    quote = raw.find('"', start)
    name = raw[start:quote] if quote != -1 else raw[start:]
    if not name:
        raise ValueError(f"No file name in resolver result {raw!r}")
    return RelocatedName(name)


class SourceStringResolver:
    """
    Adapter for services answering with opaque module source strings

    Attributes:
        fetch: Coroutine function taking a load path and returning the raw string
        marker: Inline marker passed to outcome_fromRaw()
    """

    def __init__(self, fetch: Callable[[str], Awaitable[str]], marker: Optional[str] = None) -> None:
        self.fetch = fetch
        self.marker = marker

    async def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        raw = await self.fetch(request.loadPath)
        return outcome_fromRaw(raw, self.marker)

    @classmethod
    def fromCallback(
        cls,
        loadModule: Callable[[str, Callable[[Optional[BaseException], Optional[str]], None]], None],
        marker: Optional[str] = None,
    ) -> "SourceStringResolver":
        """
        Wrap a node-style loadModule(path, callback(err, source)) function

        The callback may fire synchronously, later on the loop, or from
        another thread.
        """

        async def fetch(loadPath: str) -> str:
            loop = asyncio.get_running_loop()
            future: asyncio.Future = loop.create_future()

            def settle(err: Optional[BaseException], source: Optional[str]) -> None:
                if future.done():
                    return
                if err is not None:
                    future.set_exception(err)
                elif not source:
                    future.set_exception(ValueError(f"No module source for '{loadPath}'"))
                else:
                    future.set_result(source)

            def callback(err: Optional[BaseException], source: Optional[str] = None) -> None:
                loop.call_soon_threadsafe(settle, err, source)

            loadModule(loadPath, callback)
            return await future

        return cls(fetch, marker)
