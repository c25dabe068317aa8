"""
Asset loader

Composes the rewrite pipeline for one document:

    Scanner -> Orchestrator -> Substitutor -> completion

Example:
    loader = AssetLoader({"root": "assets"}, FileSystemResolver("dist"), context="templates")
    loader.run("img(src=pal('images/logo.png'))")
    # -> "img(src=images/logo.<content hash>.png)", file copied to dist/
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from ..models.options import LoaderOptions
from .log import LOG
from .orchestrator import Orchestrator
from .resolver import ResolutionService
from .scanner import Scanner
from .substitution import Substitutor

Completion = Callable[[Optional[BaseException], Optional[str]], Any]


class AssetLoader:
    """
    Rewrites documents whose directives are resolved by a ResolutionService

    A loader holds immutable configuration only; every call to process()
    owns its own document buffer, so one loader may serve many documents.
    """

    def __init__(
        self,
        options: Union[LoaderOptions, Dict[str, Any]],
        service: ResolutionService,
        context: Union[str, Path] = ".",
        maxConcurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize loader

        Args:
            options: LoaderOptions or a mapping with root, outputPath, funcName
            service: Resolution service answering each directive
            context: Directory of the documents being processed
            maxConcurrency: Optional bound on in-flight resolution requests
            timeout: Optional per-request timeout in seconds

        Raises:
            OptionsError: If options are missing or invalid
        """
        if not isinstance(options, LoaderOptions):
            options = LoaderOptions.options_fromDict(options)
        self.options = options
        self.service = service
        self.context = Path(context)
        self.contextualRoot = options.contextualRoot_compute(self.context)
        self.maxConcurrency = maxConcurrency
        self.timeout = timeout

    async def process(self, content: str) -> str:
        """
        Rewrite one document

        Args:
            content: Document text

        Returns:
            Document with every directive replaced by its resolved reference

        Raises:
            UnresolvedDirectivesError: If one or more directives failed to resolve
        """
        scanned = Scanner(content, self.options.funcName).scan()
        if not scanned.directives:
            return scanned.text

        orchestrator = Orchestrator(
            self.service,
            self.contextualRoot,
            self.context,
            maxConcurrency=self.maxConcurrency,
            timeout=self.timeout,
        )
        resolutions = await orchestrator.resolve_all(scanned.directives)
        return Substitutor(self.options.outputPath).substitute(scanned.text, resolutions)

    async def load(self, content: str, callback: Completion) -> None:
        """
        Rewrite one document and signal completion exactly once

        callback(None, text) on success, callback(error, None) on failure.
        """
        try:
            output = await self.process(content)
        except Exception as e:
            LOG(f"Rewrite failed: {e}", level=1, severity="ERROR")
            callback(e, None)
        else:
            callback(None, output)

    def run(self, content: str) -> str:
        """Blocking wrapper around process() for callers without an event loop"""
        return asyncio.run(self.process(content))
