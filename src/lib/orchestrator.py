"""
Resolution orchestrator

Issues one resolution request per directive, all at once, and waits for
every one of them to finish (fan-out/fan-in). A failing request is recorded
in its own Resolution slot and never cancels or blocks its siblings.
"""

import asyncio
from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

from ..config import appsettings
from ..models.directives import Directive
from ..models.errors import ResolutionError
from ..models.resolution import Inline, RelocatedName, Resolution, ResolutionRequest
from .log import LOG
from .resolver import ResolutionService


class Orchestrator:
    """
    Concurrent resolution of a document's directives

    Attributes:
        service: Resolution service answering each request
        contextualRoot: Prefix joined with every locator (trailing "/")
        context: Directory of the document; load paths are relative to it
        maxConcurrency: Optional bound on in-flight requests
        timeout: Optional per-request timeout in seconds
    """

    def __init__(
        self,
        service: ResolutionService,
        contextualRoot: str,
        context: Path,
        maxConcurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.service = service
        self.contextualRoot = contextualRoot
        self.context = context
        self.maxConcurrency = maxConcurrency if maxConcurrency is not None else appsettings.max_concurrency
        self.timeout = timeout if timeout is not None else appsettings.resolve_timeout

    def request_make(self, directive: Directive) -> ResolutionRequest:
        return ResolutionRequest(
            directive=directive,
            loadPath=self.contextualRoot + directive.resourceLocator,
            context=self.context,
        )

    async def resolve_all(self, directives: List[Directive]) -> List[Resolution]:
        """
        Resolve every directive concurrently

        All requests are scheduled before any is awaited; the call returns
        only once each has produced an outcome or a recorded failure.

        Args:
            directives: Directives in document order

        Returns:
            One Resolution per directive, in the same order
        """
        if not directives:
            return []

        limiter = asyncio.Semaphore(self.maxConcurrency) if self.maxConcurrency else None
        tasks = [
            asyncio.ensure_future(self.request_resolve(self.request_make(directive), limiter))
            for directive in directives
        ]
        LOG(f"Dispatched {len(tasks)} resolution request(s)", level=2)
        resolutions = await asyncio.gather(*tasks)

        failed = sum(1 for resolution in resolutions if not resolution.ok)
        LOG(f"Resolved {len(resolutions) - failed}/{len(resolutions)} directive(s)", level=2)
        return list(resolutions)

    async def request_resolve(
        self, request: ResolutionRequest, limiter: Optional[asyncio.Semaphore]
    ) -> Resolution:
        """
        Run one request against the service and fill its result slot

        Any exception raised by the service (including a timeout) becomes
        a ResolutionError on the returned Resolution.
        """
        locator = request.directive.resourceLocator
        try:
            async with limiter if limiter is not None else nullcontext():
                if self.timeout is not None:
                    outcome = await asyncio.wait_for(self.service.resolve(request), self.timeout)
                else:
                    outcome = await self.service.resolve(request)
        except Exception as e:
            error = ResolutionError(locator, request.loadPath, e)
            LOG(str(error), level=1, severity="ERROR")
            return Resolution(request=request, error=error)

        if not isinstance(outcome, (Inline, RelocatedName)):
            error = ResolutionError(locator, request.loadPath, None)
            LOG(f"{error} (service returned {outcome!r})", level=1, severity="ERROR")
            return Resolution(request=request, error=error)

        LOG(f"'{locator}' -> {type(outcome).__name__}", level=2)
        return Resolution(request=request, outcome=outcome)
