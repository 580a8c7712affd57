"""Install/activate lifecycle and request interception for the gallery.

The process that hosts the handler (a browser runtime, or
the FastAPI app here) calls :meth:`GalleryWorker.install` and
:meth:`GalleryWorker.activate` once.  Neither hook does any work beyond
recording that the worker now owns interception of future requests.

After activation, :meth:`GalleryWorker.fetch` routes requests under the
base path through the router and returns ``None`` for anything else so the
host can let it pass through.
"""

from __future__ import annotations

import logging
from enum import Enum

from swgallery.worker.handlers import GalleryContext, build_router
from swgallery.worker.messages import GalleryRequest, GalleryResponse

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    NEW = "new"
    INSTALLED = "installed"
    ACTIVATED = "activated"


class GalleryWorker:
    """Owns the router and exposes the lifecycle hooks.

    Attributes:
        context: Dependencies shared by all handlers.
        router: Routing table built from ``context``.
        state: Current lifecycle state.
    """

    def __init__(self, context: GalleryContext) -> None:
        self.context = context
        self.router = build_router(context)
        self.state = WorkerState.NEW

    @property
    def controlling(self) -> bool:
        """Whether the worker has claimed interception of requests."""
        return self.state is WorkerState.ACTIVATED

    def install(self) -> None:
        """Take the waiting slot immediately; there is nothing to precache."""
        self.state = WorkerState.INSTALLED
        logger.info("Gallery worker installed")

    def activate(self) -> None:
        """Claim control of all future requests."""
        self.state = WorkerState.ACTIVATED
        logger.info(f"Gallery worker activated, intercepting {self.router.base_path}/*")

    async def fetch(self, request: GalleryRequest) -> GalleryResponse | None:
        """Handle *request* if the worker owns it.

        Returns:
            The router's response, or ``None`` when the worker is not yet
            controlling or the path lies outside the base path.
        """
        if not self.controlling or not self.router.owns(request.path):
            return None
        return await self.router.dispatch(request)
