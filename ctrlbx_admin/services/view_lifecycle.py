# =======================================================================================
# ctrlbx_admin/services/view_lifecycle.py - View Lifecycle and Request Cancellation
# =======================================================================================
import asyncio
import itertools
import logging
from typing import Any, Awaitable, List, Optional, Set

from ..utils.exceptions import StaleViewError
from . import capabilities

logger = logging.getLogger(__name__)

_generations = itertools.count(1)


class CancellationToken:
    """Marks one visit to a view; cancelled when the operator leaves it."""

    def __init__(self, view: str):
        self.view = view
        self.generation = next(_generations)
        self.cancelled = False
        self._tasks: Set[asyncio.Task] = set()

    def cancel(self) -> None:
        self.cancelled = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise StaleViewError(f"View '{self.view}' was left before its data arrived")

    def track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class ViewNavigator:
    """
    Keeps track of the active view.

    Navigating away cancels the previous view's token: its in-flight fetches
    are cancelled and any result still arriving is discarded instead of being
    rendered.
    """

    def __init__(self):
        self.current: Optional[CancellationToken] = None

    def navigate(self, view: str, role: Optional[str] = None) -> CancellationToken:
        if role is not None:
            capabilities.require(role, capabilities.NAVIGATION.get(view, "dashboard.view"))
        if self.current is not None and self.current.view == view and not self.current.cancelled:
            return self.current
        self.leave()
        self.current = CancellationToken(view)
        return self.current

    def leave(self) -> None:
        if self.current is not None:
            logger.debug("Leaving view %s (generation %s)", self.current.view, self.current.generation)
            self.current.cancel()
            self.current = None


async def gather(token: CancellationToken, *aws: Awaitable[Any],
                 return_exceptions: bool = False) -> List[Any]:
    """
    Fire every fetch at once and wait for all of them, bound to a view token.

    Raises StaleViewError when the view was left meanwhile, whether the tasks
    were cancelled underneath us or simply finished late.
    """
    if token.cancelled:
        for aw in aws:
            if asyncio.iscoroutine(aw):
                aw.close()
        token.raise_if_cancelled()
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    for task in tasks:
        token.track(task)
    try:
        results = await asyncio.gather(*tasks, return_exceptions=return_exceptions)
    except asyncio.CancelledError:
        if token.cancelled:
            raise StaleViewError(f"View '{token.view}' was left before its data arrived")
        raise
    token.raise_if_cancelled()
    return list(results)
