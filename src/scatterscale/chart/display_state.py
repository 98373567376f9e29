from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

from loguru import logger

Task = Callable[[], None]


@dataclass(frozen=True)
class Domain:
    """Span an axis must cover. A None bound is derived from the data."""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_auto(self) -> bool:
        return self.min is None and self.max is None

    @property
    def is_valid(self) -> bool:
        """False for an inverted window, which is treated as no window at all."""
        if self.min is None or self.max is None:
            return True
        return self.min <= self.max


@dataclass(frozen=True)
class ViewRequest:
    """Recompute request waiting for the next scheduler tick."""

    domain: Optional[Domain] = None
    width: Optional[int] = None
    height: Optional[int] = None
    reset: bool = False


class DisplayState:
    """
    Manages the zoom window and the deferred recompute slot of a chart.

    A zoom or resize request is stored in a single pending slot and one task is
    posted to run the recompute on the next scheduler tick. Requests arriving
    before that task runs overwrite the slot, so a burst of requests ends in a
    single recompute with the latest parameters. The ``busy`` flag is raised as
    soon as a request is accepted and lowered when the recompute finishes.
    """

    def __init__(self, post: Optional[Callable[[Task], None]] = None):
        """
        Initialise display state.

        Parameters
        ----------
        post : Optional[Callable[[Task], None]], default=None
            Schedules a task on the next tick of an event loop, e.g.
            ``loop.call_soon``. When None, tasks are queued internally and run
            by ``run_pending``.
        """
        self._queue: Deque[Task] = deque()
        self._post = post if post is not None else self._queue.append

        self.domain: Optional[Domain] = None
        self._pending: Optional[ViewRequest] = None
        self._posted = False
        self._busy = False
        self._handler: Optional[Callable[[ViewRequest], None]] = None

    def bind(self, handler: Callable[[ViewRequest], None]) -> None:
        """Set the function that performs a recompute for a request."""
        self._handler = handler

    @property
    def busy(self) -> bool:
        """True from an accepted request until its recompute has finished."""
        return self._busy

    @property
    def pending(self) -> Optional[ViewRequest]:
        return self._pending

    def request(self, request: ViewRequest) -> None:
        """
        Store a request in the pending slot, replacing any earlier one.

        Only the first request of a burst posts a task.
        """
        if self._pending is not None:
            logger.debug(f"Superseding pending request {self._pending}")
        self._pending = request
        self._busy = True
        if not self._posted:
            self._posted = True
            self._post(self._run)

    def _run(self) -> None:
        self._posted = False
        request = self._pending
        self._pending = None
        if request is None:
            return
        try:
            if self._handler is not None:
                self._handler(request)
        finally:
            self._busy = self._pending is not None

    def run_pending(self) -> int:
        """
        Run tasks queued on the internal queue.

        Returns
        -------
        int
            Number of tasks run.
        """
        count = 0
        while self._queue:
            task = self._queue.popleft()
            task()
            count += 1
        return count

    def set_domain(self, domain: Optional[Domain]) -> None:
        if domain != self.domain:
            logger.info(f"Zoom window changed from {self.domain} to {domain}")
        self.domain = domain

    def reset_to_initial_state(self) -> None:
        """Forget the zoom window and drop any pending request."""
        self.domain = None
        self._pending = None
        self._busy = False
