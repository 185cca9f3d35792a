"""
Activity-driven commit scheduling.

Two independent timers trigger the commit pipeline:
- a periodic timer that fires every `period` seconds regardless of activity
- an inactivity timer that is pushed back on every activity pulse and fires
  once the editor has been quiet for `inactivity_delay` seconds

Timer handles are recreated on every (re)arm and never reused, so a
callback scheduled before disable() cannot fire afterwards.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 60.0
DEFAULT_INACTIVITY_DELAY = 10.0


class ActivityScheduler:
    """
    Drives a trigger coroutine from a periodic and an inactivity timer.

    Must be enabled from inside a running event loop.

    Example:
        scheduler = ActivityScheduler(pipeline.run, period=60, inactivity_delay=10)
        scheduler.enable()
        scheduler.record_activity("edit")
        ...
        scheduler.disable()
    """

    def __init__(
        self,
        trigger: Callable[[], Awaitable],
        period: float = DEFAULT_PERIOD,
        inactivity_delay: float = DEFAULT_INACTIVITY_DELAY
    ):
        """
        Args:
            trigger: Coroutine function started on every timer fire
            period: Periodic timer interval in seconds
            inactivity_delay: Quiet period in seconds before the inactivity trigger
        """
        self.trigger = trigger
        self.period = period
        self.inactivity_delay = inactivity_delay

        self._enabled = False
        self._periodic_handle: Optional[asyncio.TimerHandle] = None
        self._inactivity_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self.fire_count = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def in_flight(self) -> int:
        """Number of trigger runs still executing"""
        return len(self._tasks)

    def enable(self, period: Optional[float] = None) -> None:
        """
        Start (or restart) both timers.

        Existing timers are cancelled first, so re-enabling never stacks
        duplicate timers.

        Args:
            period: New periodic interval in seconds (keeps the current one if None)
        """
        self._cancel_timers()
        if period is not None:
            self.period = period

        self._enabled = True
        self._arm_periodic()
        self._arm_inactivity()
        logger.info(
            f"Auto-commit enabled (period={self.period}s, "
            f"inactivity_delay={self.inactivity_delay}s)"
        )

    def disable(self) -> None:
        """Cancel both timers; runs already in flight finish on their own."""
        self._enabled = False
        self._cancel_timers()
        logger.info("Auto-commit disabled")

    def record_activity(self, kind: str = "edit") -> bool:
        """
        Report an editor activity pulse (edit, selection, focus).

        Returns:
            True if the inactivity timer was re-armed, False while disabled
        """
        if not self._enabled:
            logger.debug(f"Ignoring {kind} activity: auto-commit disabled")
            return False

        self._cancel_inactivity()
        self._arm_inactivity()
        logger.debug(f"Activity ({kind}), inactivity timer reset")
        return True

    async def wait_idle(self) -> None:
        """Wait for every in-flight trigger run to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _arm_periodic(self) -> None:
        loop = asyncio.get_event_loop()
        self._periodic_handle = loop.call_later(self.period, self._on_periodic)

    def _arm_inactivity(self) -> None:
        loop = asyncio.get_event_loop()
        self._inactivity_handle = loop.call_later(self.inactivity_delay, self._on_inactivity)

    def _cancel_inactivity(self) -> None:
        if self._inactivity_handle is not None:
            self._inactivity_handle.cancel()
            self._inactivity_handle = None

    def _cancel_timers(self) -> None:
        if self._periodic_handle is not None:
            self._periodic_handle.cancel()
            self._periodic_handle = None
        self._cancel_inactivity()

    def _on_periodic(self) -> None:
        self._periodic_handle = None
        if not self._enabled:
            return
        self._arm_periodic()
        self._fire("periodic")

    def _on_inactivity(self) -> None:
        self._inactivity_handle = None
        if not self._enabled:
            return
        self._fire("inactivity")

    def _fire(self, source: str) -> None:
        self.fire_count += 1
        logger.debug(f"{source} timer fired, starting pipeline run")
        task = asyncio.ensure_future(self.trigger())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Pipeline run failed: {error}", exc_info=error)
