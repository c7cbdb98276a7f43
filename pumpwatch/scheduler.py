"""
POLL SCHEDULER

Runs scan cycles on a fixed wall-clock interval.

- First cycle runs immediately
- Cycles never overlap: the next one is scheduled only after the current one
  finishes
- If a cycle overruns the interval, the next one starts right away
- Shutdown is cooperative: request_stop() ends the sleep, the in-flight cycle
  always completes
"""

import asyncio
import signal
import time
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 60.0


@dataclass
class LoopState:
    """Mutable loop state owned by the scheduler."""
    running: bool = False
    stop_requested: bool = False
    cycles_completed: int = 0
    cycles_failed: int = 0
    last_cycle_started: Optional[float] = None
    last_cycle_duration: Optional[float] = None


class PollScheduler:
    """Fixed-interval scheduler for a single async cycle callback."""

    def __init__(self, config: Dict = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or {}
        self.interval = float(self.config.get('poll_interval', DEFAULT_POLL_INTERVAL))
        if self.interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.interval}")

        self.state = LoopState()
        self._clock = clock
        self._stop_event: Optional[asyncio.Event] = None

    def request_stop(self):
        """Stop scheduling further cycles. Safe to call from a signal handler."""
        if not self.state.stop_requested:
            logger.info("[SCHEDULER] Stop requested, finishing current cycle")
        self.state.stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    def install_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Route SIGINT/SIGTERM to request_stop where the loop supports it."""
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
            except (NotImplementedError, RuntimeError):
                # Windows event loops: KeyboardInterrupt still reaches main()
                logger.debug(f"[SCHEDULER] Signal handler for {sig.name} not supported")

    async def _sleep_until(self, deadline: float):
        remaining = deadline - self._clock()
        if remaining <= 0:
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            pass

    async def run(self, cycle: Callable[[], Awaitable], max_cycles: Optional[int] = None):
        """
        Run cycle() until stopped.

        Args:
            cycle: Async callable performing one scan; exceptions are logged
            max_cycles: Stop after this many cycles (None = until stopped)
        """
        self._stop_event = asyncio.Event()
        if self.state.stop_requested:
            self._stop_event.set()

        self.state.running = True
        logger.info(f"[SCHEDULER] Polling every {self.interval:.0f}s")

        try:
            while not self.state.stop_requested:
                started = self._clock()
                self.state.last_cycle_started = time.time()

                try:
                    await cycle()
                except Exception as e:
                    self.state.cycles_failed += 1
                    logger.exception(f"[SCHEDULER] Cycle error: {e}")

                self.state.cycles_completed += 1
                self.state.last_cycle_duration = self._clock() - started

                if max_cycles is not None and self.state.cycles_completed >= max_cycles:
                    break
                if self.state.stop_requested:
                    break

                if self.state.last_cycle_duration > self.interval:
                    logger.warning(
                        f"[SCHEDULER] Cycle took {self.state.last_cycle_duration:.1f}s "
                        f"(interval {self.interval:.0f}s), starting next immediately"
                    )
                await self._sleep_until(started + self.interval)
        finally:
            self.state.running = False
            logger.info(f"[SCHEDULER] Stopped after {self.state.cycles_completed} cycle(s)")

    def get_stats(self) -> Dict:
        return {
            'interval': self.interval,
            'running': self.state.running,
            'cycles_completed': self.state.cycles_completed,
            'cycles_failed': self.state.cycles_failed,
            'last_cycle_duration': self.state.last_cycle_duration,
        }
