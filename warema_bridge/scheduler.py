"""
Task supervisor - periodic and one-shot timers.

Timers never touch bridge state. Each firing only calls a short callback
(the service enqueues a TimerFired / FollowUpDue event), so all real work
still runs on the dispatch thread.

Threading Model:
- One daemon thread per periodic task (Event.wait loop)
- threading.Timer for one-shot delays
- cancel_all() stops everything as one unit
"""

import logging
import threading
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Calls ``callback`` every ``interval`` seconds until cancelled.

    The first call happens one interval after start().
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], None]):
        if interval <= 0:
            raise ValueError(f"Task '{name}' interval must be > 0, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.tick_count = 0
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"Periodic-{name}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def cancel(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.tick_count += 1
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Periodic task '{self.name}' failed: {e}", exc_info=True)


class TaskSupervisor:
    """
    Owns the bridge's timers.

    Example:
        supervisor = TaskSupervisor()
        supervisor.start({
            "availability": (150.0, lambda: service.submit(TimerFired("availability"))),
            "wake_up": (60.0, lambda: service.submit(TimerFired("wake_up"))),
        })
        supervisor.call_later(1.0, follow_up)
        supervisor.cancel_all()
    """

    def __init__(self):
        self._tasks: Dict[str, PeriodicTask] = {}
        self._timers: List[threading.Timer] = []
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        with self._lock:
            return bool(self._tasks)

    @property
    def task_names(self) -> List[str]:
        with self._lock:
            return list(self._tasks)

    def start(self, tasks: Dict[str, tuple]) -> None:
        """
        Start periodic tasks, replacing any that are already running.

        Args:
            tasks: name -> (interval_seconds, callback)
        """
        self.cancel_all()

        started = {name: PeriodicTask(name, interval, callback) for name, (interval, callback) in tasks.items()}
        with self._lock:
            self._tasks = started
        for task in started.values():
            task.start()
            logger.info(f"⏱️  Started periodic task '{task.name}' every {task.interval:g}s")

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        """Run ``callback`` once after ``delay`` seconds, unless cancelled first."""
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()
        return timer

    def cancel_all(self) -> None:
        """Cancel every periodic task and pending one-shot timer."""
        with self._lock:
            tasks = list(self._tasks.values())
            timers = list(self._timers)
            self._tasks = {}
            self._timers = []

        for timer in timers:
            timer.cancel()
        for task in tasks:
            task.cancel()
            logger.info(f"Cancelled periodic task '{task.name}'")
