"""A background worker backed by threads from the standard library."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from herdweb.worker.job import Args, Job

Handler = Callable[[Args], Any]

_POLL_SECONDS = 0.1


class WorkerError(Exception):
    """Raised when a worker cannot accept or run a job."""


class Worker(ABC):
    """Interface that every background worker implements."""

    @abstractmethod
    def start(self, parent=None) -> None:
        """Start the worker, optionally tied to a parent cancellation event."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the worker."""

    @abstractmethod
    def perform(self, job: Job) -> None:
        """Run a job as soon as possible."""

    @abstractmethod
    def perform_at(self, job: Job, when: datetime) -> None:
        """Run a job at a particular time."""

    @abstractmethod
    def perform_in(self, job: Job, delay) -> None:
        """Run a job after a delay."""

    @abstractmethod
    def register(self, name: str, handler: Handler) -> None:
        """Register a handler under a name."""


def _seconds(delay) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


class SimpleWorker(Worker):
    """Worker that runs every job in its own thread.

    ``parent`` is any object with an ``is_set()`` method, such as a
    ``threading.Event``; once it is set the worker counts as cancelled.
    """

    def __init__(self, parent=None) -> None:
        self.logger: logging.Logger = logging.getLogger("herdweb.worker")
        self._parent = parent
        self._done = threading.Event()
        self._handlers: dict[str, Handler] = {}
        self._lock = threading.Lock()
        self._threads_lock = threading.Lock()
        self._threads: set[threading.Thread] = set()
        self._started = False

    def _cancelled(self) -> bool:
        if self._done.is_set():
            return True
        return self._parent is not None and self._parent.is_set()

    def _wait_cancelled(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while True:
            if self._cancelled():
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._done.wait(min(remaining, _POLL_SECONDS))

    def _spawn(self, target: Callable[[], None]) -> None:
        def run() -> None:
            try:
                target()
            finally:
                with self._threads_lock:
                    self._threads.discard(threading.current_thread())

        thread = threading.Thread(target=run, daemon=True)
        with self._threads_lock:
            self._threads.add(thread)
        thread.start()

    def register(self, name: str, handler: Handler) -> None:
        if not name or handler is None:
            raise WorkerError("name or handler cannot be empty/nil")
        with self._lock:
            if name in self._handlers:
                raise WorkerError(f"handler already mapped for name {name}")
            self._handlers[name] = handler

    def start(self, parent=None) -> None:
        self.logger.info("starting Simple background worker")
        with self._lock:
            self._parent = parent
            self._done = threading.Event()
            self._started = True

    def stop(self) -> None:
        with self._lock:
            self.logger.info("stopping Simple background worker")
            self._done.set()
        while True:
            with self._threads_lock:
                pending = [t for t in self._threads if t is not threading.current_thread()]
            if not pending:
                break
            for thread in pending:
                thread.join()
        self.logger.info("all background jobs stopped completely")

    def perform(self, job: Job) -> None:
        with self._lock:
            if not self._started:
                raise WorkerError("worker is not yet started")
            if self._cancelled():
                raise WorkerError("worker is not ready to perform a job: context canceled")

            self.logger.debug("performing job %s", job)

            if not job.handler:
                err = WorkerError(f"no handler name given: {job}")
                self.logger.error("%s", err)
                raise err

            handler = self._handlers.get(job.handler)
            if handler is None:
                err = WorkerError(f"no handler mapped for name {job.handler}")
                self.logger.error("%s", err)
                raise err

            def run() -> None:
                try:
                    handler(job.args)
                except Exception as exc:  # a failing job must not take the worker down
                    self.logger.error("%s", exc)
                self.logger.debug("completed job %s", job)

            self._spawn(run)

    def perform_at(self, job: Job, when: datetime) -> None:
        self.perform_in(job, when - datetime.now(when.tzinfo))

    def perform_in(self, job: Job, delay) -> None:
        if self._cancelled():
            raise WorkerError("worker is not ready to perform a job: context canceled")

        remaining = _seconds(delay)

        def wait_then_perform() -> None:
            nonlocal remaining
            while True:
                with self._lock:
                    if self._started or self._cancelled():
                        break
                time.sleep(_POLL_SECONDS)
                remaining -= _POLL_SECONDS

            if self._wait_cancelled(remaining):
                self._done.set()
                return
            try:
                self.perform(job)
            except WorkerError:
                pass

        self._spawn(wait_then_perform)