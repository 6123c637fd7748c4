"""Background jobs with dependencies, run by a pool of worker threads."""

from __future__ import annotations

import threading
import time
import weakref
from typing import Callable, Iterable, Optional


class Job:
    """A unit of work that may wait on other jobs to finish first."""

    def __init__(self, function: Callable[[], object]) -> None:
        self.function = function
        self.finished = False
        self.error: Optional[BaseException] = None
        self._dependencies: list = []

    def add_dependency(self, job: "Job") -> None:
        """Wait for ``job`` before running; a job that no longer exists does not block."""
        self._dependencies.append(weakref.ref(job))

    def can_run(self) -> bool:
        for ref in self._dependencies:
            dependency = ref()
            if dependency is not None and not dependency.finished:
                return False
        return True

    def _run(self) -> None:
        try:
            self.function()
        except Exception as exc:
            self.error = exc
        finally:
            self.finished = True


class JobSystem:
    """A queue of jobs drained by worker threads."""

    _instance: Optional["JobSystem"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._jobs: list = []
        self._lock = threading.Lock()
        self._threads: list = []
        self._running = False

    @classmethod
    def instance(cls) -> "JobSystem":
        """The shared job system."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def new_job(self, function: Callable[[], object], dependencies: Iterable[Job] = ()) -> Job:
        """Queue ``function`` to run after ``dependencies`` and return its job."""
        job = Job(function)
        for dependency in dependencies:
            job.add_dependency(dependency)
        with self._lock:
            self._jobs.append(job)
        return job

    def start_threads(self, thread_count: int) -> None:
        """Restart the pool with ``thread_count`` worker threads."""
        self.stop_threads()
        self._threads = []
        self._running = True
        for _ in range(thread_count):
            thread = threading.Thread(target=self._thread_entry, daemon=True)
            self._threads.append(thread)
            thread.start()

    def stop_threads(self) -> None:
        """Stop the workers and wait for them to exit."""
        self._running = False
        for thread in self._threads:
            thread.join()

    def _take_runnable(self) -> tuple:
        with self._lock:
            if not self._jobs:
                return False, None
            job = next((j for j in self._jobs if j.can_run()), None)
            if job is not None:
                self._jobs.remove(job)
            return True, job

    def _thread_entry(self) -> None:
        while self._running:
            while True:
                pending, job = self._take_runnable()
                if not pending:
                    break
                if job is None:
                    time.sleep(0)
                    continue
                job._run()
            time.sleep(0.001)