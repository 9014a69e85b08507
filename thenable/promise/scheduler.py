# -*- coding: utf-8 -*-

"""Schedulers deferring the execution of the Promise callbacks.

The callbacks chained to a Promise are never executed in the call stack who
registered them: they are submitted to a scheduler, who executes them later,
one at a time, in the order of submission.

Two schedulers are available:
- ``QueueScheduler`` keeps the jobs until they're run by the application
  thread, with ``run()``, or by ``Promise.result()`` while it waits. It's the
  default one: nothing runs before the code who registered a callback gives
  the control back.
- ``ThreadScheduler`` runs the jobs in a dedicated thread, who behaves like
  an event loop. The jobs may start while the code who registered them is
  still running in another thread.

The scheduler used by all promises is given by ``get_scheduler()``. It's
created at first use, according to the config entry ``scheduler``.
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
import logging
from threading import Condition, Lock, RLock
import time

from ..common import config

_logger = logging.getLogger(__name__)


def _run_job(fn, args):
    try:
        fn(*args)
    except Exception:
        _logger.exception('Scheduled job %s has raised an exception!',
                          getattr(fn, '__name__', fn))


class ThreadScheduler(object):
    """Execute the jobs in a dedicated thread, in FIFO order.

    All the jobs are run by the same worker thread, so two jobs are never
    executed at the same time.
    """

    def __init__(self, name='promise-loop'):
        self._name = name
        self._lock = Lock()
        self._executor = None

    def call_soon(self, fn, *args):
        """Schedule a call to ``fn(*args)``.

        Returns:
            concurrent.futures.Future: future of the job.
        """
        with self._lock:
            if self._executor is None:
                _logger.debug('Start scheduler "%s"', self._name)
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix=self._name)
            return self._executor.submit(_run_job, fn, args)

    def run_until(self, predicate, timeout=None):
        """Jobs are run by the worker thread: nothing to do here."""
        return predicate()

    def wake(self):
        pass

    def flush(self, timeout=None):
        """Wait until all jobs submitted before this call are executed.

        Jobs submitted by these jobs may not be executed yet.

        Args:
            timeout (float, optional): maximum time to wait, in seconds.
        Raises:
            concurrent.futures.TimeoutError: if the jobs are not done in time.
        """
        self.call_soon(lambda: None).result(timeout)

    def stop(self):
        """Execute all the remaining jobs, then stop the worker thread.

        The scheduler can be used again after: a new thread will be started.
        """
        with self._lock:
            executor, self._executor = self._executor, None
        if executor:
            _logger.debug('Stop scheduler "%s"', self._name)
            executor.shutdown(wait=True)


class QueueScheduler(object):
    """Keep the jobs in queue until the application thread runs them.

    Jobs are executed in the thread calling ``run()``, ``run_one()`` or
    ``run_until()``. If several threads drive the same scheduler, the jobs
    are still executed one at a time, in FIFO order.

    Jobs can be submitted from any thread.
    """

    def __init__(self):
        self._jobs = deque()
        self._condition = Condition(Lock())
        self._run_lock = RLock()

    def call_soon(self, fn, *args):
        """Schedule a call to ``fn(*args)``."""
        with self._condition:
            self._jobs.append((fn, args))
            self._condition.notify_all()

    def wake(self):
        """Interrupt the threads blocked in ``run_until()``.

        They will check their predicate again.
        """
        with self._condition:
            self._condition.notify_all()

    def __len__(self):
        return len(self._jobs)

    def run(self):
        """Execute all jobs, including the ones added during the execution.

        Returns:
            int: number of executed jobs.
        """
        count = 0
        while self.run_one():
            count += 1
        return count

    def run_one(self):
        """Execute the oldest job, if any.

        Returns:
            boolean: True if a job has been executed.
        """
        with self._run_lock:
            with self._condition:
                if not self._jobs:
                    return False
                fn, args = self._jobs.popleft()
            _run_job(fn, args)
        return True

    def run_until(self, predicate, timeout=None):
        """Execute the jobs until the predicate becomes true.

        When there is no job to execute, it waits for new jobs, or for a
        call to ``wake()``.

        Args:
            predicate (callable): called without argument, returns a boolean.
                It's checked before each job.
            timeout (float, optional): maximum time to wait for jobs, in
                seconds. Available jobs are executed even when it's expired.
        Returns:
            boolean: the last value of the predicate.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not predicate():
            if self.run_one():
                continue
            with self._condition:
                if self._jobs or predicate():
                    continue
                if deadline is None:
                    self._condition.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    self._condition.wait(remaining)
        return True


_schedulers = {
    'queue': QueueScheduler,
    'thread': ThreadScheduler
}

_scheduler = None
_scheduler_lock = Lock()


def get_scheduler():
    """Returns the scheduler used by the promises.

    At first call, the scheduler is created from the ``scheduler`` config
    entry. An unknown value falls back to the queue scheduler.
    """
    global _scheduler

    with _scheduler_lock:
        if _scheduler is None:
            name = config.get('scheduler')
            if name not in _schedulers:
                _logger.warning('Unknown scheduler "%s". The "queue" '
                                'scheduler will be used.', name)
                name = 'queue'
            _scheduler = _schedulers[name]()
        return _scheduler


def set_scheduler(scheduler):
    """Replace the scheduler used by the promises.

    Args:
        scheduler: new scheduler, having the methods ``call_soon()``,
            ``run_until()`` and ``wake()``. If None, the next call to
            ``get_scheduler()`` will create a new one from the config.
    Returns:
        the previous scheduler (can be None).
    """
    global _scheduler

    with _scheduler_lock:
        previous, _scheduler = _scheduler, scheduler
    return previous


def call_soon(fn, *args):
    """Schedule a call to ``fn(*args)`` on the current scheduler."""
    get_scheduler().call_soon(fn, *args)
