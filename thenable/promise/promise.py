# -*- coding: utf-8 -*-

import logging
from functools import partial
from threading import Condition, Lock
import time

from .errors import RejectedValueError, TimeoutError
from .resolution import resolve_promise
from .scheduler import call_soon, get_scheduler
from .util import is_thenable

_logger = logging.getLogger(__name__)


def _handler_name(handler):
    return getattr(handler, '__name__', '???')


def _invoke_handler(handler, argument, resolve, reject, forward):
    """Execute a callback chained by `Promise.then()`.

    The handler's outcome settles the chained Promise: a raised exception
    rejects it, a returned value goes through the resolution procedure.
    Without handler, the argument is forwarded as is.

    Args:
        handler (callable): the handler, or None.
        argument: value or reason of the source Promise.
        resolve (callable): resolve function of the chained Promise.
        reject (callable): reject function of the chained Promise.
        forward (callable): either `resolve` or `reject`, used when there is
            no handler.
    """
    if handler is None:
        return forward(argument)
    try:
        result = handler(argument)
    except Exception as error:
        _logger.debug('Promise handler %s has raised %r',
                      _handler_name(handler), error)
        return reject(error)
    resolve(result)


class Promise(object):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    The callbacks are always called asynchronously, by the scheduler (see
    `thenable.promise.scheduler`), and never within the call who registered
    them.

    Any object having a callable `then` attribute (a "thenable") is accepted
    wherever a Promise is accepted.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor, _name=None, _previous=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception.

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `resolve()` should be called when the Promise
                is fulfilled (ie the tasks is done) and must accept the
                result's value as its only argument. If this value is a
                Promise, or a thenable, the Promise will follow its state.
                The second, `reject()`, should be called when an error
                occurs. Its argument is the rejection reason, usually an
                instance of `Exception`.
            _name (str): if set, name used when converted to text.
            _previous (Promise): if set, the Promise from which this one has
                been chained. Used when converted to text.
        """

        self._state = self.PENDING
        self._value = None
        self._reason = None
        self._condition = Condition()
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = _previous

        self._callbacks = []
        self._errbacks = []

        def resolve(value):
            resolve_promise(self, value, self._fulfill, self._reject)

        def reject(reason):
            self._reject(reason)

        try:
            executor(resolve, reject)
        except Exception as error:
            self._reject(error)

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    @property
    def value(self):
        """Value of a fulfilled Promise; None in other states."""
        with self._condition:
            return self._value

    @property
    def reason(self):
        """Reason of a rejected Promise; None in other states."""
        with self._condition:
            return self._reason

    def _fulfill(self, value):
        with self._condition:
            callbacks = None
            if self._state == self.PENDING:
                self._value = value
                self._state = self.FULFILLED
                callbacks = self._callbacks

                # Free the references
                self._callbacks = None
                self._errbacks = None

                self._condition.notify_all()

        if callbacks is None:
            _logger.debug('Try to fulfill Promise %r already settled. New '
                          'result will be ignored: %r', self, value)
            return
        for callback in callbacks:
            callback()

    def _reject(self, reason):
        with self._condition:
            errbacks = None
            if self._state == self.PENDING:
                self._reason = reason
                self._state = self.REJECTED
                errbacks = self._errbacks

                # Free the references
                self._callbacks = None
                self._errbacks = None

                self._condition.notify_all()

        if errbacks is None:
            _logger.debug('Try to reject Promise %r already settled. New '
                          'error will be ignored: %r', self, reason)
            return
        for errback in errbacks:
            errback()

    def _add_callbacks(self, callback, errback):
        """Register the two subscribers, or call one now if already settled.

        Args:
            callback (callable): called without argument when fulfilled.
            errback (callable): called without argument when rejected.
        """
        with self._condition:
            if self._state == self.PENDING:
                self._callbacks.append(callback)
                self._errbacks.append(errback)
                return
            is_fulfilled = self._state == self.FULFILLED

        if is_fulfilled:
            callback()
        else:
            errback()

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be fulfilled. By default, it can wait indefinitely.
        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            RejectedValueError: if the promise is rejected with a value who is
                not an exception.
            *: If the promise is rejected, the rejection cause is raised.
        """
        self._wait(timeout)
        with self._condition:
            if self._state == self.PENDING:
                raise TimeoutError()
            elif self._state == self.REJECTED:
                if isinstance(self._reason, BaseException):
                    raise self._reason
                raise RejectedValueError(self._reason)
            else:
                return self._value

    def exception(self, timeout=None):
        """Wait for the promise rejection and returns it's error.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be rejected. By default, it can wait indefinitely.
        Returns:
            *: the reason of the rejection of the Promise.
            None: if the promise is fulfilled.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
        """
        self._wait(timeout)
        with self._condition:
            if self._state == self.PENDING:
                raise TimeoutError()
            else:
                return self._reason

    def _wait(self, timeout):
        """Wait until the promise is settled, or until the timeout.

        If the scheduler runs its jobs in the calling thread, they're
        executed during the wait.
        """
        if timeout is not None:
            deadline = time.monotonic() + timeout
        scheduler = get_scheduler()
        self._add_callbacks(scheduler.wake, scheduler.wake)
        scheduler.run_until(lambda: self._state != self.PENDING, timeout)

        with self._condition:
            if self._state == self.PENDING:
                if timeout is None:
                    self._condition.wait()
                else:
                    self._condition.wait(max(0, deadline - time.monotonic()))

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not callable, the state of the "self promise" is
        transferred at the new promise (the state and the value/error).

        The callbacks are executed by the scheduler, once per settlement, in
        the order they have been registered. They're never executed before
        this method returns, even if the promise is already settled.

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                reason of the rejection of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """
        if not callable(on_fulfilled):
            on_fulfilled = None
        if not callable(on_rejected):
            on_rejected = None

        def deferred_chained_promise(resolve, reject):

            def callback():
                call_soon(_invoke_handler, on_fulfilled, self._value,
                          resolve, reject, resolve)

            def errback():
                call_soon(_invoke_handler, on_rejected, self._reason,
                          resolve, reject, reject)

            self._add_callbacks(callback, errback)

        if not on_rejected:
            name = '%s' % _handler_name(on_fulfilled)
        elif not on_fulfilled:
            name = '<None, %s>' % _handler_name(on_rejected)
        else:
            name = '<%s, %s>' % (_handler_name(on_fulfilled),
                                 _handler_name(on_rejected))
        return Promise(deferred_chained_promise, _name=name, _previous=self)

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Will be called with the rejection reason if
                `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def finally_(self, callback):
        """Create a new promise with a callback called in all cases.

        The callback takes no argument. If it returns a thenable, the new
        promise waits for it. Then, the new promise is settled like `self`:
        same value, or same rejection reason.
        If the callback raises, or if the thenable it returns is rejected,
        the new promise is rejected with this error instead.

        Args:
            callback (callable): called when `self` is settled.
        Returns:
            Promise<*>: new Promise chained to `self`.
        """
        def finally_fulfilled(value):
            return Promise.resolve(callback()).then(lambda _: value)

        def finally_rejected(reason):
            return Promise.resolve(callback()).then(
                lambda _: Promise.reject(reason))

        return self.then(finally_fulfilled, finally_rejected)

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _state_letter(self):
        with self._condition:
            if self._state == self.REJECTED:
                return 'R'
            elif self._state == self.FULFILLED:
                return 'F'
            return 'P'

    def _inner_print(self):
        parts = []
        promise = self
        while promise is not None:
            parts.append('%s %s' % (promise._name, promise._state_letter()))
            promise = promise._previous
        return ' -> '.join(reversed(parts))

    @classmethod
    def resolve(cls, value):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a promise (or a thenable),
                the new Promise will follow its state.
        Returns:
            Promise: new Promise, fulfilled with the value passed in
                parameter.
        """
        return cls(lambda ok, error: ok(value), _name='RESOLVE')

    @classmethod
    def reject(cls, reason):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: reason set to the Promise, usually an Exception. It's
                never unwrapped, even if it's a Promise.
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(lambda ok, error: error(reason), _name='REJECT')

    @classmethod
    def deferred(cls):
        """Create a new Promise, with its resolve and reject functions.

        Returns:
            Deferred: object having the attributes `promise`, `resolve` and
                `reject`.
        """
        from .deferred import Deferred
        return Deferred(_promise_class=cls)

    defer = deferred

    @classmethod
    def all(cls, promises):
        """Create a Promise who wait a list of promises to be all fulfilled.

        The resulting Promise resolve when all of the promises in the list are
        resolved, and returns a list of all the resulting values, keeping the
        order of the promise list.
        If a promise is rejected, then the resulting promise is rejected with
        the same reason, and all results from other promises are ignored.

        Items who are not thenables are considered as already fulfilled
        values. If `promises` is not a list (or a tuple), it's considered as
        an empty list.

        Args:
            promises (list of Promise)
        Returns:
            Promise<list>: resulting promise, fulfilled when all promises will
                are fulfilled, or when one of the promises has been rejected.
        """
        if not isinstance(promises, (list, tuple)):
            promises = []
        promises = list(promises)

        lock = Lock()
        results = [None] * len(promises)
        is_counted = [False] * len(promises)
        _remaining_tasks = [len(promises)]

        def executor(resolve, reject):
            if _remaining_tasks[0] == 0:
                return resolve(results)

            def resolve_one_promise(index, value):
                with lock:
                    if is_counted[index]:
                        return
                    is_counted[index] = True
                    results[index] = value
                    _remaining_tasks[0] -= 1
                    is_done = _remaining_tasks[0] == 0
                if is_done:
                    resolve(results)

            for index, p in enumerate(promises):
                if is_thenable(p):
                    p.then(partial(resolve_one_promise, index), reject)
                else:
                    resolve_one_promise(index, p)

        return cls(executor, _name='ALL')

    @classmethod
    def race(cls, promises):
        """Run all promises, then resolve or reject with the fastest Promise.

        The resulting Promise will be settled as soon as the one the running
        Promises is done. Result value or rejection reason of the finished
        promise are transmitted. All other Promise result's will be ignored.

        Items who are not thenables are treated like already fulfilled
        Promises. If `promises` is not a list (or a tuple), it's considered as
        an empty list, and the resulting promise will stay pending forever.

        Args:
            promises (list): list of promises to run at the same time.
        Returns:
            Promise: a promise
        """
        if not isinstance(promises, (list, tuple)):
            promises = []
        promises = list(promises)

        def executor(resolve, reject):
            for p in promises:
                cls.resolve(p).then(resolve, reject)

        return cls(executor, _name='RACE')
