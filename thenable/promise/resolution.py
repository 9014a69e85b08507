# -*- coding: utf-8 -*-

"""Resolution procedure: settle a Promise from an arbitrary value.

The value can be a direct result, a Promise, or any "thenable" object (an
object having a callable ``then`` attribute) coming from another library. In
the last two cases, the Promise adopts the state of the thenable.
"""

from collections import deque
from threading import Lock

from .errors import CycleError
from .util import get_then, is_primitive


class _Once(object):
    """Single-use guard, shared by the two callbacks given to a thenable."""

    def __init__(self):
        self._lock = Lock()
        self._used = False

    def __call__(self):
        """Returns True on the first call only."""
        with self._lock:
            if self._used:
                return False
            self._used = True
            return True


class _Resolution(object):
    """Resolution of a target Promise, possibly through many thenables.

    A thenable can call its callback synchronously, with another thenable,
    and so on. Instead of recursing, the values are queued and processed by
    the loop already running.
    """

    def __init__(self, target, fulfill, reject):
        self._target = target
        self._fulfill = fulfill
        self._reject = reject
        self._lock = Lock()
        self._values = deque()
        self._running = False

    def resolve(self, value):
        with self._lock:
            self._values.append(value)
            if self._running:
                return
            self._running = True

        while True:
            with self._lock:
                if not self._values:
                    self._running = False
                    return
                value = self._values.popleft()
            self._step(value)

    def _step(self, x):
        if x is self._target:
            return self._reject(CycleError())
        if is_primitive(x):
            return self._fulfill(x)

        try:
            then = get_then(x)
        except Exception as error:
            return self._reject(error)

        if not callable(then):
            return self._fulfill(x)

        once = _Once()

        def on_value(value):
            if once():
                self.resolve(value)

        def on_reason(reason):
            if once():
                self._reject(reason)

        try:
            then(on_value, on_reason)
        except Exception as error:
            if once():
                self._reject(error)


def resolve_promise(target, x, fulfill, reject):
    """Settle `target` according to the value `x`.

    - If `x` is `target` itself, it's rejected with a `CycleError`.
    - If `x` has a callable `then` attribute, it's called, and `target` will
      take the state of `x` (recursively, if `x` resolves to another thenable).
      Only the first call to the callbacks given to `x.then()` has an effect.
      If reading or calling `x.then` raises, `target` is rejected.
    - Else, `target` is fulfilled with `x`.

    Args:
        target (Promise): the promise to settle.
        x: the result value.
        fulfill (callable): fulfills `target` with a direct value.
        reject (callable): rejects `target` with a reason.
    """
    _Resolution(target, fulfill, reject).resolve(x)
