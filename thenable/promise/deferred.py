# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """Promise settled from the outside.

    A Deferred is the "creator" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side. It exposes the
    resolve and reject functions normally given to the executor, so the
    promise can be settled by any caller, like a compliance test harness.

    Attributes:
        promise (Promise): the Promise associated to the Deferred.
        resolve (function): resolves the promise with a value (or a thenable).
        reject (function): rejects the promise with a reason.
    """

    def __init__(self, _name=None, _promise_class=Promise):
        self.promise = _promise_class(self._executor,
                                      _name=_name or 'DEFERRED')

    def _executor(self, resolve, reject):
        self.resolve = resolve
        self.reject = reject
