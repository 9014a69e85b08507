# -*- coding: utf-8 -*-


class PromiseError(Exception):
    """Base class of the errors raised by the promise module."""
    pass


class CycleError(PromiseError, TypeError):
    """A Promise has been resolved with itself."""

    def __init__(self, message='Chaining cycle detected for promise'):
        super(CycleError, self).__init__(message)


class TimeoutError(PromiseError):
    """An operation could not be executed within the time allowed."""
    pass


class RejectedValueError(PromiseError):
    """A Promise has been rejected with a value who is not an exception.

    Attributes:
        reason: the original rejection reason.
    """

    def __init__(self, reason):
        super(RejectedValueError, self).__init__(
            'Promise rejected with non-exception value: %r' % (reason,))
        self.reason = reason
