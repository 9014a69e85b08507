# -*- coding: utf-8 -*-

from functools import wraps

from .deferred import Deferred
from .errors import RejectedValueError
from .util import is_thenable


def reduce_coroutine(func):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    Each thenable yielded is waited: its value is sent back to the generator,
    or its rejection reason is thrown into the generator (non-exception
    reasons are wrapped in a `RejectedValueError`).
    The first non-thenable value yielded is the result of the Promise. If the
    generator ends, the Promise is fulfilled with the returned value or, if
    None, with the value of the last thenable yielded.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        """
        Args:
            *args
            **kwargs
        Returns:
            Promise<*>
        """
        df = Deferred(_name='COROUTINE %s' % func.__name__)

        try:
            # Create generator; Initialization phase
            gen = func(*args, **kwargs)
        except Exception as error:
            df.reject(error)
            return df.promise

        def _call_next_or_set_result(value):
            if is_thenable(value):
                value.then(iter_next, iter_error)
            else:
                gen.close()
                df.resolve(value)

        def _end(stop, last_value):
            if stop.value is not None:
                df.resolve(stop.value)
            else:
                df.resolve(last_value)

        def iter_next(yielded_value):
            try:
                next_value = gen.send(yielded_value)
            except StopIteration as stop:
                return _end(stop, yielded_value)
            except Exception as error:
                return df.reject(error)
            _call_next_or_set_result(next_value)

        def iter_error(reason):
            if isinstance(reason, BaseException):
                error = reason
            else:
                error = RejectedValueError(reason)
            try:
                next_value = gen.throw(error)
            except StopIteration as stop:
                return _end(stop, None)
            except Exception as raised_error:
                if raised_error is error:
                    return df.reject(reason)
                return df.reject(raised_error)
            _call_next_or_set_result(next_value)

        # Start and resolve loop.
        try:
            first_value = next(gen)
        except StopIteration as stop:
            _end(stop, None)
            return df.promise
        except Exception as error:
            df.reject(error)
            return df.promise
        _call_next_or_set_result(first_value)

        return df.promise

    return wrapper
