# -*- coding: utf-8 -*-

import pytest

from thenable.promise import Deferred, Promise, TimeoutError


class TestDeferred(object):

    def test_deferred_resolve_promise(self):
        df = Deferred()
        assert isinstance(df.promise, Promise)

        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.resolve('Value')
        assert df.promise.result(0.001) == 'Value'

    def test_deferred_reject_promise(self):
        class MyException(Exception):
            pass

        df = Deferred()
        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.reject(MyException())

        with pytest.raises(MyException):
            df.promise.result(0.001)

    def test_deferred_resolve_with_promise(self):
        source = Deferred()
        df = Deferred()
        df.resolve(source.promise)
        source.reject('reason')

        assert df.promise.exception(1) == 'reason'

    def test_promise_deferred_method(self):
        df = Promise.deferred()
        assert isinstance(df, Deferred)
        assert df.promise.state == Promise.PENDING

        df.resolve(1)
        df.reject('ignored')
        assert df.promise.result(0) == 1

    def test_promise_deferred_uses_subclass(self):
        class MyPromise(Promise):
            pass

        df = MyPromise.deferred()
        assert isinstance(df.promise, MyPromise)

    def test_promise_defer_method(self):
        """`defer()` is an alias of `deferred()`."""
        class MyPromise(Promise):
            pass

        df = MyPromise.defer()
        assert isinstance(df, Deferred)
        assert isinstance(df.promise, MyPromise)

        df.reject('reason')
        assert df.promise.exception(0) == 'reason'
