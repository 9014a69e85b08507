# -*- coding: utf-8 -*-

from .decorators import wrap_promise
from .deferred import Deferred
from .errors import CycleError, PromiseError, RejectedValueError, TimeoutError
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (QueueScheduler, ThreadScheduler, get_scheduler,
                        set_scheduler)
from .util import is_thenable

__all__ = ['is_thenable', 'CycleError', 'Deferred', 'Promise', 'PromiseError',
           'QueueScheduler', 'RejectedValueError', 'ThreadScheduler',
           'TimeoutError', 'get_scheduler', 'reduce_coroutine',
           'set_scheduler', 'wrap_promise']
