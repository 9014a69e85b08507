# -*- coding: utf-8 -*-

import pytest

from thenable.promise import QueueScheduler, set_scheduler


@pytest.fixture
def queue_scheduler(request):
    """Replace the promise scheduler by a QueueScheduler during the test.

    The jobs (the callbacks chained to the promises) are executed only when
    ``run()`` is called on the returned scheduler.

    Returns:
        QueueScheduler: the scheduler used by the promises.
    """
    scheduler = QueueScheduler()
    previous = set_scheduler(scheduler)

    def _restore_scheduler():
        set_scheduler(previous)
    request.addfinalizer(_restore_scheduler)
    return scheduler
