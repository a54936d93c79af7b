import threading
from threading import RLock

from trivia.game.scheduler import PacingScheduler


class FakeSocketIO:
    def __init__(self):
        self.tasks = []
        self.slept = []

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds):
        self.slept.append(seconds)


def test_inline_runs_immediately():
    calls = []
    schedule = PacingScheduler(FakeSocketIO(), RLock(), inline=True)
    schedule(5, calls.append, 'go')
    assert calls == ['go']


def test_background_task_sleeps_then_runs_under_lock():
    sio = FakeSocketIO()
    lock = RLock()
    seen = []

    def callback(value):
        other = []
        probe = threading.Thread(target=lambda: other.append(lock.acquire(blocking=False)))
        probe.start()
        probe.join()
        seen.append((value, other[0]))

    PacingScheduler(sio, lock)(5, callback, 'next')
    assert seen == []
    target, args, kwargs = sio.tasks[0]
    target(*args, **kwargs)
    assert sio.slept == [5]
    assert seen == [('next', False)]


def test_background_failure_is_logged_not_raised(caplog):
    sio = FakeSocketIO()

    def boom():
        raise RuntimeError('nope')

    PacingScheduler(sio, RLock())(0, boom)
    target, args, kwargs = sio.tasks[0]
    target(*args, **kwargs)
    assert sio.slept == []
    assert 'pacing callback boom failed' in caplog.text
