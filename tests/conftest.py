"""Shared fixtures."""

import pytest

from statescope import set_scheduler


@pytest.fixture(autouse=True)
def reset_scheduler():
    """Tests that configure marshalling must not leak it into other tests."""
    yield
    set_scheduler(None)


class RecordingDispatcher:
    """Dispatcher that records every send and optionally reduces into the store."""

    def __init__(self, reducer=None):
        self.sent = []
        self.store = None
        self._reducer = reducer

    def __call__(self, action, origin):
        self.sent.append((action, origin))
        if self._reducer is not None and self.store is not None:
            self.store.write(self._reducer(self.store.read(), action), origin)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def make_dispatcher():
    return RecordingDispatcher
