"""Textual integration for statescope. Opt-in, requires textual.

Observers that touch widgets must not fire while the widget tree is being
rebuilt, must tolerate widgets that are already gone, and must run on the
app thread. The guards live here so call sites stay plain.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from statescope.reaction import autorun as _autorun, reaction as _reaction

logger = logging.getLogger("statescope.textual")

# Apps currently paused, keyed by id(app) so several apps can coexist.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded observers during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    """Wrap fn so it skips unsafe moments, ignores NoMatches and runs on the app thread."""
    main = threading.get_ident()

    def _safe(*args):
        try:
            fn(*args)
        except NoMatches:
            logger.debug("Widget gone while applying %r", fn)

    def _guarded(*args):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, *args)
        else:
            _safe(*args)

    return _guarded


def reaction(app, data_fn, effect_fn, *, fire_immediately=False):
    """reaction() whose effect is guarded for the app."""
    return _reaction(data_fn, _guard(app, effect_fn), fire_immediately=fire_immediately)


def autorun(app, fn):
    """autorun() guarded for the app.

    A run skipped while unsafe reads nothing, so it records no
    dependencies and the autorun stays idle until it is re-created.
    """
    return _autorun(_guard(app, fn))


def watch_store(app, store, effect):
    """Call effect(state) now and whenever a write notifies a different state.

    Returns the reaction; dispose() it when the screen goes away.
    """
    return _reaction(store.read, _guard(app, effect), fire_immediately=True)
