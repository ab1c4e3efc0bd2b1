"""Reactions: observers that re-run when the store fields they read change.

A Reaction evaluates its function inside a tracked context. Every
store.read() / store.read_field() made during that evaluation subscribes
the reaction to the corresponding registrar field. A notification for any
of those fields re-runs it, re-tracking dependencies from scratch.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when anything it read is notified.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new
  value only when data_fn's result changes.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from statescope._tracking import current_derivation

T = TypeVar("T")


class Reaction:
    """A reactive side effect that re-runs when its dependencies are notified."""

    __slots__ = ("_fn", "_dependencies", "_disposed")

    def __init__(self, fn: Callable[[], None]) -> None:
        self._fn = fn
        self._dependencies: set = set()
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _untrack(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def _evaluate(self, fn: Callable[[], T]) -> T:
        """Run fn with this reaction as the tracked observer."""
        self._untrack()
        token = current_derivation.set(self)
        try:
            return fn()
        finally:
            current_derivation.reset(token)

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if self._disposed:
            return
        self._evaluate(self._fn)

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all registrars."""
        self._disposed = True
        self._untrack()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        name = getattr(self._fn, "__name__", type(self._fn).__name__)
        return f"Reaction({name}, {state})"


class _DataReaction(Reaction):
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn's dependencies. When they are notified, re-runs data_fn.
    If the result differs from last time, calls effect_fn with the new value.
    """

    __slots__ = ("_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable, effect_fn: Callable) -> None:
        super().__init__(data_fn)
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    def _run(self) -> None:
        if self._disposed:
            return
        new_value = self._evaluate(self._fn)
        if not self._initialized or new_value != self._last_value:
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def _prime(self) -> None:
        """Establish dependencies and remember the value without firing the effect."""
        self._last_value = self._evaluate(self._fn)
        self._initialized = True


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then re-run whenever a field it read is notified.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        store = Store(0, dispatcher)
        log = []

        r = autorun(lambda: log.append(store.read()))
        # log == [0]

        store.write(1)
        # log == [0, 1]

        r.dispose()
    """
    r = Reaction(fn)
    r._run()
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> Reaction:
    """Track data_fn's reads; call effect_fn when its result changes.

    Usage:
        effects = []
        r = reaction(
            lambda: store.read_field("title"),
            lambda title: effects.append(title),
        )
        # effects == [] until the title changes
    """
    r = _DataReaction(data_fn, effect_fn)
    if fire_immediately:
        r._run()
    else:
        r._prime()
    return r
