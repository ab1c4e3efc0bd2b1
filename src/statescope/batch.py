"""Batched writes across stores.

Every Store.write already runs as its own transaction: field brackets and
child propagation finish before any observer runs. Wrapping several writes
in `with transaction()` (or a @batched function) widens that window, so an
observer that reads two stores runs once and sees both new states:

    cart = Store(Cart(), dispatch)
    totals = Store(Totals(), dispatch)
    autorun(lambda: render(cart.read(), totals.read()))

    with transaction():
        cart.write(new_cart)
        totals.write(new_totals)
    # render ran once, with both states

Transactions nest; only the outermost exit flushes pending observers.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from statescope._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction() -> Iterator[None]:
    """Defer observer runs until the block exits.

    Observers scheduled by writes inside the block run once each, in the
    order they were first scheduled, after the outermost transaction
    closes. They still run if the block raises.
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def batched(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator form of transaction().

        @batched
        def checkout(order):
            cart.write(Cart())
            orders.write(orders.read() + (order,))
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper
