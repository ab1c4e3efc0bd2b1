"""Dependency tracking engine.

Uses contextvars to know which observer is evaluating when a store is read,
so the read turns into a subscription on the store's registrar.

Batching: mutations inside `with transaction()` or a store write accumulate
scheduled observers and flush them once at the end. Pending observers keep
the order in which their fields were mutated.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statescope.reaction import Reaction

# The currently-evaluating observer. When set, any tracked read registers
# a dependency on the field being read.
current_derivation: contextvars.ContextVar[Reaction | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, observer runs are deferred.
_batch_depth: int = 0

# Observers scheduled during a batch, in scheduling order. Dict as ordered set.
_pending: dict[Reaction, None] = {}


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending observers."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Reaction) -> None:
    """Schedule an observer for re-evaluation.

    If inside a batch, defers. Otherwise, runs immediately.
    """
    if _batch_depth > 0:
        _pending[derivation] = None
    else:
        derivation._run()


def _flush_pending() -> None:
    """Run all pending observers. Handles observers scheduled during flush."""
    while _pending:
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of observers waiting to run. Useful for testing."""
    return len(_pending)
