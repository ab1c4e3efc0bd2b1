"""Identity equality: is the incoming state the same entity as the current one?

This is not value equality. Identity tokens decide when both sides have
them; ordered and keyed collections are decomposed and compared pairwise;
everything else is "not proven equal" and therefore treated as changed.

Collection handling dispatches on the ABC the left-hand value implements
(functools.singledispatch), so a custom type joins in by registering with
collections.abc.Sequence or Mapping.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import singledispatch

from statescope.identity import HasIdentity


def is_identity_equal(lhs: object, rhs: object) -> bool:
    """True when lhs and rhs are provably the same logical entity."""
    if isinstance(lhs, HasIdentity) and isinstance(rhs, HasIdentity):
        return lhs.state_id == rhs.state_id
    return _collection_identity_equal(lhs, rhs)


@singledispatch
def _collection_identity_equal(lhs: object, rhs: object) -> bool:
    return False


@_collection_identity_equal.register(str)
@_collection_identity_equal.register(bytes)
@_collection_identity_equal.register(bytearray)
def _atomic(lhs: object, rhs: object) -> bool:
    # Sequences of themselves; decomposing would never terminate.
    return False


@_collection_identity_equal.register(Sequence)
def _sequence(lhs: Sequence, rhs: object) -> bool:
    if not isinstance(rhs, type(lhs)) or len(lhs) != len(rhs):
        return False
    return all(is_identity_equal(left, right) for left, right in zip(lhs, rhs))


@_collection_identity_equal.register(Mapping)
def _mapping(lhs: Mapping, rhs: object) -> bool:
    if not isinstance(rhs, type(lhs)) or len(lhs) != len(rhs):
        return False
    return all(
        lk == rk and is_identity_equal(lv, rv)
        for (lk, lv), (rk, rv) in zip(lhs.items(), rhs.items())
    )
