"""Identity tokens that mark a state value as "the same logical entity".

A StateID is opaque and globally unique. Two values carrying equal tokens
are the same entity no matter how their other fields differ; that is what
lets a store skip notifications when a state is rebuilt rather than
replaced.

    @dataclass(frozen=True)
    class Counter(ObservableState):
        count: int = 0

    a = Counter()
    b = dataclasses.replace(a, count=1)
    assert a.state_id == b.state_id
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable
from uuid import UUID, uuid4


@dataclass(frozen=True)
class StateID:
    """Opaque identity token with an optional variant tag."""

    value: UUID = field(default_factory=uuid4)
    tag: int | None = None

    def tagged(self, tag: int | None) -> StateID:
        """Copy of this token with a different tag (one per sum-type variant)."""
        return dataclasses.replace(self, tag=tag)

    @staticmethod
    def inert() -> StateID:
        return INERT

    def __repr__(self) -> str:
        if self.tag is None:
            return f"StateID({self.value})"
        return f"StateID({self.value}, tag={self.tag})"


INERT = StateID()


@runtime_checkable
class HasIdentity(Protocol):
    """Capability: the value exposes its own identity token."""

    state_id: StateID


def state_id_of(value: object) -> StateID:
    """Identity of value, or INERT when it has none."""
    if isinstance(value, HasIdentity):
        return value.state_id
    return INERT


@dataclass(frozen=True)
class ObservableState:
    """Base for state dataclasses that carry an identity token.

    The token is keyword-only, hidden from repr and excluded from ==, so
    value equality of subclasses still compares content only.
    """

    state_id: StateID = field(
        default_factory=StateID, kw_only=True, repr=False, compare=False
    )
