"""Navigation identity: stable keys for presented components.

A NavigationID is a chain of "presenter presents presented" links back to
the root. Each link records a ComponentID fingerprint of the presented
value: its type, its variant tag when it is a sum type, and its own stable
id when it has one. IDs are plain frozen values, so two chains compare
equal exactly when every link matches, and rebuilding the same chain from
fresh state values yields an equal key.

Values without a stable id are told apart only by type and tag, so two
simultaneously presented instances of the same variant share a key.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Protocol, runtime_checkable


@runtime_checkable
class Identifiable(Protocol):
    """Capability: the value declares its own stable, hashable id."""

    id: Hashable


@runtime_checkable
class HasVariantTag(Protocol):
    """Capability: the value is one variant of a sum type."""

    variant_tag: int


def enum_tag(value: object) -> int | None:
    """Index of the active variant, or None when value is not a sum type."""
    if isinstance(value, enum.Enum):
        # Composite Flag values are not members and have no single variant.
        members = list(type(value))
        return members.index(value) if value in members else None
    if isinstance(value, HasVariantTag):
        return value.variant_tag
    return None


@dataclass(frozen=True)
class ComponentID:
    """Type + variant + stable-id fingerprint of one presented value."""

    type_identity: type
    tag: int | None = None
    stable_id: Hashable | None = None

    @classmethod
    def of(cls, value: Any) -> ComponentID:
        stable_id = value.id if isinstance(value, Identifiable) else None
        return cls(type(value), enum_tag(value), stable_id)

    def __repr__(self) -> str:
        return (
            f"ComponentID({self.type_identity.__qualname__}, "
            f"tag={self.tag!r}, id={self.stable_id!r})"
        )


@dataclass(frozen=True)
class Root:
    """The start of every navigation path."""


@dataclass(frozen=True)
class Destination:
    presenter: NavigationID
    presented: ComponentID


Path = Root | Destination


@dataclass(frozen=True)
class NavigationID:
    path: Path

    @classmethod
    def root(cls) -> NavigationID:
        return ROOT

    @property
    def id(self) -> NavigationID:
        return self

    def append(self, value: Any) -> NavigationID:
        """ID for value presented by the component this ID names."""
        return NavigationID(Destination(presenter=self, presented=ComponentID.of(value)))

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.components())

    def components(self) -> Iterator[ComponentID]:
        """Presented components from the root outwards."""
        links: list[ComponentID] = []
        node = self
        while isinstance(node.path, Destination):
            links.append(node.path.presented)
            node = node.path.presenter
        return reversed(links)


ROOT = NavigationID(Root())
