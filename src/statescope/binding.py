"""Bindings: two-way accessors that write by dispatching actions.

A Binding never mutates state itself. Its getter reads the store; its
setter turns the new value into an action and sends it, so every change
round-trips through the dispatcher.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

V = TypeVar("V")
A = TypeVar("A")


class Binding(Generic[V]):
    """A get/set pair."""

    __slots__ = ("_get", "_set")

    def __init__(self, get: Callable[[], V], set: Callable[[V], None]) -> None:
        self._get = get
        self._set = set

    def get(self) -> V:
        return self._get()

    def set(self, value: V) -> None:
        self._set(value)

    def __repr__(self) -> str:
        return f"Binding(get={self._get!r})"


@dataclass(frozen=True)
class BindingAction:
    """Action requesting that one field of the state be set to value."""

    field: str
    value: Any

    def apply(self, state):
        """New state with the field replaced. ObservableState keeps its identity."""
        return dataclasses.replace(state, **{self.field: self.value})

    def matches(self, field: str) -> bool:
        return self.field == field


@dataclass(frozen=True)
class Presented(Generic[A]):
    """An action sent by the presented child."""

    action: A


@dataclass(frozen=True)
class Dismiss:
    """Request to dismiss the presented child."""


PresentationAction = Presented | Dismiss
