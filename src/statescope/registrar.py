"""Observation registrar: per-store dependency bookkeeping.

Reads made inside a tracked context (an autorun or reaction) are recorded
per field. Mutations are bracketed with will_set/did_set; when the
outermost bracket for a field closes, every observer that read that field
is scheduled.

The registrar does no locking. A store tree is expected to be mutated from
one thread (see store.set_scheduler for marshalling).
"""

from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from statescope._tracking import current_derivation, schedule
from statescope.identity import StateID

logger = logging.getLogger("statescope.registrar")

T = TypeVar("T")

# Field name used for whole-state reads.
STATE_FIELD = "state"

Getter = Callable[[Any], Any]


class RegistrarPhase(enum.Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    MUTATING = "mutating"


class ObservationRegistrar:
    """Maps field names to the observers that read them."""

    __slots__ = ("id", "_observers", "_open")

    def __init__(self) -> None:
        self.id = StateID()
        # field -> {observer: the getter that observer read the field through}
        self._observers: dict[str, dict] = {}
        self._open: dict[str, int] = {}

    @property
    def phase(self) -> RegistrarPhase:
        if self._open:
            return RegistrarPhase.MUTATING
        if any(self._observers.values()):
            return RegistrarPhase.TRACKING
        return RegistrarPhase.IDLE

    def access(self, field: str, getter: Getter | None = None) -> None:
        """Record a read of field. Outside a tracked context this does nothing.

        Each observer keeps the getter it last read field through, so
        observers reading one name through different getters each get
        their own change detection.
        """
        derivation = current_derivation.get()
        if derivation is None:
            return
        observers = self._observers.setdefault(field, {})
        if getter is not None or derivation not in observers:
            observers[derivation] = getter
        derivation._dependencies.add(self)

    def will_set(self, field: str) -> None:
        self._open[field] = self._open.get(field, 0) + 1

    def did_set(self, field: str) -> None:
        depth = self._open.get(field, 0) - 1
        if depth > 0:
            self._open[field] = depth
            return
        self._open.pop(field, None)
        self._notify(field)

    @contextmanager
    def mutation(self, field: str) -> Iterator[None]:
        """Bracket a mutation of field. Nested brackets coalesce."""
        self.will_set(field)
        try:
            yield
        finally:
            self.did_set(field)

    def with_mutation(self, field: str, body: Callable[[], T]) -> T:
        with self.mutation(field):
            return body()

    def observed_fields(self) -> list[tuple[str, Getter | None]]:
        """Distinct (field, getter) pairs for every field that has live observers.

        A field read through several getters appears once per getter.
        """
        pairs: dict[tuple[str, int], tuple[str, Getter | None]] = {}
        for name, observers in self._observers.items():
            for getter in observers.values():
                pairs.setdefault((name, id(getter)), (name, getter))
        return list(pairs.values())

    def _notify(self, field: str) -> None:
        observers = self._observers.get(field)
        if not observers:
            return
        logger.debug("Notifying %d observer(s) of %r", len(observers), field)
        for observer in list(observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        """Drop observer from every field. Called during dependency cleanup."""
        for name in list(self._observers):
            observers = self._observers[name]
            observers.pop(observer, None)
            if not observers:
                del self._observers[name]

    # Identity never survives a copy or a pickle round-trip.
    def __reduce__(self):
        return (ObservationRegistrar, ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObservationRegistrar):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"ObservationRegistrar({self.id!r}, {self.phase.value})"
