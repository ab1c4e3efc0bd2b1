"""Stores: the single source of truth and its scoped views.

A root Store owns one state value and a dispatcher. Observers read it
(registering dependencies on its registrar), UI code sends actions through
it, and the external engine that interprets those actions calls write()
with the resulting state.

scope() derives a ScopedStore: a live projection with no storage of its
own. Its read() recomputes the projection from the parent's current state
and its send() embeds the child action and forwards it to the parent. The
parent tracks its children weakly so it can notify their observers when a
write changes what they project. A child read inside an autorun or
reaction is also held strongly by its parent, so a store scoped inline in
an observer keeps receiving writes; the parent lets go on the first write
after the child's last observer is gone.

Thread safety: call set_scheduler() once from the UI thread. After that,
write() from any other thread is marshalled through the scheduler. Writes
on the scheduler thread stay synchronous.
"""

from __future__ import annotations

import enum
import logging
import threading
import weakref
from operator import attrgetter
from typing import Any, Callable, Generic, TypeVar

from statescope._tracking import current_derivation
from statescope.batch import transaction
from statescope.binding import Binding, BindingAction, Dismiss, Presented
from statescope.equality import is_identity_equal
from statescope.identity import StateID
from statescope.registrar import STATE_FIELD, Getter, ObservationRegistrar

logger = logging.getLogger("statescope.store")

S = TypeVar("S")
A = TypeVar("A")
CS = TypeVar("CS")
CA = TypeVar("CA")
V = TypeVar("V")


class WriteOrigin(enum.Enum):
    """Where a state change came from."""

    DIRECT = "direct"
    BINDING = "binding"


# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the scheduler used to marshal writes from background threads.

    Call once from the UI thread:
        statescope.set_scheduler(app.call_from_thread)

    Pass None to turn marshalling off again.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


def _field_changed(getter: Getter | None, old: Any, new: Any) -> bool:
    if getter is None:
        return True
    try:
        before = getter(old)
        after = getter(new)
    except (AttributeError, LookupError, TypeError):
        # The field no longer reads cleanly; its observers must re-read.
        return True
    return before is not after and before != after


class BaseStore(Generic[S, A]):
    """Operations shared by root and scoped stores.

    Stores compare and hash by object identity, never by state.
    """

    def __init__(self) -> None:
        self._registrar = ObservationRegistrar()
        self._children: weakref.WeakSet[ScopedStore] = weakref.WeakSet()
        # Children with live observers, held strongly until the next write
        # finds them unobserved.
        self._retained: set[ScopedStore] = set()

    @property
    def id(self) -> StateID:
        return self._registrar.id

    @property
    def registrar(self) -> ObservationRegistrar:
        return self._registrar

    def _peek(self) -> S:
        """Current state without recording an access."""
        raise NotImplementedError

    def send(self, action: A, *, origin: WriteOrigin = WriteOrigin.DIRECT) -> None:
        raise NotImplementedError

    # --- Reads (track) ---

    def read(self) -> S:
        """Current state. Inside an autorun/reaction, subscribes to any change."""
        self._registrar.access(STATE_FIELD)
        self._retain_if_observed()
        return self._peek()

    def read_field(self, name: str, getter: Callable[[S], V] | None = None) -> V:
        """One field of the current state, subscribing to that field only.

        getter defaults to attribute access by name. Observers are notified
        when a write changes the value getter returns. Each observer is
        checked against its own getter, so two observers may read the same
        name through different getters.
        """
        if getter is None:
            getter = attrgetter(name)
        self._registrar.access(name, getter)
        self._retain_if_observed()
        return getter(self._peek())

    def _retain_if_observed(self) -> None:
        """Keep this store reachable from the root while an observer reads it."""

    def _is_observed(self) -> bool:
        if self._registrar.observed_fields():
            return True
        return any(child._is_observed() for child in self._retained)

    # --- Scoping ---

    def scope(
        self,
        state: Callable[[S], CS],
        action: Callable[[CA], A],
    ) -> ScopedStore[CS, CA]:
        """Derive a child store viewing state(parent) and sending action(child)."""
        child: ScopedStore[CS, CA] = ScopedStore(self, state, action)
        self._children.add(child)
        logger.debug("Scoped %r from %r", child, self)
        return child

    def scope_optional(
        self,
        state: Callable[[S], CS | None],
        action: Callable[[CA], A],
    ) -> ScopedStore[CS, CA] | None:
        """Scope onto an optional child state, or None when nothing is presented.

        A store returned here keeps answering with the last present child
        state after the projection goes to None, until it is dropped.
        """
        child_state = state(self.read())
        if child_state is None:
            return None
        last = child_state

        def to_child(parent_state: S) -> CS:
            nonlocal last
            value = state(parent_state)
            if value is not None:
                last = value
            return last

        return self.scope(to_child, action)

    # --- Bindings ---

    def binding(
        self,
        get: Callable[[S], V],
        send: Callable[[V], A | None],
    ) -> Binding[V]:
        """Two-way accessor: reads through get, writes by sending send(value)."""

        def _set(value: V) -> None:
            action = send(value)
            if action is None:
                logger.debug("Dropped binding set of %r on %r", value, self)
                return
            self.send(action, origin=WriteOrigin.BINDING)

        return Binding(lambda: get(self.read()), _set)

    def bindable(self, name: str, embed: Callable[[BindingAction], A]) -> Binding[Any]:
        """Binding over one field that sends embed(BindingAction(name, value))."""
        return Binding(
            lambda: self.read_field(name),
            lambda value: self.send(
                embed(BindingAction(name, value)), origin=WriteOrigin.BINDING
            ),
        )

    def presentation(
        self,
        state: Callable[[S], CS | None],
        action: Callable[[Any], A],
    ) -> Binding[ScopedStore[CS, CA] | None]:
        """Binding to the presented child store.

        Setting None dismisses the child by sending action(Dismiss()).
        Child actions reach the parent as action(Presented(child_action)).
        """

        def _set(value: ScopedStore[CS, CA] | None) -> None:
            if value is None:
                self.send(action(Dismiss()), origin=WriteOrigin.BINDING)

        return Binding(
            lambda: self.scope_optional(state, lambda a: action(Presented(a))),
            _set,
        )

    # --- Change propagation ---

    def _publish(self, old: S, new: S, assign: Callable[[], None] | None = None) -> None:
        """Notify observers of a non-identity-preserving change from old to new.

        assign performs the store of new (root stores only) inside the
        mutation brackets. Observed fields whose value did not change stay
        silent; the whole-state field is always notified.
        """
        registrar = self._registrar
        # A name read through several getters is notified once.
        changed = list(
            dict.fromkeys(
                name
                for name, getter in registrar.observed_fields()
                if name != STATE_FIELD and _field_changed(getter, old, new)
            )
        )
        logger.debug("Mutating %r, changed fields: %s", self, changed)

        with transaction():
            registrar.will_set(STATE_FIELD)
            for name in changed:
                registrar.will_set(name)
            try:
                if assign is not None:
                    assign()
            finally:
                for name in changed:
                    registrar.did_set(name)
                registrar.did_set(STATE_FIELD)
            self._release_unobserved()
            for child in list(self._children):
                child._propagate(old, new)

    def _release_unobserved(self) -> None:
        released = {child for child in self._retained if not child._is_observed()}
        if released:
            logger.debug("Releasing %d unobserved child(ren) of %r", len(released), self)
            self._retained -= released


class Store(BaseStore[S, A]):
    """Root store: owns the state and the dispatcher.

    send is called as send(action, origin) and must eventually call
    write() with the new state; the store itself never interprets actions.
    """

    def __init__(self, initial_state: S, send: Callable[[A, WriteOrigin], None]) -> None:
        super().__init__()
        self._state = initial_state
        self._dispatch = send
        self.last_write_origin: WriteOrigin | None = None

    def _peek(self) -> S:
        return self._state

    def send(self, action: A, *, origin: WriteOrigin = WriteOrigin.DIRECT) -> None:
        self._dispatch(action, origin)

    def write(self, new_state: S, origin: WriteOrigin = WriteOrigin.DIRECT) -> None:
        """Replace the state. Auto-marshals from background threads."""
        if _scheduler is not None and threading.current_thread() != _scheduler_thread:
            _scheduler(lambda s=new_state, o=origin: self._write_direct(s, o))
        else:
            self._write_direct(new_state, origin)

    def _write_direct(self, new_state: S, origin: WriteOrigin) -> None:
        old = self._state
        self.last_write_origin = origin
        if is_identity_equal(old, new_state):
            self._state = new_state
            logger.debug("Identity-preserving %s write on %r", origin.value, self)
            return

        def assign() -> None:
            self._state = new_state

        self._publish(old, new_state, assign)

    def __repr__(self) -> str:
        return f"Store({self._state!r})"


class ScopedStore(BaseStore[S, A]):
    """A live projection of a parent store. Holds no state of its own."""

    def __init__(
        self,
        parent: BaseStore,
        to_child_state: Callable[[Any], S],
        from_child_action: Callable[[A], Any],
    ) -> None:
        super().__init__()
        self._parent = parent
        self._to_child_state = to_child_state
        self._from_child_action = from_child_action

    @property
    def parent(self) -> BaseStore:
        return self._parent

    def _peek(self) -> S:
        return self._to_child_state(self._parent._peek())

    def send(self, action: A, *, origin: WriteOrigin = WriteOrigin.DIRECT) -> None:
        self._parent.send(self._from_child_action(action), origin=origin)

    def _retain_if_observed(self) -> None:
        if current_derivation.get() is None:
            return
        node: BaseStore = self
        while isinstance(node, ScopedStore) and node not in node._parent._retained:
            node._parent._retained.add(node)
            node = node._parent

    def _propagate(self, old_parent: Any, new_parent: Any) -> None:
        old = self._to_child_state(old_parent)
        new = self._to_child_state(new_parent)
        if is_identity_equal(old, new):
            return
        self._publish(old, new)

    def __repr__(self) -> str:
        return f"ScopedStore(id={self.id!r})"
