"""statescope: observable state containers with scoped views and navigation identity."""

from importlib.metadata import version as _version

__version__ = _version("statescope")

from statescope._tracking import get_pending_count
from statescope.identity import StateID, INERT, HasIdentity, ObservableState, state_id_of
from statescope.equality import is_identity_equal
from statescope.registrar import ObservationRegistrar, RegistrarPhase, STATE_FIELD
from statescope.reaction import Reaction, autorun, reaction
from statescope.batch import batched, transaction
from statescope.binding import Binding, BindingAction, PresentationAction, Presented, Dismiss
from statescope.store import BaseStore, Store, ScopedStore, WriteOrigin, set_scheduler
from statescope.navigation import (
    NavigationID,
    ComponentID,
    Root,
    Destination,
    Identifiable,
    HasVariantTag,
    enum_tag,
)
# textual NOT auto-imported: opt-in only

__all__ = [
    "StateID",
    "INERT",
    "HasIdentity",
    "ObservableState",
    "state_id_of",
    "is_identity_equal",
    "ObservationRegistrar",
    "RegistrarPhase",
    "STATE_FIELD",
    "Reaction",
    "autorun",
    "reaction",
    "batched",
    "transaction",
    "get_pending_count",
    "Binding",
    "BindingAction",
    "PresentationAction",
    "Presented",
    "Dismiss",
    "BaseStore",
    "Store",
    "ScopedStore",
    "WriteOrigin",
    "set_scheduler",
    "NavigationID",
    "ComponentID",
    "Root",
    "Destination",
    "Identifiable",
    "HasVariantTag",
    "enum_tag",
]
