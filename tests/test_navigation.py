"""Tests for NavigationID and ComponentID."""

import enum
from dataclasses import dataclass

from statescope import ComponentID, Destination, NavigationID, Root, Store, enum_tag


class Tab(enum.Enum):
    HOME = "home"
    SETTINGS = "settings"


class Perm(enum.Flag):
    R = 1
    W = 2


@dataclass(frozen=True)
class Item:
    id: str
    title: str = ""


@dataclass(frozen=True)
class Variant:
    """One case of a sum type: variant tag plus a stable id."""

    id: str
    variant_tag: int = 0


@dataclass(frozen=True)
class Sheet:
    note: str = ""


class TestEnumTag:
    def test_enum_member_index(self):
        assert enum_tag(Tab.HOME) == 0
        assert enum_tag(Tab.SETTINGS) == 1

    def test_declared_variant_tag(self):
        assert enum_tag(Variant("x", variant_tag=3)) == 3

    def test_not_a_sum_type(self):
        assert enum_tag(Sheet()) is None
        assert enum_tag(7) is None

    def test_flag_members_and_combinations(self):
        assert enum_tag(Perm.W) == 1
        assert enum_tag(Perm.R | Perm.W) is None

    def test_path_through_combined_flag(self):
        a = NavigationID.root().append(Perm.R | Perm.W)
        b = NavigationID.root().append(Perm.R | Perm.W)
        assert a == b
        assert list(a.components())[-1].tag is None


class TestComponentID:
    def test_records_type_tag_and_id(self):
        cid = ComponentID.of(Variant("x", variant_tag=0))
        assert cid == ComponentID(Variant, 0, "x")

    def test_plain_value(self):
        assert ComponentID.of(Sheet("a")) == ComponentID(Sheet, None, None)

    def test_content_is_ignored_without_id(self):
        assert ComponentID.of(Sheet("a")) == ComponentID.of(Sheet("b"))

    def test_stable_id_distinguishes(self):
        assert ComponentID.of(Item("1")) != ComponentID.of(Item("2"))
        assert ComponentID.of(Item("1", "a")) == ComponentID.of(Item("1", "b"))

    def test_store_is_identifiable(self):
        store = Store(0, lambda action, origin: None)
        assert ComponentID.of(store).stable_id == store.id

    def test_repr(self):
        assert repr(ComponentID.of(Tab.HOME)) == "ComponentID(Tab, tag=0, id=None)"


class TestNavigationID:
    def test_root(self):
        root = NavigationID.root()
        assert root.path == Root()
        assert root is NavigationID.root()
        assert root.depth == 0
        assert list(root.components()) == []

    def test_id_is_self(self):
        nav = NavigationID.root().append(Sheet())
        assert nav.id is nav

    def test_append_is_deterministic(self):
        root = NavigationID.root()
        assert root.append(Item("1")) == root.append(Item("1"))
        assert hash(root.append(Item("1"))) == hash(root.append(Item("1")))

    def test_append_links_presenter(self):
        root = NavigationID.root()
        nav = root.append(Item("1"))
        assert nav.path == Destination(presenter=root, presented=ComponentID(Item, None, "1"))

    def test_different_stable_id(self):
        root = NavigationID.root()
        assert root.append(Item("1")) != root.append(Item("2"))

    def test_different_type(self):
        root = NavigationID.root()
        assert root.append(Sheet()) != root.append(Item("1"))

    def test_different_tag(self):
        root = NavigationID.root()
        assert root.append(Tab.HOME) != root.append(Tab.SETTINGS)

    def test_different_presenter(self):
        root = NavigationID.root()
        via_a = root.append(Item("a")).append(Sheet())
        via_b = root.append(Item("b")).append(Sheet())
        assert via_a != via_b

    def test_two_link_chain(self):
        first = Variant("x", variant_tag=0)
        second = Sheet()
        nav = NavigationID.root().append(first).append(second)

        assert nav.depth == 2
        assert list(nav.components()) == [
            ComponentID(Variant, 0, "x"),
            ComponentID(Sheet, None, None),
        ]
        assert nav == NavigationID.root().append(Variant("x", variant_tag=0)).append(Sheet())

    def test_usable_as_dict_key(self):
        root = NavigationID.root()
        stores = {root.append(Item("1")): "first"}
        assert stores[root.append(Item("1"))] == "first"
