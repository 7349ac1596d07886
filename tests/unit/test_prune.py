"""Unit tests for PruneEngine (through EntityPruner)."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

import pytest

from entity_pruner.adapters.memory import InMemoryAdapter, LazyCollection
from entity_pruner.core.catalog import Relationship
from entity_pruner.core.enums import PruningState
from entity_pruner.core.exceptions import FieldAccessError
from entity_pruner.core.options import PruningOptions
from entity_pruner.pruning.entity import PrunableEntity, collection, reference
from entity_pruner.pruning.pruner import EntityPruner


@dataclass(eq=False)
class Owner(PrunableEntity):
    id: int | None = None
    name: str | None = None


@dataclass(eq=False)
class Parent(PrunableEntity):
    id: int | None = None
    version: int | None = 0
    code: str | None = None
    description: str | None = None
    owner: Owner | None = reference()
    children: list[Child] | None = collection(mapped_by="parent")
    uni_children: list[UniChild] | None = collection()
    trans_children: list[Child] | None = collection(transient=True)


@dataclass(eq=False)
class Child(PrunableEntity):
    id: int | None = None
    version: int | None = 0
    code: str | None = None
    parent: Parent | None = reference()
    toys: list[Toy] | None = collection(mapped_by="child")


@dataclass(eq=False)
class Toy(PrunableEntity):
    id: int | None = None
    name: str | None = None
    child: Child | None = reference()


@dataclass(eq=False)
class UniChild(PrunableEntity):
    id: int | None = None
    code: str | None = None


@dataclass(eq=False)
class Member(PrunableEntity):
    id: int | None = None
    group: Group | None = reference()


@dataclass(eq=False)
class Group(PrunableEntity):
    id: int | None = None
    members: set[Member] | None = collection(mapped_by="group")


@dataclass(eq=False)
class Friend(PrunableEntity):
    id: int | None = None
    friend: Friend | None = reference()


@dataclass(eq=False)
class MissingBackReference(PrunableEntity):
    id: int | None = None
    kids: list[Child] | None = collection(mapped_by="guardian")


@dataclass(eq=False)
class WrongBackReference(PrunableEntity):
    id: int | None = None
    kids: list[Toy] | None = collection(mapped_by="child")


@dataclass(eq=False)
class PlainBackReference(PrunableEntity):
    id: int | None = None
    kids: list[Child] | None = collection(mapped_by="code")


class PlainEntity:
    __relationships__ = {"parent": Relationship.reference()}

    id: int | None
    parent: Parent | None

    def __init__(self) -> None:
        self.id = 1
        self.pruning_state = PruningState.UNPRUNED
        self.field_id_map: dict[str, object] = {}

    def is_persistent(self) -> bool:
        return self.id is not None


def make_family() -> Parent:
    parent = Parent(id=1, version=3, code="P1", description="parent", owner=Owner(7, "owner"))
    for n in (1, 2):
        child = Child(id=10 + n, code=f"C{n}", parent=parent)
        child.toys = [Toy(id=100 + n, name=f"toy{n}", child=child)]
        parent.children.append(child)
    parent.uni_children = [UniChild(id=20, code="U1")]
    return parent


class TestUnboundedPrune:
    def test_keeps_loaded_graph(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent)

        assert parent.pruning_state is PruningState.PRUNED_COMPLETE
        assert len(parent.children) == 2
        assert len(parent.uni_children) == 1
        assert parent.owner is not None
        assert parent.owner.pruning_state is PruningState.PRUNED_COMPLETE
        for child in parent.children:
            assert child.pruning_state is PruningState.PRUNED_COMPLETE
            assert len(child.toys) == 1

    def test_nulls_back_references(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent)

        assert all(child.parent is None for child in parent.children)
        assert all(child.toys[0].child is None for child in parent.children)

    def test_snapshot_is_acyclic(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent)

        # asdict recurses structurally and would never finish on a cycle
        data = dataclasses.asdict(parent)
        assert data["children"][0]["parent"] is None

    def test_empty_collection_stays_empty(self, pruner: EntityPruner) -> None:
        parent = Parent(id=1)
        pruner.prune(parent)
        assert parent.children == []

    def test_null_collection_stays_null(self, pruner: EntityPruner) -> None:
        parent = Parent(id=1, children=None)
        pruner.prune(parent)
        assert parent.children is None

    def test_second_prune_is_noop(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent)
        before = dataclasses.asdict(parent)

        pruner.prune(parent, {"depth": "1", "select": "code"})
        assert dataclasses.asdict(parent) == before

    def test_none_and_non_entities_are_ignored(self, pruner: EntityPruner) -> None:
        pruner.prune(None)
        pruner.prune("not an entity")

    def test_reference_cycle_terminates(self, pruner: EntityPruner) -> None:
        a = Friend(id=1)
        b = Friend(id=2, friend=a)
        a.friend = b
        pruner.prune(a)
        assert a.pruning_state is PruningState.PRUNED_COMPLETE
        assert b.pruning_state is PruningState.PRUNED_COMPLETE


class TestDepth:
    def test_depth_one_nulls_collections(self, pruner: EntityPruner) -> None:
        parent = make_family()
        child = parent.children[0]
        pruner.prune(child, 1)

        assert child.toys is None
        # references do not consume depth
        assert child.parent is parent
        assert parent.pruning_state is PruningState.PRUNED_COMPLETE
        assert parent.children is None
        assert parent.uni_children is None
        assert parent.owner.pruning_state is PruningState.PRUNED_COMPLETE

    def test_depth_two_expands_one_level(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, 2)

        assert len(parent.children) == 2
        assert parent.uni_children is not None
        assert all(child.toys is None for child in parent.children)
        assert all(child.parent is None for child in parent.children)

    def test_depth_zero_keeps_only_entity(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, 0)
        assert parent.children is None
        assert parent.code == "P1"

    def test_options_model_accepted(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, PruningOptions(depth=2))
        assert all(child.toys is None for child in parent.children)

    def test_unparseable_depth_is_unbounded(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"depth": "lots"})
        assert all(len(child.toys) == 1 for child in parent.children)


class TestInclude:
    def test_include_wins_over_depth(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"depth": "1", "include": "children"})

        assert len(parent.children) == 2
        assert parent.uni_children is None
        assert all(child.pruning_state is PruningState.PRUNED_COMPLETE for child in parent.children)
        assert all(child.toys is None for child in parent.children)

    def test_excludes_other_collections_at_any_depth(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"depth": "10", "include": "uni_children"})

        assert parent.children is None
        assert len(parent.uni_children) == 1
        assert parent.pruning_state is PruningState.PRUNED_COMPLETE

    def test_include_without_depth_is_unbounded_below(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"include": " children , bogus"})

        assert parent.uni_children is None
        assert all(len(child.toys) == 1 for child in parent.children)


class TestSelect:
    def test_select_keeps_only_named_attributes(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"depth": "10", "select": "bogus,code,description"})

        assert parent.id is None
        assert parent.version is None
        assert parent.code == "P1"
        assert parent.description == "parent"
        assert parent.pruning_state is PruningState.PRUNED_PARTIAL

    def test_select_leaves_relationships_to_depth(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"select": "code"})

        assert len(parent.children) == 2
        assert parent.owner is not None
        assert parent.owner.name == "owner"

    def test_select_does_not_cascade(self, pruner: EntityPruner) -> None:
        parent = make_family()
        pruner.prune(parent, {"select": "code"})

        for child in parent.children:
            assert child.id is not None
            assert child.pruning_state is PruningState.PRUNED_COMPLETE

    def test_sidecars_survive_select(self, pruner: EntityPruner, adapter: InMemoryAdapter) -> None:
        child = Child(id=11, parent=adapter.create_placeholder(Parent, 42))
        pruner.prune(child, {"select": "code"})

        assert child.pruning_state is PruningState.PRUNED_PARTIAL
        assert child.field_id_map == {"parent": 42}


class TestLazyReferences:
    def test_unmaterialized_reference_is_recorded(
        self, pruner: EntityPruner, adapter: InMemoryAdapter
    ) -> None:
        child = Child(id=11)
        child.parent = adapter.create_placeholder(Parent, 42)
        pruner.prune(child)

        assert child.parent is None
        assert child.field_id_map["parent"] == 42

    def test_unmaterialized_reference_is_not_loaded(
        self, pruner: EntityPruner, adapter: InMemoryAdapter, store
    ) -> None:
        child = Child(id=11, parent=adapter.create_placeholder(Parent, 42))
        pruner.prune(child)
        assert store == {}

    def test_materialized_reference_is_replaced(
        self, pruner: EntityPruner, adapter: InMemoryAdapter, store
    ) -> None:
        parent = Parent(id=42, code="P42")
        store[(Parent, 42)] = parent
        placeholder = adapter.create_placeholder(Parent, 42)
        adapter.materialized_value(placeholder)

        child = Child(id=11, parent=placeholder)
        pruner.prune(child)

        assert child.parent is parent
        assert parent.pruning_state is PruningState.PRUNED_COMPLETE
        assert "parent" not in child.field_id_map

    def test_stale_identifier_is_dropped(self, pruner: EntityPruner) -> None:
        child = Child(id=11)
        child.field_id_map = {"parent": 99}
        pruner.prune(child)
        assert "parent" not in child.field_id_map


class TestLazyCollections:
    def test_uninitialized_collection_is_nulled(
        self, pruner: EntityPruner, adapter: InMemoryAdapter
    ) -> None:
        parent = Parent(id=1)
        parent.children = adapter.create_uninitialized_collection(
            list, owner=parent, field_name="children"
        )
        pruner.prune(parent)
        assert parent.children is None

    def test_initialized_collection_becomes_plain_list(self, pruner: EntityPruner) -> None:
        parent = Parent(id=1)
        child = Child(id=11, parent=parent)
        parent.children = LazyCollection(list, items=[child])
        pruner.prune(parent)

        assert type(parent.children) is list
        assert parent.children == [child]
        assert child.parent is None

    def test_set_collection_snapshot(self, pruner: EntityPruner) -> None:
        group = Group(id=1)
        members = [Member(id=2, group=group), Member(id=3, group=group)]
        group.members = LazyCollection(set, items=members)
        pruner.prune(group)

        assert type(group.members) is set
        assert group.members == set(members)
        assert all(member.group is None for member in members)


class TestTransientCollections:
    def test_transient_collection_untouched(self, pruner: EntityPruner) -> None:
        parent = make_family()
        extra = Child(id=99, parent=parent)
        transient_children = [extra]
        parent.trans_children = transient_children
        pruner.prune(parent, 1)

        assert parent.trans_children is transient_children
        assert extra.parent is parent
        assert extra.pruning_state is PruningState.UNPRUNED


class TestMisconfiguration:
    def test_missing_back_reference_logs_warning(
        self, pruner: EntityPruner, caplog: pytest.LogCaptureFixture
    ) -> None:
        holder = MissingBackReference(id=1, kids=[Child(id=2)])
        with caplog.at_level(logging.WARNING, logger="entity_pruner"):
            pruner.prune(holder)

        assert len(holder.kids) == 1
        assert holder.kids[0].pruning_state is PruningState.PRUNED_COMPLETE
        assert "guardian" in caplog.text

    def test_mistyped_back_reference_logs_warning(
        self, pruner: EntityPruner, caplog: pytest.LogCaptureFixture
    ) -> None:
        toy = Toy(id=5, child=Child(id=2))
        holder = WrongBackReference(id=1, kids=[toy])
        with caplog.at_level(logging.WARNING, logger="entity_pruner"):
            pruner.prune(holder)

        assert "one-directional" in caplog.text
        assert toy.child is not None

    def test_plain_field_back_reference_is_left_alone(
        self, pruner: EntityPruner, caplog: pytest.LogCaptureFixture
    ) -> None:
        kid = Child(id=2, code="K2")
        holder = PlainBackReference(id=1, kids=[kid])
        with caplog.at_level(logging.WARNING, logger="entity_pruner"):
            pruner.prune(holder)

        assert kid.code == "K2"
        assert "is not a reference" in caplog.text

        pruner.unprune(holder)
        assert kid.code == "K2"
        assert kid.pruning_state is PruningState.UNPRUNED

    def test_misconfiguration_warned_once(
        self, pruner: EntityPruner, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="entity_pruner"):
            pruner.prune(PlainBackReference(id=1, kids=[Child(id=2, code="A")]))
            pruner.prune(PlainBackReference(id=3, kids=[Child(id=4, code="B")]))

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_unreadable_field_raises(self, pruner: EntityPruner) -> None:
        with pytest.raises(FieldAccessError) as exc_info:
            pruner.prune(PlainEntity())
        assert exc_info.value.field_name == "parent"
        assert exc_info.value.entity_type is PlainEntity
