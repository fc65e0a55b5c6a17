"""
Tests for the Name Index.

Covers case-insensitive lookup and each collision policy.
"""

import logging

import pytest

from campaign_graph.config import CollisionPolicy
from campaign_graph.graph.name_index import NameCollisionError, NameIndex, normalize_name
from tests.conftest import make_entity


class TestNameIndex:
    """Lookup behaviour."""

    def test_resolve_is_case_insensitive(self, temple_and_baron) -> None:
        index = NameIndex(temple_and_baron)

        assert index.resolve("Sunken Temple") == "loc-1"
        assert index.resolve("sunken temple") == "loc-1"
        assert index.resolve("  SUNKEN TEMPLE  ") == "loc-1"

    def test_unknown_name_resolves_to_none(self, temple_and_baron) -> None:
        index = NameIndex(temple_and_baron)

        assert index.resolve("The Lost King") is None
        assert index.get_entity("The Lost King") is None
        assert "The Lost King" not in index

    def test_get_entity(self, temple_and_baron) -> None:
        index = NameIndex(temple_and_baron)

        entity = index.get_entity("baron valdris")

        assert entity is not None
        assert entity.id == "chr-1"
        assert index.entity_by_id("loc-1").name == "Sunken Temple"

    def test_blank_names_are_not_indexed(self) -> None:
        index = NameIndex([make_entity("x-1", "item", "   "), make_entity("x-2", "item", "")])

        assert len(index) == 0
        assert index.resolve("") is None

    def test_empty_snapshot(self) -> None:
        index = NameIndex([])

        assert len(index) == 0
        assert index.collisions == {}

    def test_normalize_name(self) -> None:
        assert normalize_name("  Baron VALDRIS ") == "baron valdris"


class TestCollisionPolicy:
    """Two entities sharing a name case-insensitively."""

    @pytest.fixture
    def twins(self):
        return [
            make_entity("chr-1", "character", "Ash"),
            make_entity("itm-1", "item", "ash"),
        ]

    def test_first_wins(self, twins) -> None:
        index = NameIndex(twins, policy=CollisionPolicy.FIRST_WINS)

        assert index.resolve("ASH") == "chr-1"

    def test_last_wins(self, twins) -> None:
        index = NameIndex(twins, policy=CollisionPolicy.LAST_WINS)

        assert index.resolve("Ash") == "itm-1"

    def test_reject_raises(self, twins) -> None:
        with pytest.raises(NameCollisionError) as exc_info:
            NameIndex(twins, policy=CollisionPolicy.REJECT)

        assert exc_info.value.entity_ids == ["chr-1", "itm-1"]
        assert isinstance(exc_info.value, ValueError)

    def test_collisions_are_recorded(self, twins) -> None:
        index = NameIndex(twins, policy=CollisionPolicy.FIRST_WINS)

        assert index.collisions == {"ash": ["chr-1", "itm-1"]}
        assert len(index) == 1

    def test_collision_is_logged(self, twins, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="campaign_graph.graph.name_index"):
            NameIndex(twins, policy=CollisionPolicy.FIRST_WINS)

        assert any("shared by 2 entities" in r.getMessage() for r in caplog.records)

    def test_same_entity_twice_is_not_a_collision(self) -> None:
        entity = make_entity("chr-1", "character", "Ash")

        index = NameIndex([entity, entity], policy=CollisionPolicy.REJECT)

        assert index.collisions == {}
        assert index.resolve("ash") == "chr-1"
