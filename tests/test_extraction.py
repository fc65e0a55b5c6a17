"""
Tests for normalizing extraction output.
"""

import pytest

from campaign_graph.graph.extraction import (
    is_legacy_relation_field,
    normalize_extracted_entities,
)
from tests.conftest import by_id


@pytest.fixture
def payload() -> list:
    return [
        {
            "id": "chr-1",
            "type": "character",
            "name": "Baron Valdris",
            "shortDescription": "A scheming noble.",
            "associatedLocations": ["loc-1", "loc-404"],
            "associatedEntities": "The Lost King",
        },
        {
            "id": "loc-1",
            "type": "location",
            "name": "  Sunken Temple ",
            "associatedCharacters": ["chr-1", "loc-1"],
        },
        {"type": "monster"},
        "not a record",
        {"type": "spaceship", "name": "Star Galleon"},
    ]


class TestNormalizeExtractedEntities:
    """Validation and legacy link migration."""

    def test_drops_malformed_and_unregistered(self, payload, registry) -> None:
        entities = normalize_extracted_entities(payload, registry)

        assert [e.id for e in entities] == ["chr-1", "loc-1", "monster-3"]

    def test_defaults_for_missing_id_and_name(self, payload, registry) -> None:
        monster = by_id(normalize_extracted_entities(payload, registry))["monster-3"]

        assert monster.name == "Unknown monster"
        assert set(monster.attributes) == {
            "shortDescription",
            "longDescription",
            "abilities",
            "behavior",
            "associatedEntities",
        }
        assert all(value == "" for value in monster.attributes.values())

    def test_legacy_ids_become_names(self, payload, registry) -> None:
        entities = by_id(normalize_extracted_entities(payload, registry))

        assert entities["chr-1"].get("associatedEntities") == "The Lost King, Sunken Temple"
        assert entities["loc-1"].get("associatedEntities") == "Baron Valdris"

    def test_legacy_fields_are_removed(self, payload, registry) -> None:
        entities = by_id(normalize_extracted_entities(payload, registry))

        assert "associatedLocations" not in entities["chr-1"].attributes
        assert "associatedCharacters" not in entities["loc-1"].attributes

    def test_names_are_trimmed(self, payload, registry) -> None:
        entities = by_id(normalize_extracted_entities(payload, registry))

        assert entities["loc-1"].name == "Sunken Temple"

    def test_list_association_text(self, registry) -> None:
        raw = [
            {
                "id": "itm-1",
                "type": "item",
                "name": "Horn",
                "associatedEntities": ["Gricklejaw", "gricklejaw"],
                "associatedItems": [],
            },
        ]

        (horn,) = normalize_extracted_entities(raw, registry)

        assert horn.get("associatedEntities") == "Gricklejaw, gricklejaw"

    def test_empty_payload(self, registry) -> None:
        assert normalize_extracted_entities([], registry) == []


class TestLegacyFieldDetection:
    def test_is_legacy_relation_field(self) -> None:
        field = "associatedEntities"

        assert is_legacy_relation_field("associatedCharacters", field)
        assert is_legacy_relation_field("associatedLocations", field)
        assert not is_legacy_relation_field("associatedEntities", field)
        assert not is_legacy_relation_field("associated", field)
        assert not is_legacy_relation_field("shortDescription", field)
