"""
Pytest Configuration and Fixtures.

All fixtures use real components - no mocks. Entities are small
hand-written campaigns whose resolved associations are known.
"""

import pytest

from campaign_graph.config import Settings
from campaign_graph.graph.registry import DEFAULT_ENTITY_TYPES, type_order
from campaign_graph.graph.schemas import Entity, EntityTypeDef


# ============================================================================
# Settings & Registry
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def registry() -> list[EntityTypeDef]:
    return list(DEFAULT_ENTITY_TYPES)


@pytest.fixture
def order(registry) -> list[str]:
    return type_order(registry)


# ============================================================================
# Entity Fixtures
# ============================================================================


def make_entity(entity_id: str, type_key: str, name: str, **attributes: str) -> Entity:
    """Shorthand used across test modules."""
    return Entity(id=entity_id, type=type_key, name=name, attributes=attributes)


@pytest.fixture
def temple_and_baron() -> list[Entity]:
    """Two entities: the baron lists the temple, the temple lists nobody."""
    return [
        make_entity("loc-1", "location", "Sunken Temple", associatedEntities=""),
        make_entity("chr-1", "character", "Baron Valdris", associatedEntities="Sunken Temple"),
    ]


@pytest.fixture
def gricklejaw() -> Entity:
    """A monster nobody mentions."""
    return make_entity("mon-1", "monster", "Gricklejaw", associatedEntities="")


@pytest.fixture
def campaign() -> list[Entity]:
    """
    Six entities linked through text mentions and explicit names.

    After resolution:
        loc-1: Gricklejaw, Mistwood Swamp, Baron Valdris
        loc-2: Sunken Temple, Tidecaller Horn
        chr-1: Sunken Temple, Sister Maren
        chr-2: Baron Valdris, The Lost King, Gricklejaw
        mon-1: Sunken Temple, Sister Maren, Tidecaller Horn
        itm-1: Mistwood Swamp, Gricklejaw
    """
    return [
        make_entity(
            "loc-1",
            "location",
            "Sunken Temple",
            shortDescription="An ancient temple where Gricklejaw lairs.",
            associatedEntities="",
        ),
        make_entity(
            "loc-2",
            "location",
            "Mistwood Swamp",
            shortDescription="A fetid swamp surrounding the Sunken Temple.",
            associatedEntities="",
        ),
        make_entity(
            "chr-1",
            "character",
            "Baron Valdris",
            shortDescription="A scheming noble.",
            associatedEntities="Sunken Temple",
        ),
        make_entity(
            "chr-2",
            "character",
            "Sister Maren",
            shortDescription="A priestess who hunts Gricklejaw.",
            associatedEntities="Baron Valdris, The Lost King",
        ),
        make_entity(
            "mon-1",
            "monster",
            "Gricklejaw",
            shortDescription="A swamp troll.",
            associatedEntities="",
        ),
        make_entity(
            "itm-1",
            "item",
            "Tidecaller Horn",
            shortDescription="Blown to summon Gricklejaw from the Mistwood Swamp.",
            associatedEntities="",
        ),
    ]


@pytest.fixture
def resolved_campaign(campaign, settings) -> list[Entity]:
    from campaign_graph.graph.association import AssociationResolver

    return AssociationResolver(settings).resolve(campaign)


def by_id(entities: list[Entity]) -> dict[str, Entity]:
    return {entity.id: entity for entity in entities}
