"""
Entity Type Registry.

The registry is an ordered list of ``EntityTypeDef`` records. Its order
drives cluster placement in the layout; its attribute schemas drive
entity creation and the "open questions" list of unfilled fields.
"""

import re

from campaign_graph.graph.schemas import (
    ASSOCIATION_FIELD,
    AttributeDef,
    EmptyField,
    Entity,
    EntityTypeDef,
)
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)


DEFAULT_COLOR = "#666666"

# Palette handed out to new types, in order
COLOR_PALETTE = [
    "#5d8a66",  # sage green
    "#b08d57",  # amber
    "#6b7fa3",  # steel blue
    "#a35d5d",  # rust red
    "#7d6b99",  # muted purple
    "#5d8a8a",  # teal
    "#8a6b5d",  # brown
    "#7a8a5d",  # olive
    "#8a5d7a",  # mauve
    "#5d6b8a",  # slate
]

_ASSOCIATIONS = AttributeDef(key=ASSOCIATION_FIELD, label="Associated Entities")

DEFAULT_ENTITY_TYPES: list[EntityTypeDef] = [
    EntityTypeDef(
        key="location",
        label="Locations",
        color="#5d8a66",
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            AttributeDef(key="longDescription", label="In-Depth Description"),
            AttributeDef(key="background", label="Background"),
            _ASSOCIATIONS,
        ],
    ),
    EntityTypeDef(
        key="happening",
        label="Happenings",
        color="#b08d57",
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            AttributeDef(key="longDescription", label="Detailed Description"),
            AttributeDef(key="potentialStarts", label="Potential Starts"),
            AttributeDef(key="potentialOutcomes", label="Potential Outcomes"),
            _ASSOCIATIONS,
        ],
    ),
    EntityTypeDef(
        key="character",
        label="Characters",
        color="#6b7fa3",
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            AttributeDef(key="longDescription", label="Detailed Description"),
            AttributeDef(key="background", label="Background"),
            AttributeDef(key="motivationsGoals", label="Motivations & Goals"),
            AttributeDef(key="personality", label="Personality"),
            _ASSOCIATIONS,
        ],
    ),
    EntityTypeDef(
        key="monster",
        label="Monsters",
        color="#a35d5d",
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            AttributeDef(key="longDescription", label="Detailed Description"),
            AttributeDef(key="abilities", label="Abilities"),
            AttributeDef(key="behavior", label="Behavior"),
            _ASSOCIATIONS,
        ],
    ),
    EntityTypeDef(
        key="item",
        label="Items",
        color="#7d6b99",
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            AttributeDef(key="longDescription", label="Detailed Description"),
            AttributeDef(key="properties", label="Properties"),
            AttributeDef(key="history", label="History"),
            _ASSOCIATIONS,
        ],
    ),
]


def type_order(registry: list[EntityTypeDef]) -> list[str]:
    """Type keys in registry order."""
    return [type_def.key for type_def in registry]


def get_type(registry: list[EntityTypeDef], key: str) -> EntityTypeDef | None:
    for type_def in registry:
        if type_def.key == key:
            return type_def
    return None


def get_entity_color(registry: list[EntityTypeDef], key: str) -> str:
    type_def = get_type(registry, key)
    return type_def.color if type_def else DEFAULT_COLOR


def get_entity_label(registry: list[EntityTypeDef], key: str) -> str:
    type_def = get_type(registry, key)
    return type_def.label if type_def else key


def slugify_key(label: str) -> str:
    """Turn a display label into a type/attribute key: 'Secret Lairs' -> 'secret_lairs'."""
    key = re.sub(r"\s+", "_", label.strip().lower())
    return re.sub(r"[^a-z0-9_]", "", key)


def new_entity_type(registry: list[EntityTypeDef], label: str) -> EntityTypeDef:
    """
    Create a type definition for ``label`` with the next unused palette color.

    New types start with a short description and the association field.
    When every palette color is taken, colors cycle by registry size.

    Args:
        registry: Current registry (not modified)
        label: Display label for the new type

    Returns:
        The new EntityTypeDef; the caller appends it to the registry
    """
    used = {type_def.color.lower() for type_def in registry}
    color = next(
        (c for c in COLOR_PALETTE if c not in used),
        COLOR_PALETTE[len(registry) % len(COLOR_PALETTE)],
    )

    key = slugify_key(label) or f"type_{len(registry) + 1}"
    existing = set(type_order(registry))
    if key in existing:
        suffix = 2
        while f"{key}_{suffix}" in existing:
            suffix += 1
        key = f"{key}_{suffix}"

    return EntityTypeDef(
        key=key,
        label=label,
        color=color,
        attributes=[
            AttributeDef(key="shortDescription", label="Short Description"),
            _ASSOCIATIONS,
        ],
    )


def create_empty_entity(type_def: EntityTypeDef, entity_id: str, name: str) -> Entity:
    """Create an entity with every schema attribute present and blank."""
    return Entity(
        id=entity_id,
        type=type_def.key,
        name=name,
        attributes={key: "" for key in type_def.attribute_keys},
    )


def get_empty_fields(entities: list[Entity], registry: list[EntityTypeDef]) -> list[EmptyField]:
    """
    List schema attributes that are missing or blank.

    Entities whose type is not in the registry are skipped.
    """
    empty: list[EmptyField] = []

    for entity in entities:
        type_def = get_type(registry, entity.type)
        if type_def is None:
            continue

        for attr in type_def.attributes:
            if entity.get(attr.key).strip():
                continue
            empty.append(
                EmptyField(
                    entity_id=entity.id,
                    entity_name=entity.name,
                    entity_type=entity.type,
                    field_key=attr.key,
                    field_label=attr.label,
                )
            )

    logger.debug(f"Found {len(empty)} empty fields across {len(entities)} entities")
    return empty
