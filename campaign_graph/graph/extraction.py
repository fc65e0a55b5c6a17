"""
Extraction Boundary - Normalize AI Extraction Output.

The extraction collaborator returns loosely shaped JSON records. Older
payloads link entities through typed id arrays (``associatedCharacters``,
``associatedLocations``, ...); the engine stores name-based association
text. This module validates records and migrates the legacy links.
"""

import re
from typing import Any

from campaign_graph.config import get_settings
from campaign_graph.graph.registry import get_type
from campaign_graph.graph.schemas import (
    IDENTITY_FIELDS,
    Entity,
    EntityTypeDef,
    merge_names,
    parse_associations,
)
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)

# associatedCharacters, associatedLocations, ... (not associatedEntities)
LEGACY_RELATION_PATTERN = re.compile(r"^associated[A-Z]\w*s$")


def is_legacy_relation_field(key: str, association_field: str) -> bool:
    return key != association_field and bool(LEGACY_RELATION_PATTERN.match(key))


def normalize_extracted_entities(
    raw_entities: list[Any],
    registry: list[EntityTypeDef],
    association_field: str | None = None,
) -> list[Entity]:
    """
    Turn extraction records into validated entities.

    - Records that are not mappings, or whose type is not registered, are dropped.
    - Missing ids become ``{type}-{n}``; missing names ``Unknown {type}``.
    - Every schema attribute is present (blank when not extracted).
    - Legacy id arrays are folded into the association text as names;
      ids that match no extracted entity are dropped.

    Args:
        raw_entities: Records as returned by the extraction collaborator
        registry: Entity type registry
        association_field: Attribute holding association text

    Returns:
        Entities in input order
    """
    field = association_field or get_settings().association_field

    records: list[dict[str, Any]] = []
    for position, raw in enumerate(raw_entities):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed extraction record at {position}: {type(raw).__name__}")
            continue

        type_key = str(raw.get("type") or "")
        type_def = get_type(registry, type_key)
        if type_def is None:
            logger.debug(f"Dropping record of unregistered type {type_key!r}")
            continue

        record = dict(raw)
        record["type"] = type_key
        record["id"] = str(raw.get("id") or f"{type_key}-{position + 1}")
        record["name"] = str(raw.get("name") or f"Unknown {type_key}").strip()
        for key in type_def.attribute_keys:
            if record.get(key) is None:
                record[key] = ""
        records.append(record)

    names_by_id = {record["id"]: record["name"] for record in records}

    entities: list[Entity] = []
    migrated = 0
    for record in records:
        linked: list[str] = []
        attributes: dict[str, Any] = {}

        for key, value in record.items():
            if key in IDENTITY_FIELDS:
                continue
            if not is_legacy_relation_field(key, field):
                attributes[key] = value
                continue
            ids = value if isinstance(value, list) else []
            for ref in ids:
                name = names_by_id.get(str(ref))
                if name is None:
                    logger.debug(f"{record['id']}.{key}: dropping unknown id {ref!r}")
                elif str(ref) != record["id"]:
                    linked.append(name)

        if linked:
            migrated += len(linked)
            existing = attributes.get(field)
            if isinstance(existing, list):
                explicit = [str(v) for v in existing]
            else:
                explicit = parse_associations(str(existing or ""))
            attributes[field] = ", ".join(merge_names(explicit, linked))

        entities.append(
            Entity(
                id=record["id"],
                type=record["type"],
                name=record["name"],
                attributes=attributes,
            )
        )

    logger.info(
        f"Normalized {len(entities)}/{len(raw_entities)} extracted entities "
        f"({migrated} legacy links migrated)"
    )
    return entities
