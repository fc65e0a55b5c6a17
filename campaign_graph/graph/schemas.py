"""
Pydantic Schemas for the Association Graph.

Defines campaign entities, the entity type registry records, association
edges and layout output. These models are the boundary where loosely typed
input (hand edits, AI extraction output, imported JSON) is validated.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Attribute conventionally holding the comma-separated association names
ASSOCIATION_FIELD = "associatedEntities"

# Keys that identify an entity and are never scanned for mentions
IDENTITY_FIELDS = frozenset({"id", "type", "name"})


# ============================================================================
# Association text helpers
# ============================================================================


def parse_associations(text: str | None) -> list[str]:
    """Split association text on commas, trimming and dropping empties."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def format_associations(names: list[str]) -> str:
    """Join association names into their canonical text form."""
    return ", ".join(names)


def merge_names(*name_lists: list[str]) -> list[str]:
    """
    Merge name lists, dropping case-insensitive duplicates.

    The first occurrence's casing wins and order is preserved.
    """
    seen: set[str] = set()
    merged: list[str] = []
    for names in name_lists:
        for name in names:
            key = name.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(name.strip())
    return merged


def _coerce_attribute(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set)):
        return format_associations([str(v).strip() for v in value if str(v).strip()])
    return str(value)


# ============================================================================
# Entities
# ============================================================================


class Entity(BaseModel):
    """
    A narrative entity: location, happening, character, monster, item...

    Entities are the nodes of the association graph. ``id`` is stable for
    the entity's lifetime; ``name`` may change. All free-text fields live
    in ``attributes`` as strings.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique, stable entity ID")
    type: str = Field(..., description="Key into the entity type registry")
    name: str = Field(default="", description="Display name, used for association text")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Free-text attributes keyed by attribute key",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("attributes must be a mapping")
        return {
            str(key): _coerce_attribute(item)
            for key, item in value.items()
            if str(key) not in IDENTITY_FIELDS
        }

    @property
    def normalized_name(self) -> str:
        """Lookup key for this entity's name."""
        return self.name.strip().lower()

    def get(self, key: str, default: str = "") -> str:
        """Get an attribute value."""
        return self.attributes.get(key, default)

    def associations(self, field: str = ASSOCIATION_FIELD) -> list[str]:
        """Parsed association names, in stored order."""
        return parse_associations(self.attributes.get(field))

    def with_attribute(self, key: str, value: str) -> "Entity":
        """Return a copy with one attribute replaced."""
        return self.model_copy(update={"attributes": {**self.attributes, key: value}})

    def with_associations(self, names: list[str], field: str = ASSOCIATION_FIELD) -> "Entity":
        """Return a copy whose association field holds ``names``."""
        return self.with_attribute(field, format_associations(names))

    @classmethod
    def from_flat(cls, record: dict[str, Any]) -> "Entity":
        """
        Build an entity from a flat record.

        The flat shape ``{"id", "type", "name", <attr>: value, ...}`` is what
        the extraction collaborator and JSON imports produce.
        """
        attributes = {k: v for k, v in record.items() if k not in IDENTITY_FIELDS}
        return cls(
            id=record.get("id"),
            type=record.get("type"),
            name=record.get("name"),
            attributes=attributes,
        )

    def to_flat(self) -> dict[str, str]:
        """Inverse of ``from_flat``."""
        return {"id": self.id, "type": self.type, "name": self.name, **self.attributes}


class AssociationEdge(BaseModel):
    """
    An undirected association between two entities.

    Endpoints are stored sorted, so two edges over the same pair are equal.
    """

    model_config = ConfigDict(frozen=True)

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _canonical_order(cls, data: Any) -> Any:
        if isinstance(data, dict):
            a, b = data.get("source_id"), data.get("target_id")
            if a is not None and a == b:
                raise ValueError(f"Self-edge on {a!r} is not allowed")
            if isinstance(a, str) and isinstance(b, str) and b < a:
                data = {**data, "source_id": b, "target_id": a}
        return data

    @classmethod
    def between(cls, a: str, b: str) -> "AssociationEdge":
        return cls(source_id=a, target_id=b)

    @property
    def key(self) -> tuple[str, str]:
        """Canonical key: the two ids, sorted."""
        return (self.source_id, self.target_id)

    def other(self, entity_id: str) -> str:
        """The endpoint that is not ``entity_id``."""
        if entity_id == self.source_id:
            return self.target_id
        if entity_id == self.target_id:
            return self.source_id
        raise KeyError(entity_id)


# ============================================================================
# Type Registry Records
# ============================================================================


class AttributeDef(BaseModel):
    """One attribute slot of an entity type."""

    key: str = Field(..., min_length=1)
    label: str = Field(default="")


class EntityTypeDef(BaseModel):
    """
    A configurable entity type.

    The registry order of these records is the cluster order of the layout.
    """

    key: str = Field(..., min_length=1, description="Type key referenced by Entity.type")
    label: str = Field(..., description="Plural display label, e.g. 'Locations'")
    color: str = Field(default="#666666", pattern=r"^#[0-9A-Fa-f]{6}$")
    attributes: list[AttributeDef] = Field(default_factory=list)

    @property
    def attribute_keys(self) -> list[str]:
        return [attr.key for attr in self.attributes]


class EmptyField(BaseModel):
    """An unfilled attribute, surfaced as an open question to the user."""

    entity_id: str
    entity_name: str
    entity_type: str
    field_key: str
    field_label: str


# ============================================================================
# Layout Output
# ============================================================================


class LayoutPosition(BaseModel):
    """Computed coordinates of one visible entity."""

    entity_id: str
    x: float
    y: float


class TypeCluster(BaseModel):
    """
    Entities of one type, grouped around a shared center.

    ``entity_ids`` are ordered by descending connection count.
    """

    type_key: str
    index: int = Field(..., ge=0)
    center_x: float
    center_y: float
    entity_ids: list[str] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.entity_ids)
