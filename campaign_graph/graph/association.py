"""
Association Inference and Resolution.

Turns the free-text ``associatedEntities`` field into a symmetric,
de-duplicated association list per entity:

1. Inference: scan each entity's own text for other entities' names.
2. Resolution: merge explicit and inferred names, write the canonical
   text back, then make every resolvable link two-way.

Every operation takes a full entity snapshot and returns a new one; the
caller replaces its snapshot in one step. Unknown names are kept as plain,
unlinked text and never raise.
"""

from campaign_graph.config import CollisionPolicy, Settings, get_settings
from campaign_graph.graph.name_index import NameIndex, normalize_name
from campaign_graph.graph.schemas import (
    Entity,
    format_associations,
    merge_names,
    parse_associations,
)
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)

__all__ = [
    "AssociationInferer",
    "AssociationResolver",
    "format_associations",
    "merge_names",
    "parse_associations",
]


# ============================================================================
# Inference
# ============================================================================


class AssociationInferer:
    """
    Detect one-hop mentions of other entities inside an entity's text.

    This is a plain substring test on lowercased text, not word-boundary
    aware: a short name such as "Al" matches inside "ally".
    """

    def __init__(self, association_field: str | None = None) -> None:
        self.association_field = association_field or get_settings().association_field

    def searchable_text(self, entity: Entity) -> str:
        """Lowercased concatenation of every scannable attribute."""
        return " ".join(
            value
            for key, value in entity.attributes.items()
            if key != self.association_field
        ).lower()

    def infer(self, entity: Entity, entities: list[Entity]) -> list[str]:
        """
        Names of other entities mentioned in ``entity``'s text.

        Args:
            entity: Entity whose text is scanned
            entities: Full snapshot to match names from

        Returns:
            Matched names in snapshot order, original casing
        """
        text = self.searchable_text(entity)
        if not text:
            return []

        mentioned: list[str] = []
        for other in entities:
            if other.id == entity.id:
                continue
            needle = normalize_name(other.name)
            if needle and needle in text:
                mentioned.append(other.name.strip())

        return mentioned

    def mentions(self, entity: Entity, name: str) -> bool:
        """Whether ``entity``'s own text mentions ``name``."""
        needle = normalize_name(name)
        return bool(needle) and needle in self.searchable_text(entity)

    def infer_all(self, entities: list[Entity]) -> dict[str, list[str]]:
        """Inferred names for every entity, keyed by entity id."""
        return {entity.id: self.infer(entity, entities) for entity in entities}


# ============================================================================
# Resolution
# ============================================================================


class AssociationResolver:
    """
    Produce and maintain symmetric per-entity association text.

    Usage:
        resolver = AssociationResolver()
        entities = resolver.resolve(entities)
        entities = resolver.remove_association(entities, "loc-1", "Baron Valdris")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        policy: CollisionPolicy | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            settings: Engine settings (defaults to the cached settings)
            policy: Override of the name collision policy
        """
        self.settings = settings or get_settings()
        self.field = self.settings.association_field
        self.policy = policy or self.settings.name_collision_policy
        self.inferer = AssociationInferer(self.field)

    def build_index(self, entities: list[Entity]) -> NameIndex:
        return NameIndex(entities, policy=self.policy)

    def resolve(self, entities: list[Entity]) -> list[Entity]:
        """
        Merge inferred and explicit associations and enforce symmetry.

        Args:
            entities: Current snapshot (not modified)

        Returns:
            New snapshot, same order, with canonical association text
        """
        if not entities:
            return []

        index = self.build_index(entities)
        position = {}
        for i, entity in enumerate(entities):
            position.setdefault(entity.id, i)

        # Steps 1-2: explicit names first, inferred appended
        lists: list[list[str]] = []
        inferred_count = 0
        for entity in entities:
            explicit = entity.associations(self.field)
            merged = merge_names(explicit, self.inferer.infer(entity, entities))
            inferred_count += len(merged) - len(merge_names(explicit))
            lists.append(merged)

        # Step 3: one forward pass; only ever appends, so it converges
        symmetric_count = 0
        for i, entity in enumerate(entities):
            if index.resolve(entity.name) != entity.id:
                # Nameless, or another entity owns this name
                continue
            own_key = normalize_name(entity.name)

            for name in list(lists[i]):
                target_id = index.resolve(name)
                if target_id is None or target_id == entity.id:
                    continue
                target_list = lists[position[target_id]]
                if own_key not in {normalize_name(n) for n in target_list}:
                    target_list.append(entity.name.strip())
                    symmetric_count += 1

        resolved = [
            entity.with_associations(names, self.field)
            for entity, names in zip(entities, lists)
        ]

        logger.info(
            f"Resolved associations for {len(entities)} entities "
            f"({inferred_count} inferred, {symmetric_count} mirrored)"
        )
        return resolved

    def split_associations(
        self,
        entity: Entity,
        index: NameIndex,
    ) -> tuple[list[str], list[str]]:
        """
        Separate an entity's associations into linked ids and plain text.

        Returns:
            Tuple of (resolved entity ids, unresolved names)
        """
        linked: list[str] = []
        unlinked: list[str] = []
        for name in entity.associations(self.field):
            target_id = index.resolve(name)
            if target_id is None:
                unlinked.append(name)
            elif target_id != entity.id and target_id not in linked:
                linked.append(target_id)
        return linked, unlinked

    # ------------------------------------------------------------------
    # Manual edits
    # ------------------------------------------------------------------

    def add_association(
        self,
        entities: list[Entity],
        entity_id: str,
        name: str,
    ) -> list[Entity]:
        """
        Add ``name`` to an entity's associations, and the reverse link.

        When ``name`` resolves to another entity, that entity's current
        display name is stored and the source's name is added to the target.
        Adding the entity to itself, or a name already listed, is a no-op.
        """
        source = self._find(entities, entity_id)
        name = name.strip()
        if source is None or not name:
            return list(entities)

        index = self.build_index(entities)
        target_id = index.resolve(name)
        if target_id == entity_id:
            logger.debug(f"Ignoring self-association on {entity_id}")
            return list(entities)

        target = index.entity_by_id(target_id) if target_id else None
        updates: dict[str, Entity] = {}

        stored = target.name.strip() if target else name
        current = source.associations(self.field)
        if normalize_name(stored) not in {normalize_name(n) for n in current}:
            updates[source.id] = source.with_associations(current + [stored], self.field)

        if target is not None and index.resolve(source.name) == source.id:
            target_current = target.associations(self.field)
            if normalize_name(source.name) not in {normalize_name(n) for n in target_current}:
                updates[target.id] = target.with_associations(
                    target_current + [source.name.strip()], self.field
                )

        if updates:
            logger.debug(f"Added association {entity_id} <-> {stored!r}")
        return self._replace(entities, updates)

    def remove_association(
        self,
        entities: list[Entity],
        entity_id: str,
        name: str,
    ) -> list[Entity]:
        """
        Remove ``name`` from an entity's associations, and the reverse link.

        The reverse link is kept when the target's own text still mentions
        the source, since inference would re-create it on the next
        resolution. Removal is best-effort symmetric.
        """
        source = self._find(entities, entity_id)
        key = normalize_name(name)
        if source is None or not key:
            return list(entities)

        index = self.build_index(entities)
        updates: dict[str, Entity] = {}

        current = source.associations(self.field)
        remaining = [n for n in current if normalize_name(n) != key]
        if len(remaining) != len(current):
            updates[source.id] = source.with_associations(remaining, self.field)
        if self.inferer.mentions(source, name):
            logger.debug(
                f"{entity_id} still mentions {name!r} in its text; "
                "the link returns on the next resolution"
            )

        target_id = index.resolve(name)
        target = index.entity_by_id(target_id) if target_id else None
        if target is not None and target.id != source.id:
            source_key = normalize_name(source.name)
            if index.resolve(source.name) != source.id:
                # The target's reference to this name points at another entity
                logger.debug(f"Keeping reverse link: {source.name!r} resolves to another entity")
            elif self.inferer.mentions(target, source.name):
                logger.debug(f"Keeping reverse link: {target.id} mentions {source.name!r}")
            else:
                target_current = target.associations(self.field)
                target_remaining = [
                    n for n in target_current if normalize_name(n) != source_key
                ]
                if len(target_remaining) != len(target_current):
                    updates[target.id] = target.with_associations(target_remaining, self.field)

        return self._replace(entities, updates)

    def delete_entity(self, entities: list[Entity], entity_id: str) -> list[Entity]:
        """
        Remove an entity and strip its name from every association list.

        If another entity shares the deleted entity's name, references are
        kept, since they now resolve to that entity.
        """
        doomed = self._find(entities, entity_id)
        if doomed is None:
            return list(entities)

        remaining = [e for e in entities if e.id != entity_id]
        key = normalize_name(doomed.name)
        if not key or self.build_index(remaining).resolve(doomed.name) is not None:
            logger.info(f"Deleted entity {entity_id}")
            return remaining

        cleaned: list[Entity] = []
        stripped = 0
        for entity in remaining:
            current = entity.associations(self.field)
            kept = [n for n in current if normalize_name(n) != key]
            if len(kept) != len(current):
                stripped += 1
                entity = entity.with_associations(kept, self.field)
            cleaned.append(entity)

        logger.info(f"Deleted entity {entity_id}, removed from {stripped} association lists")
        return cleaned

    def rename_entity(
        self,
        entities: list[Entity],
        entity_id: str,
        new_name: str,
    ) -> list[Entity]:
        """
        Change an entity's display name.

        Other entities' association text is not rewritten: references to
        the old name become unresolved plain text.
        """
        entity = self._find(entities, entity_id)
        if entity is None:
            return list(entities)

        old_key = normalize_name(entity.name)
        stale = sum(
            1
            for other in entities
            if other.id != entity_id
            and old_key
            and old_key in {normalize_name(n) for n in other.associations(self.field)}
        )
        if stale:
            logger.info(
                f"Renamed {entity_id}: {stale} association(s) to {entity.name!r} are now unlinked"
            )

        renamed = entity.model_copy(update={"name": new_name.strip()})
        return self._replace(entities, {entity_id: renamed})

    def available_associations(
        self,
        entities: list[Entity],
        entity_id: str,
        type_order: list[str],
    ) -> list[Entity]:
        """
        Entities that could still be added as associations.

        Excludes the entity itself and everything already listed. Sorted
        by registry type order (unknown types last), then by name.
        """
        source = self._find(entities, entity_id)
        if source is None:
            return []

        listed = {normalize_name(n) for n in source.associations(self.field)}
        rank = {key: i for i, key in enumerate(type_order)}
        available = [
            e
            for e in entities
            if e.id != entity_id and normalize_name(e.name) not in listed
        ]
        return sorted(
            available,
            key=lambda e: (rank.get(e.type, len(rank)), e.name.lower()),
        )

    def _find(self, entities: list[Entity], entity_id: str) -> Entity | None:
        for entity in entities:
            if entity.id == entity_id:
                return entity
        logger.warning(f"Entity {entity_id} not found; snapshot left unchanged")
        return None

    @staticmethod
    def _replace(entities: list[Entity], updates: dict[str, Entity]) -> list[Entity]:
        return [updates.get(entity.id, entity) for entity in entities]
