"""
Name Index - Case-Insensitive Name to Entity Lookup.

Associations are stored as display names, so every link in the graph goes
through this index. Two entities may share a name case-insensitively; which
one the index keeps is an explicit configuration decision (CollisionPolicy).
"""

from campaign_graph.config import CollisionPolicy, get_settings
from campaign_graph.graph.schemas import Entity
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)


class NameCollisionError(ValueError):
    """Raised under the REJECT policy when entity names collide."""

    def __init__(self, name: str, entity_ids: list[str]) -> None:
        self.name = name
        self.entity_ids = entity_ids
        super().__init__(
            f"Entities {', '.join(entity_ids)} share the name {name!r} (case-insensitive)"
        )


def normalize_name(name: str) -> str:
    """Lookup key for a display name."""
    return name.strip().lower()


class NameIndex:
    """
    Lookup from ``name.strip().lower()`` to entity id.

    Blank names are never indexed. Colliding names are resolved according
    to ``policy`` and recorded in ``collisions``.

    Usage:
        index = NameIndex(entities)
        target_id = index.resolve("sunken temple")
    """

    def __init__(
        self,
        entities: list[Entity],
        policy: CollisionPolicy | None = None,
    ) -> None:
        """
        Build the index.

        Args:
            entities: Current entity snapshot
            policy: Collision policy (defaults to settings)

        Raises:
            NameCollisionError: If ``policy`` is REJECT and two names collide
        """
        self.policy = policy or get_settings().name_collision_policy
        self._ids: dict[str, str] = {}
        self._entities: dict[str, Entity] = {}
        self._collisions: dict[str, list[str]] = {}

        for entity in entities:
            self._entities[entity.id] = entity
            key = normalize_name(entity.name)
            if not key:
                continue

            if key not in self._ids:
                self._ids[key] = entity.id
                continue

            if self._ids[key] == entity.id:
                continue

            ids = self._collisions.setdefault(key, [self._ids[key]])
            ids.append(entity.id)

            if self.policy == CollisionPolicy.REJECT:
                raise NameCollisionError(entity.name, ids)
            if self.policy == CollisionPolicy.LAST_WINS:
                self._ids[key] = entity.id

        for key, ids in self._collisions.items():
            logger.warning(
                f"Name {key!r} is shared by {len(ids)} entities ({', '.join(ids)}); "
                f"resolving to {self._ids[key]} ({self.policy.value})"
            )

    def resolve(self, name: str) -> str | None:
        """Entity id for a display name, or None if unknown."""
        key = normalize_name(name)
        if not key:
            return None
        return self._ids.get(key)

    def get_entity(self, name: str) -> Entity | None:
        """Entity for a display name, or None if unknown."""
        entity_id = self.resolve(name)
        return self._entities.get(entity_id) if entity_id else None

    def entity_by_id(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    @property
    def collisions(self) -> dict[str, list[str]]:
        """Normalized name -> every entity id that carries it."""
        return {key: list(ids) for key, ids in self._collisions.items()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __len__(self) -> int:
        return len(self._ids)
