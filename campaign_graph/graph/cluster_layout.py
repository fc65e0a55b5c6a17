"""
Cluster Layout - Deterministic 2-D Placement.

Places entities without a physics simulation:

1. One cluster per entity type, centers evenly spaced on a circle
   (first cluster at the top).
2. Inside a cluster, the best-connected entity sits at the center and the
   rest follow a six-per-ring spiral, nudged by a jitter derived from the
   entity id (no randomness, so layouts are reproducible).
3. A few relaxation passes pull connected entities toward each other.

Relaxation reads positions from a snapshot taken at the start of each
pass, so the result does not depend on iteration order.
"""

import math

from campaign_graph.config import Settings, get_settings
from campaign_graph.graph.connection_graph import ConnectionGraph
from campaign_graph.graph.schemas import Entity, LayoutPosition, TypeCluster
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)

Point = tuple[float, float]


class ClusterLayout:
    """
    Type-clustered spiral layout with midpoint relaxation.

    Usage:
        layout = ClusterLayout()
        positions = layout.compute(view.visible_entities, view.graph, type_order)
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize the layout.

        Args:
            settings: Engine settings holding the layout constants
        """
        self.settings = settings or get_settings()

    def clusters(
        self,
        entities: list[Entity],
        graph: ConnectionGraph,
        type_order: list[str],
    ) -> list[TypeCluster]:
        """
        Group entities into positioned type clusters.

        Types follow ``type_order``; types missing from it are appended in
        first-seen order. Empty groups get no cluster.

        Args:
            entities: Visible entities
            graph: Graph used for connection counts
            type_order: Registry type keys, in cluster order

        Returns:
            Non-empty clusters with centers and sorted members
        """
        groups: dict[str, list[Entity]] = {key: [] for key in type_order}
        for entity in entities:
            groups.setdefault(entity.type, []).append(entity)

        non_empty = [(key, members) for key, members in groups.items() if members]
        num_types = len(non_empty)
        radius = self.settings.cluster_radius

        clusters: list[TypeCluster] = []
        for t, (type_key, members) in enumerate(non_empty):
            theta = 2 * math.pi * t / num_types - math.pi / 2
            # sorted() is stable: ties keep snapshot order
            ordered = sorted(members, key=lambda e: -graph.degree(e.id))
            clusters.append(
                TypeCluster(
                    type_key=type_key,
                    index=t,
                    center_x=radius * math.cos(theta),
                    center_y=radius * math.sin(theta),
                    entity_ids=[e.id for e in ordered],
                )
            )

        return clusters

    def compute(
        self,
        entities: list[Entity],
        graph: ConnectionGraph,
        type_order: list[str],
        clusters: list[TypeCluster] | None = None,
    ) -> list[LayoutPosition]:
        """
        Compute one position per visible entity.

        Args:
            entities: Visible entities
            graph: Graph restricted to visible entities
            type_order: Registry type keys, in cluster order
            clusters: Clusters already computed by ``clusters()`` for the
                same inputs; grouped here when omitted

        Returns:
            Positions in cluster order; empty for empty input
        """
        if not entities:
            return []

        positions: dict[str, Point] = {}
        if clusters is None:
            clusters = self.clusters(entities, graph, type_order)
        for cluster in clusters:
            positions.update(self._place_cluster(cluster, graph))

        positions = self.relax(positions, graph)

        logger.debug(f"Laid out {len(positions)} entities")
        return [
            LayoutPosition(entity_id=entity_id, x=x, y=y)
            for entity_id, (x, y) in positions.items()
        ]

    def _place_cluster(self, cluster: TypeCluster, graph: ConnectionGraph) -> dict[str, Point]:
        placed: dict[str, Point] = {}
        members = list(cluster.entity_ids)

        if members and graph.degree(members[0]) > 0:
            placed[members.pop(0)] = (cluster.center_x, cluster.center_y)

        for i, entity_id in enumerate(members):
            placed[entity_id] = self.spiral_position(
                i, cluster.center_x, cluster.center_y, entity_id
            )

        return placed

    def spiral_position(self, i: int, cx: float, cy: float, entity_id: str) -> Point:
        """Position of the i-th off-center entity of a cluster."""
        ring_size = self.settings.spiral_ring_size
        layer = i // ring_size + 1
        angle = (i % ring_size) * (2 * math.pi / ring_size) + layer * self.settings.spiral_ring_twist
        radius = layer * self.settings.spiral_ring_spacing
        jitter_x, jitter_y = self.jitter(entity_id)
        return (
            cx + radius * math.cos(angle) + jitter_x,
            cy + radius * math.sin(angle) + jitter_y,
        )

    def jitter(self, entity_id: str) -> Point:
        """Small offset derived from the id's code points."""
        seed = sum(ord(ch) for ch in entity_id)
        amplitude = self.settings.jitter_amplitude
        return (amplitude * math.sin(1.5 * seed), amplitude * math.cos(2.3 * seed))

    def relax(self, positions: dict[str, Point], graph: ConnectionGraph) -> dict[str, Point]:
        """
        Pull each entity toward the midpoints with its neighbors.

        Each pass moves ``u`` by ``strength * (midpoint(u, v) - u)`` for
        every neighbor ``v``, all computed from start-of-pass positions.
        """
        strength = self.settings.relaxation_strength

        for _ in range(self.settings.relaxation_iterations):
            snapshot = dict(positions)
            updated: dict[str, Point] = {}

            for u, (ux, uy) in snapshot.items():
                dx = dy = 0.0
                for v in sorted(graph.neighbors(u)):
                    if v not in snapshot:
                        continue
                    vx, vy = snapshot[v]
                    dx += strength * ((ux + vx) / 2 - ux)
                    dy += strength * ((uy + vy) / 2 - uy)
                updated[u] = (ux + dx, uy + dy)

            positions = updated

        return positions
