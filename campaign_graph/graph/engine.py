"""
Campaign Graph Engine - End-to-End Rebuild.

Runs the full pipeline on an entity snapshot:

    entities -> resolved associations -> graph -> type filter -> layout

There is no incremental update; callers rebuild on every structural change.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from campaign_graph.config import Settings, get_settings
from campaign_graph.graph.association import AssociationResolver
from campaign_graph.graph.cluster_layout import ClusterLayout
from campaign_graph.graph.connection_graph import ConnectionGraph, build_graph
from campaign_graph.graph.registry import DEFAULT_ENTITY_TYPES, type_order
from campaign_graph.graph.schemas import Entity, EntityTypeDef, LayoutPosition, TypeCluster
from campaign_graph.graph.view_filter import ViewFilter
from campaign_graph.utils.logger import LogContext, get_logger, log_timing

logger = get_logger(__name__)


@dataclass
class GraphView:
    """Everything the presentation layer needs to draw the graph."""

    entities: list[Entity] = field(default_factory=list)
    visible_entities: list[Entity] = field(default_factory=list)
    graph: ConnectionGraph = field(default_factory=ConnectionGraph)
    positions: list[LayoutPosition] = field(default_factory=list)
    clusters: list[TypeCluster] = field(default_factory=list)
    hidden_types: frozenset[str] = frozenset()

    @property
    def adjacency(self) -> dict[str, set[str]]:
        return self.graph.adjacency

    @property
    def connection_count(self) -> dict[str, int]:
        return self.graph.connection_count

    def position_of(self, entity_id: str) -> LayoutPosition | None:
        for position in self.positions:
            if position.entity_id == entity_id:
                return position
        return None


class CampaignGraphEngine:
    """
    Facade over resolution, graph building, filtering and layout.

    Usage:
        engine = CampaignGraphEngine()
        entities = engine.resolve(entities)
        view = engine.build(entities, hidden_types={"monster"})
    """

    def __init__(
        self,
        registry: list[EntityTypeDef] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            registry: Entity type registry (defaults to the built-in types)
            settings: Engine settings
        """
        self.registry = registry if registry is not None else list(DEFAULT_ENTITY_TYPES)
        self.settings = settings or get_settings()
        self.resolver = AssociationResolver(self.settings)
        self.layout = ClusterLayout(self.settings)

    @property
    def type_order(self) -> list[str]:
        return type_order(self.registry)

    def resolve(self, entities: list[Entity]) -> list[Entity]:
        """Resolved, symmetric snapshot; apply it before calling ``build``."""
        return self.resolver.resolve(entities)

    def build(
        self,
        entities: list[Entity],
        hidden_types: Iterable[str] = (),
    ) -> GraphView:
        """
        Build graph, filtered view and layout for a resolved snapshot.

        Args:
            entities: Resolved entity snapshot
            hidden_types: Type keys to hide from the view

        Returns:
            GraphView over the visible entities
        """
        view_filter = ViewFilter(hidden_types)

        with LogContext(logger, entity_count=len(entities)), log_timing(logger, "Graph build"):
            index = self.resolver.build_index(entities)
            full_graph = build_graph(entities, index=index, association_field=self.settings.association_field)
            view = view_filter.apply(entities, full_graph)
            order = self.type_order
            clusters = self.layout.clusters(view.visible_entities, view.graph, order)
            positions = self.layout.compute(
                view.visible_entities, view.graph, order, clusters=clusters
            )

            logger.info(
                f"Built view: {len(view.visible_entities)}/{len(entities)} entities visible, "
                f"{view.graph.edge_count} edges, {len(clusters)} clusters"
            )

        return GraphView(
            entities=list(entities),
            visible_entities=view.visible_entities,
            graph=view.graph,
            positions=positions,
            clusters=clusters,
            hidden_types=view_filter.hidden_types,
        )

    def rebuild(
        self,
        entities: list[Entity],
        hidden_types: Iterable[str] = (),
    ) -> GraphView:
        """Resolve then build in one call."""
        return self.build(self.resolve(entities), hidden_types)
