"""
View Filter - Type Visibility Projection.

Restricts the graph to entities whose type is not hidden. This is a pure
projection: association text is never touched, and the filtered adjacency
is recomputed from scratch on every call.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from campaign_graph.graph.connection_graph import ConnectionGraph
from campaign_graph.graph.schemas import Entity
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FilteredView:
    """Visible entities and the graph induced on them."""

    visible_entities: list[Entity] = field(default_factory=list)
    graph: ConnectionGraph = field(default_factory=ConnectionGraph)

    @property
    def adjacency(self) -> dict[str, set[str]]:
        return self.graph.adjacency

    @property
    def connection_count(self) -> dict[str, int]:
        return self.graph.connection_count

    @property
    def visible_ids(self) -> list[str]:
        return [entity.id for entity in self.visible_entities]


class ViewFilter:
    """
    Hide entity types from the graph view.

    Usage:
        view = ViewFilter({"monster"}).apply(entities, graph)
    """

    def __init__(self, hidden_types: Iterable[str] = ()) -> None:
        self.hidden_types: frozenset[str] = frozenset(hidden_types)

    def is_visible(self, entity: Entity) -> bool:
        return entity.type not in self.hidden_types

    def toggle(self, type_key: str) -> "ViewFilter":
        """New filter with ``type_key``'s visibility flipped."""
        return ViewFilter(self.hidden_types ^ {type_key})

    def apply(self, entities: list[Entity], graph: ConnectionGraph) -> FilteredView:
        """
        Project the graph onto visible entities.

        Args:
            entities: Full entity snapshot
            graph: Graph built over the full snapshot

        Returns:
            FilteredView with degrees counted inside the visible subgraph
        """
        visible = [entity for entity in entities if self.is_visible(entity)]
        subgraph = graph.subgraph(entity.id for entity in visible)

        if self.hidden_types:
            logger.debug(
                f"Hid {len(entities) - len(visible)} entities "
                f"(types: {', '.join(sorted(self.hidden_types))}); "
                f"{subgraph.edge_count}/{graph.edge_count} edges visible"
            )

        return FilteredView(visible_entities=visible, graph=subgraph)
