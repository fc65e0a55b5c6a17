"""
Connection Graph - NetworkX Integration.

Builds the undirected association graph from resolved association text.
Nodes are entity ids (every entity, connected or not); edges are the
unordered pairs linked by a resolvable association name.
"""

from collections.abc import Iterable

import networkx as nx

from campaign_graph.config import CollisionPolicy, get_settings
from campaign_graph.graph.name_index import NameIndex
from campaign_graph.graph.schemas import AssociationEdge, Entity
from campaign_graph.utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionGraph:
    """
    Symmetric adjacency and per-entity connection counts.

    Wraps an undirected ``networkx.Graph``, so each unordered pair is
    stored once and ``b in adjacency[a]`` implies ``a in adjacency[b]``.

    Usage:
        graph = build_graph(entities)
        graph.connection_count["loc-1"]
    """

    def __init__(self, graph: nx.Graph | None = None) -> None:
        self._graph: nx.Graph = graph if graph is not None else nx.Graph()

    @property
    def graph(self) -> nx.Graph:
        """Get the underlying NetworkX graph."""
        return self._graph

    def add_entity(self, entity_id: str) -> None:
        self._graph.add_node(entity_id)

    def add_association(self, a: str, b: str) -> bool:
        """
        Add the edge ``{a, b}``.

        Returns:
            True if the edge is new; False for self-edges and duplicates
        """
        if a == b or self._graph.has_edge(a, b):
            return False
        self._graph.add_edge(a, b)
        return True

    @property
    def adjacency(self) -> dict[str, set[str]]:
        return {node: set(self._graph.adj[node]) for node in self._graph.nodes}

    @property
    def connection_count(self) -> dict[str, int]:
        return {node: degree for node, degree in self._graph.degree}

    @property
    def edges(self) -> list[AssociationEdge]:
        """Every edge once, sorted by canonical key."""
        edges = [AssociationEdge.between(a, b) for a, b in self._graph.edges]
        return sorted(edges, key=lambda edge: edge.key)

    @property
    def edge_keys(self) -> list[tuple[str, str]]:
        return [edge.key for edge in self.edges]

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def neighbors(self, entity_id: str) -> set[str]:
        if entity_id not in self._graph:
            return set()
        return set(self._graph.adj[entity_id])

    def degree(self, entity_id: str) -> int:
        if entity_id not in self._graph:
            return 0
        return self._graph.degree[entity_id]

    def has_edge(self, a: str, b: str) -> bool:
        return self._graph.has_edge(a, b)

    def subgraph(self, entity_ids: Iterable[str]) -> "ConnectionGraph":
        """Induced subgraph on ``entity_ids`` (an independent copy)."""
        keep = [node for node in entity_ids if node in self._graph]
        return ConnectionGraph(self._graph.subgraph(keep).copy())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._graph


def build_graph(
    entities: list[Entity],
    index: NameIndex | None = None,
    association_field: str | None = None,
    policy: CollisionPolicy | None = None,
) -> ConnectionGraph:
    """
    Build the association graph from an entity snapshot.

    Unresolved names and self-references are skipped. Runs in
    O(E * A) for E entities with A associations each.

    Args:
        entities: Resolved entity snapshot
        index: Prebuilt name index (built from ``entities`` if omitted)
        association_field: Attribute holding association text
        policy: Collision policy used when building the index

    Returns:
        ConnectionGraph over every entity id
    """
    field = association_field or get_settings().association_field
    index = index or NameIndex(entities, policy=policy)
    graph = ConnectionGraph()

    unresolved = 0
    for entity in entities:
        graph.add_entity(entity.id)

    for entity in entities:
        for name in entity.associations(field):
            target_id = index.resolve(name)
            if target_id is None:
                unresolved += 1
                continue
            graph.add_association(entity.id, target_id)

    logger.debug(
        f"Built graph: {graph.node_count} nodes, {graph.edge_count} edges, "
        f"{unresolved} unresolved names"
    )
    return graph
