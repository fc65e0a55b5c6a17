"""
Association Graph Layer.

Name index, mention inference, symmetric resolution, connection graph,
type filter and cluster layout.
"""

from campaign_graph.graph.association import AssociationInferer, AssociationResolver
from campaign_graph.graph.cluster_layout import ClusterLayout
from campaign_graph.graph.connection_graph import ConnectionGraph, build_graph
from campaign_graph.graph.engine import CampaignGraphEngine, GraphView
from campaign_graph.graph.extraction import normalize_extracted_entities
from campaign_graph.graph.name_index import NameCollisionError, NameIndex
from campaign_graph.graph.registry import (
    DEFAULT_ENTITY_TYPES,
    create_empty_entity,
    get_empty_fields,
    new_entity_type,
    type_order,
)
from campaign_graph.graph.schemas import (
    AssociationEdge,
    AttributeDef,
    EmptyField,
    Entity,
    EntityTypeDef,
    LayoutPosition,
    TypeCluster,
)
from campaign_graph.graph.view_filter import FilteredView, ViewFilter

__all__ = [
    # Lookup
    "NameIndex",
    "NameCollisionError",
    # Associations
    "AssociationInferer",
    "AssociationResolver",
    # Graph
    "ConnectionGraph",
    "build_graph",
    "ViewFilter",
    "FilteredView",
    "ClusterLayout",
    # Pipeline
    "CampaignGraphEngine",
    "GraphView",
    "normalize_extracted_entities",
    # Registry
    "DEFAULT_ENTITY_TYPES",
    "create_empty_entity",
    "get_empty_fields",
    "new_entity_type",
    "type_order",
    # Schemas
    "Entity",
    "EntityTypeDef",
    "AttributeDef",
    "AssociationEdge",
    "EmptyField",
    "LayoutPosition",
    "TypeCluster",
]
