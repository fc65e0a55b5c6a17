"""
Campaign Graph - Entity Association Engine.

This package contains the core functionality for:
- Inferring entity mentions from free-form campaign notes
- Keeping associations symmetric and de-duplicated
- Building and filtering the association graph
- Deterministic clustered layout for visualization
"""

from campaign_graph.config import CollisionPolicy, Settings, get_settings
from campaign_graph.graph import (
    AssociationResolver,
    CampaignGraphEngine,
    ClusterLayout,
    Entity,
    EntityTypeDef,
    NameIndex,
    ViewFilter,
    build_graph,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "CollisionPolicy",
    # Engine
    "CampaignGraphEngine",
    "AssociationResolver",
    "NameIndex",
    "build_graph",
    "ViewFilter",
    "ClusterLayout",
    # Schemas
    "Entity",
    "EntityTypeDef",
]
