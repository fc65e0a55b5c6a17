"""
Engine Configuration.

Pydantic settings for type-safe environment configuration.
Layout constants and the name-collision policy can be overridden with
CAMPAIGN_GRAPH_* environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CollisionPolicy(str, Enum):
    """What the name index does when two entities share a name."""

    FIRST_WINS = "first_wins"
    LAST_WINS = "last_wins"
    REJECT = "reject"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CAMPAIGN_GRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Associations ===
    association_field: str = Field(
        default="associatedEntities",
        min_length=1,
        description="Attribute holding the comma-separated association names",
    )
    name_collision_policy: CollisionPolicy = Field(
        default=CollisionPolicy.FIRST_WINS,
        description="Which entity keeps a case-insensitively duplicated name",
    )

    # === Cluster Layout ===
    cluster_radius: float = Field(
        default=400.0,
        gt=0,
        description="Distance of each type cluster center from the origin",
    )
    spiral_ring_size: int = Field(
        default=6,
        ge=1,
        description="Entities per spiral ring inside a cluster",
    )
    spiral_ring_spacing: float = Field(
        default=120.0,
        gt=0,
        description="Radial distance between consecutive spiral rings",
    )
    spiral_ring_twist: float = Field(
        default=0.3,
        description="Angular offset (radians) added per ring",
    )
    jitter_amplitude: float = Field(
        default=20.0,
        ge=0,
        description="Maximum deterministic per-entity offset",
    )

    # === Relaxation ===
    relaxation_iterations: int = Field(
        default=3,
        ge=0,
        description="Number of midpoint-pulling passes",
    )
    relaxation_strength: float = Field(
        default=0.05,
        ge=0,
        le=1,
        description="Fraction of the way each node moves toward a neighbor midpoint",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
