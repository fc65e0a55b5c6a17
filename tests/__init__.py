"""
Test suite for the campaign association graph engine.

Organized by module:
- test_schemas.py - Entity validation and association text
- test_registry.py - Entity type registry and empty fields
- test_name_index.py - Name lookup and collision policies
- test_association.py - Mention inference and symmetric resolution
- test_connection_graph.py - Graph building
- test_view_filter.py - Type visibility filter
- test_cluster_layout.py - Deterministic layout
- test_extraction.py - Extraction payload normalization
- test_engine.py - End-to-end pipeline
- test_config.py - Settings and logging
"""

# Test fixtures are provided in conftest.py
