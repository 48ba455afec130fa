"""
RetroBlend - Classic Game Blending Engine
=========================================

Blends two or more classic games into one synthesized profile: a genre
mix, shared mechanics, art direction, synergy and conflict notes, and a
compatibility-ordered path through the selection.

Modules:
    - config: Configuration and constants
    - errors: Exception types
    - features: Feature vectors, metadata and the metadata builder
    - catalog: Catalog metadata store
    - similarity: Pairwise similarity engine
    - analysis: Synergy and conflict analysis
    - graph: Compatibility graph over a selection
    - pathfinder: Blend path search
    - aggregator: Blend result aggregation
    - blender: Engine orchestration and background dispatch
    - cli: Command-line interface
"""

__version__ = "1.0.0"
__author__ = "RetroBlend Team"
