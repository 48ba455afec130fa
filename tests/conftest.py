"""Shared pytest fixtures for unit tests."""

from typing import Any, Callable, Dict, List, Tuple
from pathlib import Path
import sys

import pytest

# Ensure project root is importable when tests run from repository root.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from retroblend.catalog import CatalogStore
from retroblend.features import FeatureVector, Metadata, era_category
from retroblend.graph import CompatibilityEdge, CompatibilityGraph

BUNDLED_CATALOG = PROJECT_ROOT / "retroblend" / "data" / "catalog.json"


@pytest.fixture
def vector_factory() -> Callable[..., FeatureVector]:
    """Return a factory that builds a FeatureVector with optional overrides."""

    def _factory(**overrides: Any) -> FeatureVector:
        data: Dict[str, Any] = {
            "genre_weights": (1.0, 0.0, 0.0),
            "mechanic_flags": (True, False, True),
            "platform_generation": 2,
            "complexity": 0.5,
            "action_strategy_balance": 0.0,
            "single_multi_balance": 0.0,
        }
        data.update(overrides)
        return FeatureVector(**data)

    return _factory


@pytest.fixture
def metadata_factory(vector_factory) -> Callable[..., Metadata]:
    """Return a factory that builds Metadata; era_category follows the year."""

    def _factory(item_id: str = "1", **overrides: Any) -> Metadata:
        year = overrides.pop("year", 1985)
        vector = overrides.pop("feature_vector", None) or vector_factory()
        data: Dict[str, Any] = {
            "id": item_id,
            "name": f"Game {item_id}",
            "year": year,
            "era_category": era_category(year),
            "feature_vector": vector,
            "primary_genre": "Action",
            "genre_affinities": {"Action": 1.0},
        }
        data.update(overrides)
        return Metadata(**data)

    return _factory


@pytest.fixture
def record_factory() -> Callable[..., Dict[str, Any]]:
    """Return a factory for raw catalog records."""

    def _factory(item_id: str = "1", **overrides: Any) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": item_id,
            "name": f"Game {item_id}",
            "year": 1986,
            "genre": "Action",
            "deck": "A quick arcade action game.",
            "platforms": ["Nintendo Entertainment System"],
            "developer": "Test Studio",
        }
        record.update(overrides)
        return record

    return _factory


@pytest.fixture
def bundled_store() -> CatalogStore:
    """The sample catalog shipped with the package."""
    return CatalogStore.from_json(BUNDLED_CATALOG)


@pytest.fixture
def weighted_graph_factory(metadata_factory) -> Callable[..., CompatibilityGraph]:
    """
    Build a CompatibilityGraph with hand-picked edge weights.

    ``weights`` maps (a, b) pairs to a weight; missing pairs use ``default``.
    """

    def _factory(
        ids: List[str],
        weights: Dict[Tuple[str, str], float] = None,
        default: float = 0.5,
    ) -> CompatibilityGraph:
        weights = weights or {}
        items = [metadata_factory(item_id) for item_id in ids]
        edges = {}
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                weight = weights.get((a, b), weights.get((b, a), default))
                edge = CompatibilityEdge(item_a=a, item_b=b, weight=weight)
                edges[edge.key] = edge
        return CompatibilityGraph(items, edges)

    return _factory
