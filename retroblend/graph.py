"""
Compatibility Graph
===================

Complete weighted graph over the items selected for one blend request.

Each unordered pair of items gets exactly one edge carrying:
- weight: SimilarityEngine score in [0, 1]
- synergies / conflicts: qualitative notes from SynergyConflictAnalyzer

The graph is rebuilt per request from the selected items only, so its cost
is O(N²) in the selection size rather than the catalog size.
"""

import logging
from typing import List, Dict, Tuple, Optional, Iterable, FrozenSet
from dataclasses import dataclass

import numpy as np

from .errors import InsufficientSelectionError
from .features import Metadata
from .catalog import CatalogStore
from .similarity import SimilarityEngine
from .analysis import SynergyConflictAnalyzer, Synergy, Conflict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompatibilityEdge:
    """Weighted, annotated edge between two selected items."""
    item_a: str
    item_b: str
    weight: float
    synergies: Tuple[Synergy, ...] = ()
    conflicts: Tuple[Conflict, ...] = ()

    @property
    def key(self) -> FrozenSet[str]:
        return frozenset((self.item_a, self.item_b))

    def other(self, item_id: str) -> str:
        return self.item_b if item_id == self.item_a else self.item_a

    def to_dict(self) -> Dict:
        return {
            "items": [self.item_a, self.item_b],
            "weight": round(self.weight, 4),
            "synergies": [s.to_dict() for s in self.synergies],
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


class CompatibilityGraph:
    """
    Complete graph over a selection of catalog items.

    Usage:
        graph = CompatibilityGraph.build(["1", "2", "3"], store)
        graph.weight("1", "3")
    """

    def __init__(self, items: List[Metadata], edges: Dict[FrozenSet[str], CompatibilityEdge]):
        self._items = items
        self._index = {meta.id: i for i, meta in enumerate(items)}
        self._edges = edges

    @classmethod
    def build(
        cls,
        item_ids: Iterable[str],
        store: CatalogStore,
        engine: Optional[SimilarityEngine] = None,
        analyzer: Optional[SynergyConflictAnalyzer] = None,
    ) -> "CompatibilityGraph":
        """
        Build the graph for a selection.

        Args:
            item_ids: Selected item ids (duplicates are collapsed)
            store: Catalog metadata store
            engine: Similarity engine (creates default if None)
            analyzer: Synergy/conflict analyzer (creates default if None)

        Returns:
            CompatibilityGraph with N*(N-1)/2 edges

        Raises:
            InsufficientSelectionError: fewer than 2 distinct ids
            UnknownItemError: an id is not in the store
        """
        engine = engine or SimilarityEngine()
        analyzer = analyzer or SynergyConflictAnalyzer()

        requested = [str(item_id) for item_id in item_ids]
        unique_ids = list(dict.fromkeys(requested))
        if len(unique_ids) != len(requested):
            logger.warning(
                "Collapsed duplicate ids in selection: %d requested, %d distinct",
                len(requested), len(unique_ids),
            )

        if len(unique_ids) < 2:
            raise InsufficientSelectionError(len(unique_ids))

        items = store.resolve(unique_ids)

        edges: Dict[FrozenSet[str], CompatibilityEdge] = {}
        for i in range(len(items)):
            for j in range(i + 1, len(items)):
                m1, m2 = items[i], items[j]
                synergies, conflicts = analyzer.analyze(m1, m2)
                edge = CompatibilityEdge(
                    item_a=m1.id,
                    item_b=m2.id,
                    weight=engine.compute_similarity(m1, m2),
                    synergies=tuple(synergies),
                    conflicts=tuple(conflicts),
                )
                edges[edge.key] = edge

        logger.debug("Built compatibility graph: %d items, %d edges", len(items), len(edges))
        return cls(items, edges)

    @property
    def item_ids(self) -> List[str]:
        return [meta.id for meta in self._items]

    @property
    def items(self) -> List[Metadata]:
        return list(self._items)

    def edge(self, a: str, b: str) -> CompatibilityEdge:
        """
        Raises:
            KeyError: if either id is not in the graph, or a == b
        """
        return self._edges[frozenset((a, b))]

    def weight(self, a: str, b: str) -> float:
        return self.edge(a, b).weight

    def edges(self) -> List[CompatibilityEdge]:
        return list(self._edges.values())

    def weight_matrix(self) -> np.ndarray:
        """
        Symmetric N×N matrix of edge weights in item order; zero diagonal.
        """
        n = len(self._items)
        matrix = np.zeros((n, n))
        for edge in self._edges.values():
            i, j = self._index[edge.item_a], self._index[edge.item_b]
            matrix[i, j] = matrix[j, i] = edge.weight
        return matrix

    def find_compatible(self, item_id: str, limit: int = 3) -> List[Tuple[str, float]]:
        """
        Best partners for one item within this selection.

        Returns:
            (item id, weight) pairs, best first; ties keep selection order
        """
        if item_id not in self._index:
            raise KeyError(item_id)

        partners = [
            (other.id, self.weight(item_id, other.id))
            for other in self._items
            if other.id != item_id
        ]
        partners.sort(key=lambda x: x[1], reverse=True)
        return partners[:limit]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def __len__(self) -> int:
        return len(self._items)
