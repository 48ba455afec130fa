"""
Blend Path Finder
=================

Orders the selected items so that consecutive items are as compatible as
possible: a maximum-weight Hamiltonian path over the CompatibilityGraph.

Search policy:
- N <= exhaustive_threshold: every permutation is scored (8! = 40320 at most)
- N >  exhaustive_threshold: greedy nearest-neighbour from every start item,
  each distinct walk refined by 2-opt segment reversal, keeping the best result

Determinism:
- A path and its reverse have the same weight; paths are always reported in
  the orientation whose id sequence is lexicographically smaller
- Totals within tie_tolerance are ties, broken by the lexicographically
  smallest id sequence (so the smallest first id wins)
"""

import itertools
import logging
from typing import List, Dict, Tuple, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np

from .errors import InsufficientSelectionError
from .graph import CompatibilityGraph
from .analysis import Synergy, Conflict
from .config import PathSearchConfig

logger = logging.getLogger(__name__)

STRATEGY_EXHAUSTIVE = "exhaustive"
STRATEGY_GREEDY_TWO_OPT = "greedy_two_opt"
STRATEGY_INPUT_ORDER = "input_order"


@dataclass
class BlendPath:
    """An ordering of the selected items and what it picks up along the way."""
    item_ids: List[str]
    total_compatibility: float
    synergies: List[Synergy] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    strategy: str = STRATEGY_EXHAUSTIVE

    def to_dict(self) -> Dict:
        return {
            "items": list(self.item_ids),
            "total_compatibility": round(self.total_compatibility, 4),
            "strategy": self.strategy,
            "synergies": [s.to_dict() for s in self.synergies],
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


class BlendPathFinder:
    """
    Finds the most compatible ordering of a selection.

    Usage:
        finder = BlendPathFinder()
        path = finder.find_path(graph)
    """

    def __init__(self, config: Optional[PathSearchConfig] = None):
        # Env overrides are read when the finder is built
        self.config = config if config is not None else PathSearchConfig()

    def find_path(self, graph: CompatibilityGraph) -> BlendPath:
        """
        Search for the maximum-weight ordering.

        Args:
            graph: Compatibility graph over the selection

        Returns:
            BlendPath visiting every item exactly once

        Raises:
            InsufficientSelectionError: if the graph has fewer than 2 items
        """
        if len(graph) < 2:
            raise InsufficientSelectionError(len(graph))

        ids = sorted(graph.item_ids)
        weights = self._weights(graph, ids)

        if len(ids) <= self.config.exhaustive_threshold:
            order = self._exhaustive_search(weights)
            strategy = STRATEGY_EXHAUSTIVE
        else:
            order = self._heuristic_search(weights)
            strategy = STRATEGY_GREEDY_TWO_OPT

        path = self._make_path(graph, [ids[i] for i in order], strategy)
        logger.debug(
            "Blend path (%s) over %d items: total %.4f",
            strategy, len(ids), path.total_compatibility,
        )
        return path

    def input_order_path(self, graph: CompatibilityGraph) -> BlendPath:
        """Walk the selection in the order it was given, without searching."""
        if len(graph) < 2:
            raise InsufficientSelectionError(len(graph))
        return self._make_path(graph, graph.item_ids, STRATEGY_INPUT_ORDER)

    # ------------------------------------------------------------------
    # Search strategies (operate on indices into the sorted id list)
    # ------------------------------------------------------------------
    def _exhaustive_search(self, weights: List[List[float]]) -> List[int]:
        n = len(weights)
        best_order: Optional[Tuple[int, ...]] = None
        best_total = 0.0

        # Permutations come in lexicographic order, and skipping those that
        # end on a smaller index than they start keeps the canonical orientation
        for order in itertools.permutations(range(n)):
            if order[0] > order[-1]:
                continue
            total = self._path_weight(order, weights)
            if self._is_better(total, order, best_total, best_order):
                best_total, best_order = total, order

        return list(best_order)

    def _heuristic_search(self, weights: List[List[float]]) -> List[int]:
        n = len(weights)
        matrix = np.asarray(weights, dtype=float)
        best_order: Optional[Tuple[int, ...]] = None
        best_total = 0.0
        seeds = set()

        for start in range(n):
            seed = self._canonical(self._greedy_from(start, weights))
            # Walks from different starts often coincide; refine each once
            if seed in seeds:
                continue
            seeds.add(seed)

            order = self._canonical(self._two_opt(list(seed), matrix))
            total = self._path_weight(order, weights)
            if self._is_better(total, order, best_total, best_order):
                best_total, best_order = total, order

        return list(best_order)

    @staticmethod
    def _greedy_from(start: int, weights: List[List[float]]) -> List[int]:
        """Nearest-neighbour walk; ties go to the smaller index."""
        n = len(weights)
        order = [start]
        remaining = set(range(n)) - {start}

        while remaining:
            current = order[-1]
            nxt = max(sorted(remaining), key=lambda j: weights[current][j])
            order.append(nxt)
            remaining.remove(nxt)

        return order

    def _two_opt(self, order: List[int], matrix: np.ndarray) -> List[int]:
        """
        Reverse segments while doing so strictly raises the path weight.

        Stops at the first pass without an improving move, or after
        two_opt_max_iterations improving moves.
        """
        order = list(order)
        improvements = 0

        while improvements < self.config.two_opt_max_iterations:
            move = self._find_improving_move(order, matrix)
            if move is None:
                break
            i, j = move
            order[i:j + 1] = order[i:j + 1][::-1]
            improvements += 1

        if improvements and improvements >= self.config.two_opt_max_iterations:
            logger.debug("2-opt stopped at iteration cap (%d)", improvements)
        return order

    def _find_improving_move(self, order: List[int], matrix: np.ndarray) -> Optional[Tuple[int, int]]:
        """
        First (i, j) in row-major order whose reversal of order[i..j] gains weight.

        Reversing a segment only moves its two boundary edges:
            gain(i, j) = w[i-1, j] - w[i-1, i]    (if i > 0)
                       + w[i, j+1] - w[j, j+1]    (if j < n-1)
        where w is the weight matrix permuted into path order.
        """
        n = len(order)
        w = matrix[np.ix_(order, order)]
        links = np.diagonal(w, 1)

        gains = np.zeros((n, n))
        gains[1:, :] += w[:-1, :] - links[:, None]
        gains[:, :-1] += w[:, 1:] - links[None, :]

        candidates = np.triu(np.ones((n, n), dtype=bool), k=1)
        # Reversing the whole path changes nothing
        candidates[0, n - 1] = False

        moves = np.argwhere(candidates & (gains > self.config.tie_tolerance))
        if len(moves) == 0:
            return None
        i, j = moves[0]
        return int(i), int(j)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _weights(graph: CompatibilityGraph, ids: List[str]) -> List[List[float]]:
        n = len(ids)
        weights = [[0.0] * n for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                weights[i][j] = weights[j][i] = graph.weight(ids[i], ids[j])
        return weights

    @staticmethod
    def _path_weight(order: Sequence[int], weights: List[List[float]]) -> float:
        return sum(weights[a][b] for a, b in zip(order, order[1:]))

    @staticmethod
    def _canonical(order: Sequence[int]) -> Tuple[int, ...]:
        # Indices follow sorted ids, so index order is id order
        return min(tuple(order), tuple(reversed(order)))

    def _is_better(
        self,
        total: float,
        order: Tuple[int, ...],
        best_total: float,
        best_order: Optional[Tuple[int, ...]],
    ) -> bool:
        if best_order is None:
            return True
        tolerance = self.config.tie_tolerance
        if total > best_total + tolerance:
            return True
        return total >= best_total - tolerance and order < best_order

    @staticmethod
    def _make_path(graph: CompatibilityGraph, item_ids: List[str], strategy: str) -> BlendPath:
        """Sum consecutive edges and collect their notes, dropping exact repeats."""
        total = 0.0
        synergies: Dict[Synergy, None] = {}
        conflicts: Dict[Conflict, None] = {}

        for a, b in zip(item_ids, item_ids[1:]):
            edge = graph.edge(a, b)
            total += edge.weight
            synergies.update(dict.fromkeys(edge.synergies))
            conflicts.update(dict.fromkeys(edge.conflicts))

        return BlendPath(
            item_ids=list(item_ids),
            total_compatibility=total,
            synergies=list(synergies),
            conflicts=list(conflicts),
            strategy=strategy,
        )
