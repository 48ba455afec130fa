"""
Blend Engine
============

Orchestrates one blend request:
1. Resolve the selected ids against the catalog
2. Build the compatibility graph over the selection
3. Find the blend path (or walk the selection in order)
4. Aggregate everything into a BlendResult

BackgroundBlender runs the same pipeline on a worker thread and hands the
result to a completion callback, for hosts that must keep an event loop or
render thread responsive.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, Future
from typing import List, Tuple, Dict, Optional, Iterable, Callable, Union
from pathlib import Path

from .catalog import CatalogStore
from .similarity import SimilarityEngine
from .analysis import SynergyConflictAnalyzer
from .graph import CompatibilityGraph
from .pathfinder import BlendPathFinder
from .aggregator import BlendAggregator, BlendResult
from .config import (
    NUM_SIMILAR,
    SimilarityWeights,
    DEFAULT_SIMILARITY_WEIGHTS,
    PathSearchConfig,
    AnalyzerThresholds,
    DEFAULT_ANALYZER_THRESHOLDS,
)

logger = logging.getLogger(__name__)


class BlendEngine:
    """
    Main blending engine.

    Holds no per-request state, so one engine can serve many requests,
    including concurrently from several threads.

    Usage:
        engine = BlendEngine(CatalogStore.default())
        result = engine.blend(["86", "1201"])
        print(result.to_json())
    """

    def __init__(
        self,
        store: CatalogStore,
        weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS,
        path_config: Optional[PathSearchConfig] = None,
        thresholds: AnalyzerThresholds = DEFAULT_ANALYZER_THRESHOLDS,
    ):
        """
        Args:
            store: Catalog metadata store (read-only)
            weights: Similarity weights
            path_config: Blend path search settings
            thresholds: Synergy/conflict thresholds
        """
        self.store = store
        self.similarity = SimilarityEngine(weights)
        self.analyzer = SynergyConflictAnalyzer(thresholds)
        self.path_finder = BlendPathFinder(path_config)
        self.aggregator = BlendAggregator()

    def build_graph(self, item_ids: Iterable[str]) -> CompatibilityGraph:
        return CompatibilityGraph.build(item_ids, self.store, self.similarity, self.analyzer)

    def blend(self, item_ids: Iterable[str], preserve_order: bool = False) -> BlendResult:
        """
        Blend the selected items.

        Args:
            item_ids: Selected catalog ids (at least two distinct)
            preserve_order: Keep the selection order instead of searching
                for the most compatible ordering

        Returns:
            BlendResult

        Raises:
            InsufficientSelectionError: fewer than 2 distinct ids
            UnknownItemError: an id is not in the catalog
        """
        graph = self.build_graph(item_ids)

        if preserve_order:
            path = self.path_finder.input_order_path(graph)
        else:
            path = self.path_finder.find_path(graph)

        result = self.aggregator.aggregate(graph.items, path)
        logger.info(
            "Blended %d items into %r (path %s, compatibility %.3f)",
            len(graph), result.name, " -> ".join(path.item_ids), path.total_compatibility,
        )
        return result

    def find_similar(self, item_id: str, limit: int = NUM_SIMILAR) -> List[Tuple[str, float]]:
        """Rank the whole catalog by similarity to one item."""
        target = self.store.require(item_id)
        return self.similarity.find_similar_games(target, list(self.store), limit)


class BackgroundBlender:
    """
    Runs blends off the caller's thread.

    Results are delivered whole through ``on_complete``; failures go to
    ``on_error``. Callbacks run on the worker thread.

    Usage:
        with BackgroundBlender(engine) as worker:
            worker.submit(["86", "1201"], on_complete=show_result)
    """

    def __init__(self, engine: BlendEngine, max_workers: int = 1):
        self.engine = engine
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="retroblend",
        )

    def submit(
        self,
        item_ids: Iterable[str],
        on_complete: Optional[Callable[[BlendResult], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        preserve_order: bool = False,
    ) -> "Future[BlendResult]":
        """
        Queue a blend request.

        Returns:
            Future resolving to the BlendResult
        """
        ids = list(item_ids)
        future = self._executor.submit(self.engine.blend, ids, preserve_order)

        def _deliver(done: "Future[BlendResult]"):
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                logger.warning("Background blend of %s failed: %s", ids, error)
                if on_error is not None:
                    on_error(error)
                return
            if on_complete is not None:
                on_complete(done.result())

        future.add_done_callback(_deliver)
        return future

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundBlender":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown(wait=True)


def blend_from_catalog(
    item_ids: Iterable[str],
    catalog_path: Optional[Union[str, Path]] = None,
) -> Dict:
    """
    Convenience function for a one-off blend.

    Args:
        item_ids: Selected catalog ids
        catalog_path: Catalog JSON file (bundled catalog if None)

    Returns:
        Dictionary form of the BlendResult
    """
    store = CatalogStore.from_json(catalog_path) if catalog_path else CatalogStore.default()
    engine = BlendEngine(store)
    return engine.blend(item_ids).to_dict()
