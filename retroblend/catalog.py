"""
Catalog Metadata Store
======================

Read-only lookup of Metadata records by item id. Built once from raw catalog
records (typically a JSON file), after which every record is frozen and the
store is safe to share between blend requests and worker threads.
"""

import json
import logging
import dataclasses
from pathlib import Path
from typing import List, Dict, Optional, Iterable, Iterator, Tuple, Any, Union

from .errors import CatalogError, UnknownItemError
from .features import Metadata, MetadataBuilder
from .config import DEFAULT_CATALOG_PATH

logger = logging.getLogger(__name__)

# Pairing cache: keep strong matches only
PAIRING_THRESHOLD = 0.7
PAIRINGS_PER_ITEM = 10


class CatalogStore:
    """
    Holds one Metadata record per catalog item.

    Usage:
        store = CatalogStore.from_json("catalog.json")
        meta = store.require("86")
    """

    def __init__(self, records: Iterable[Metadata]):
        """
        Args:
            records: Fully built metadata; ids must be unique

        Raises:
            CatalogError: on duplicate ids
        """
        self._records: Dict[str, Metadata] = {}
        for meta in records:
            if meta.id in self._records:
                raise CatalogError(f"Duplicate catalog id {meta.id!r}")
            self._records[meta.id] = meta

    @classmethod
    def from_records(
        cls,
        raw_records: Iterable[Dict[str, Any]],
        builder: Optional[MetadataBuilder] = None,
        compute_pairings: bool = True,
    ) -> "CatalogStore":
        """
        Build a store from raw catalog dicts.

        Args:
            raw_records: One dict per game
            builder: Metadata builder (creates default if None)
            compute_pairings: Fill each record's common_pairings cache

        Returns:
            CatalogStore instance
        """
        builder = builder or MetadataBuilder()
        records = [builder.build_from_record(record) for record in raw_records]

        if compute_pairings:
            pairings = compute_common_pairings(records)
            records = [
                dataclasses.replace(meta, common_pairings=pairings.get(meta.id, {}))
                for meta in records
            ]

        logger.debug("Built catalog with %d items", len(records))
        return cls(records)

    @classmethod
    def from_json(cls, path: Union[str, Path], **kwargs) -> "CatalogStore":
        """
        Load a catalog file: either a JSON list of records or an object with
        a ``games`` list.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CatalogError(f"Catalog file not found: {path}")
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog file {path} is not valid JSON: {e}")

        if isinstance(data, dict):
            data = data.get("games")
        if not isinstance(data, list):
            raise CatalogError(f"Catalog file {path} must contain a list of games")

        logger.info("Loading %d catalog records from %s", len(data), path)
        return cls.from_records(data, **kwargs)

    @classmethod
    def default(cls) -> "CatalogStore":
        """Load the bundled catalog (or the file named by RETROBLEND_CATALOG)."""
        return cls.from_json(DEFAULT_CATALOG_PATH)

    def get(self, item_id: str) -> Optional[Metadata]:
        return self._records.get(str(item_id))

    def require(self, item_id: str) -> Metadata:
        """
        Look up an item that must exist.

        Raises:
            UnknownItemError: if the id has no record
        """
        meta = self._records.get(str(item_id))
        if meta is None:
            raise UnknownItemError(str(item_id))
        return meta

    def resolve(self, item_ids: Iterable[str]) -> List[Metadata]:
        """Look up several items, keeping the requested order."""
        return [self.require(item_id) for item_id in item_ids]

    def ids(self) -> List[str]:
        return list(self._records)

    def top_pairings(self, item_id: str, limit: int = PAIRINGS_PER_ITEM) -> List[Tuple[str, float]]:
        """Cached strongest pairings for an item, best first."""
        meta = self.require(item_id)
        ranked = sorted(meta.common_pairings.items(), key=lambda x: x[1], reverse=True)
        return ranked[:limit]

    def __contains__(self, item_id: object) -> bool:
        return str(item_id) in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Metadata]:
        return iter(self._records.values())


def compute_common_pairings(
    records: List[Metadata],
    threshold: float = PAIRING_THRESHOLD,
    limit: int = PAIRINGS_PER_ITEM,
) -> Dict[str, Dict[str, float]]:
    """
    Precompute strong feature-vector pairings for every record.

    Args:
        records: All catalog metadata
        threshold: Minimum similarity to keep a pairing
        limit: Pairings kept per item

    Returns:
        Mapping of item id -> {other id: similarity}
    """
    all_pairings: Dict[str, Dict[str, float]] = {}

    for meta in records:
        pairings = []
        for other in records:
            if other.id == meta.id:
                continue
            compatibility = meta.feature_vector.similarity(other.feature_vector)
            if compatibility > threshold:
                pairings.append((other.id, compatibility))

        pairings.sort(key=lambda x: x[1], reverse=True)
        all_pairings[meta.id] = dict(pairings[:limit])

    return all_pairings
