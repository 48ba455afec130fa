"""
Similarity Engine
=================

Computes the compatibility of two catalog items as a weighted combination of:
1. Feature-vector similarity (genre, mechanics, complexity, play-style axes,
   or the semantic embedding when both items have one)
2. Era similarity (same era bucket, else a step function of the year gap)

Mathematical Formulation:
-------------------------

    S = (S_vector × (w_genre + w_mechanic + w_complexity) + S_era × w_era)
        / (w_genre + w_mechanic + w_era + w_complexity)

where:
    S_vector = FeatureVector.similarity(v1, v2)
    S_era    = 1.0 if same era, else 0.9 / 0.6 / 0.3 / 0.1 for a year gap
               of <=2 / <=5 / <=8 / more
"""

from typing import List, Dict, Tuple, Sequence
from dataclasses import dataclass, field

import numpy as np

from .features import Metadata
from .config import (
    SimilarityWeights,
    DEFAULT_SIMILARITY_WEIGHTS,
    ERA_YEAR_STEPS,
    ERA_FALLBACK_SIMILARITY,
)


@dataclass
class SimilarityBreakdown:
    """Detailed breakdown of how a pair's similarity was computed."""
    item_a: str
    item_b: str
    final_score: float

    vector_score: float = 0.0
    era_score: float = 0.0
    used_embedding: bool = False

    # Feature-vector sub-scores (genre, mechanic, ...)
    components: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "items": [self.item_a, self.item_b],
            "score": round(self.final_score, 4),
            "vector": round(self.vector_score, 4),
            "era": round(self.era_score, 4),
            "used_embedding": self.used_embedding,
            "components": {k: round(v, 4) for k, v in self.components.items()},
        }


class SimilarityEngine:
    """
    Scores pairs of catalog items.

    Stateless apart from its weights, so one engine can serve concurrent
    blend requests.
    """

    def __init__(self, weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS):
        """
        Args:
            weights: Genre/mechanic/era/complexity weights (normalized by sum)
        """
        self.weights = weights

    def compute_similarity(self, m1: Metadata, m2: Metadata) -> float:
        """
        Compatibility of two items in [0, 1].

        Args:
            m1, m2: Item metadata

        Returns:
            Weighted combination of vector and era similarity
        """
        vector_sim = m1.feature_vector.similarity(m2.feature_vector)
        era_sim = self.era_similarity(m1, m2)
        return self._combine(vector_sim, era_sim)

    def explain_similarity(self, m1: Metadata, m2: Metadata) -> SimilarityBreakdown:
        """Same score as compute_similarity(), with its sub-scores."""
        vector_sim = m1.feature_vector.similarity(m2.feature_vector)
        era_sim = self.era_similarity(m1, m2)

        return SimilarityBreakdown(
            item_a=m1.id,
            item_b=m2.id,
            final_score=self._combine(vector_sim, era_sim),
            vector_score=vector_sim,
            era_score=era_sim,
            used_embedding=m1.feature_vector.uses_embedding_with(m2.feature_vector),
            components=m1.feature_vector.similarity_components(m2.feature_vector),
        )

    def _combine(self, vector_sim: float, era_sim: float) -> float:
        w = self.weights
        score = (vector_sim * w.vector + era_sim * w.era) / w.total()
        return float(np.clip(score, 0.0, 1.0))

    @staticmethod
    def era_similarity(m1: Metadata, m2: Metadata) -> float:
        """
        1.0 for the same era bucket, otherwise decays with the year gap.
        """
        if m1.era_category == m2.era_category:
            return 1.0

        year_diff = abs(m1.year - m2.year)
        for max_gap, score in ERA_YEAR_STEPS:
            if year_diff <= max_gap:
                return score
        return ERA_FALLBACK_SIMILARITY

    def find_similar_games(
        self,
        target: Metadata,
        candidates: Sequence[Metadata],
        limit: int,
    ) -> List[Tuple[str, float]]:
        """
        Rank candidates by similarity to a target.

        Args:
            target: Reference item (never included in the output)
            candidates: Items to rank
            limit: Maximum number of results

        Returns:
            (item id, score) pairs, best first; equal scores keep input order
        """
        if limit <= 0:
            return []

        similarities = [
            (candidate.id, self.compute_similarity(target, candidate))
            for candidate in candidates
            if candidate.id != target.id
        ]

        similarities.sort(key=lambda x: x[1], reverse=True)
        return similarities[:limit]
