"""
Blend Aggregator
================

Collapses the selected items and their winning BlendPath into one
BlendResult:
- Merged genre mix (normalized to sum to 1)
- Union of mechanic tags
- Mean complexity and play-style balances
- Art direction derived per item (era sprite style + genre perspective)
- Name, description and recommended features for the blended game

Pure aggregation: no scoring happens here, and a valid path never fails.
"""

import json
from typing import List, Dict, Set, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np

from .features import Metadata, normalize_tag
from .pathfinder import BlendPath
from .analysis import Synergy, Conflict
from .config import (
    ERA_ART_STYLES,
    LATE_ART_STYLES,
    GENRE_ART_STYLES,
    RECOMMENDATION_GENRE_THRESHOLD,
)


@dataclass
class BlendResult:
    """The synthesized profile of one blend request."""
    name: str
    description: str
    blend_path: BlendPath
    item_ids: List[str]

    genres: Dict[str, float] = field(default_factory=dict)
    mechanics: Set[str] = field(default_factory=set)
    art_styles: List[str] = field(default_factory=list)

    complexity_score: float = 0.0
    action_strategy_balance: float = 0.0
    single_multi_balance: float = 0.0

    synergies: List[Synergy] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    recommended_features: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "description": self.description,
            "items": list(self.item_ids),
            "path": self.blend_path.to_dict(),
            "genres": {g: round(w, 4) for g, w in self.genres.items()},
            "mechanics": sorted(self.mechanics),
            "art_styles": list(self.art_styles),
            "complexity": round(self.complexity_score, 3),
            "action_strategy_balance": round(self.action_strategy_balance, 3),
            "single_multi_balance": round(self.single_multi_balance, 3),
            "synergies": [s.to_dict() for s in self.synergies],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "recommended_features": list(self.recommended_features),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_generation_config(self) -> Dict:
        """Structured settings handed to a downstream game generator."""
        return {
            "title": self.name,
            "genre_weights": dict(self.genres),
            "mechanics": sorted(self.mechanics),
            "art_styles": list(self.art_styles),
            "complexity": self.complexity_score,
            "recommended_features": list(self.recommended_features),
        }


class BlendAggregator:
    """
    Builds a BlendResult from item metadata and a blend path.

    Recommendation rules are keyed on merged genre weights, normalized
    mechanic tags and average complexity, so identical inputs always give
    identical suggestions.
    """

    def __init__(self):
        # Suggested features when a genre makes up a large share of the blend
        self.genre_recommendations = {
            "RPG": [
                "Character customization system",
                "Quest system with branching paths",
            ],
            "Action": [
                "Responsive combat with combo system",
                "Boss battles with pattern learning",
            ],
            "Strategy": [
                "Resource management layer",
                "Strategic planning phases",
            ],
            "Puzzle": [
                "Environmental puzzles integrated into levels",
            ],
        }

        # Suggested features for notable mechanic tags (normalized)
        self.mechanic_recommendations = {
            "exploration": [
                "Hidden areas and secrets to discover",
                "Metroidvania-style ability gating",
            ],
            "character progression": [
                "Skill trees or ability unlocks",
                "Experience point system",
            ],
            "high score": [
                "Score multiplier system",
                "Online leaderboards",
            ],
        }

        self.high_complexity_recommendations = [
            "In-depth tutorial system",
            "Codex or journal for tracking information",
            "Hint system for stuck players",
        ]
        self.low_complexity_recommendations = [
            "Pick-up-and-play design",
            "Visual feedback over text explanations",
            "Intuitive controls",
        ]

    def aggregate(self, items: Sequence[Metadata], path: BlendPath) -> BlendResult:
        """
        Aggregate the selection into a BlendResult.

        Args:
            items: Selected items, in selection order
            path: Winning blend path over the same items

        Returns:
            BlendResult
        """
        items = list(items)
        genres = self.merge_genres(items)
        mechanics = self.merge_mechanics(items)
        complexity = self._mean([m.feature_vector.complexity for m in items])

        return BlendResult(
            name=self.generate_name(items),
            description=self.generate_description(items, genres),
            blend_path=path,
            item_ids=[m.id for m in items],
            genres=genres,
            mechanics=mechanics,
            art_styles=self.determine_art_styles(items),
            complexity_score=complexity,
            action_strategy_balance=self._mean(
                [m.feature_vector.action_strategy_balance for m in items]
            ),
            single_multi_balance=self._mean(
                [m.feature_vector.single_multi_balance for m in items]
            ),
            synergies=list(path.synergies),
            conflicts=list(path.conflicts),
            recommended_features=self.generate_recommendations(genres, mechanics, complexity),
        )

    @staticmethod
    def merge_genres(items: Sequence[Metadata]) -> Dict[str, float]:
        """
        Sum genre affinities across items and normalize to 1.

        Items without affinities count 1.0 toward their primary genre. The
        mapping keeps first-seen genre order and is empty if nothing
        contributes weight.
        """
        totals: Dict[str, float] = {}
        for meta in items:
            if meta.genre_affinities:
                for genre, weight in meta.genre_affinities.items():
                    totals[genre] = totals.get(genre, 0.0) + weight
            elif meta.primary_genre:
                totals[meta.primary_genre] = totals.get(meta.primary_genre, 0.0) + 1.0

        total = sum(totals.values())
        if total <= 0:
            return {}
        return {genre: weight / total for genre, weight in totals.items()}

    @staticmethod
    def merge_mechanics(items: Sequence[Metadata]) -> Set[str]:
        mechanics: Set[str] = set()
        for meta in items:
            mechanics.update(meta.mechanic_tags)
        return mechanics

    @staticmethod
    def determine_art_styles(items: Sequence[Metadata]) -> List[str]:
        """
        Visual direction per item, merged in first-seen order.

        Items with explicit art styles use them; others get the sprite style
        of their era plus a perspective implied by their genre.
        """
        styles: List[str] = []
        for meta in items:
            if meta.art_styles:
                item_styles = list(meta.art_styles)
            else:
                item_styles = _era_art_styles(meta.year)
                perspective = GENRE_ART_STYLES.get(meta.primary_genre or "")
                if perspective:
                    item_styles.append(perspective)

            for style in item_styles:
                if style not in styles:
                    styles.append(style)
        return styles

    @staticmethod
    def generate_name(items: Sequence[Metadata]) -> str:
        if len(items) == 2:
            return f"{items[0].name} × {items[1].name}"
        return f"{items[0].name} meets {items[-1].name} (+{len(items) - 2})"

    @staticmethod
    def generate_description(items: Sequence[Metadata], genres: Dict[str, float]) -> str:
        years = [m.year for m in items]
        dominant = dominant_genre(genres)
        flavor = f"{dominant.lower()} " if dominant else ""
        return (
            f"A {flavor}experience blending {len(items)} classic games from "
            f"{min(years)}-{max(years)}, combining the best elements of each era"
        )

    def generate_recommendations(
        self,
        genres: Dict[str, float],
        mechanics: Set[str],
        complexity: float,
    ) -> List[str]:
        recommendations: List[str] = []

        for genre, features in self.genre_recommendations.items():
            if genres.get(genre, 0.0) > RECOMMENDATION_GENRE_THRESHOLD:
                recommendations.extend(features)

        tags = {normalize_tag(m) for m in mechanics}
        for tag, features in self.mechanic_recommendations.items():
            if tag in tags:
                recommendations.extend(features)

        if complexity > 0.7:
            recommendations.extend(self.high_complexity_recommendations)
        elif complexity < 0.3:
            recommendations.extend(self.low_complexity_recommendations)

        if "real time" in tags and "turn based" in tags:
            recommendations.append("Pause-and-plan tactical mode")

        return recommendations

    @staticmethod
    def _mean(values: List[float]) -> float:
        return float(np.mean(values)) if values else 0.0


def dominant_genre(genres: Dict[str, float]) -> Optional[str]:
    """Highest-weighted genre; the first one seen wins a tie."""
    best: Optional[str] = None
    for genre, weight in genres.items():
        if best is None or weight > genres[best]:
            best = genre
    return best


def _era_art_styles(year: int) -> List[str]:
    for max_year, styles in ERA_ART_STYLES:
        if year <= max_year:
            return list(styles)
    return list(LATE_ART_STYLES)
