"""
Feature Engineering Module
==========================

Builds the numeric and tag descriptors used for blending.

Feature Categories:
    1. Genre weights (one slot per standard genre)
    2. Mechanic flags (one slot per standard mechanic)
    3. Platform generation (1-5)
    4. Complexity and the two bipolar play-style axes
    5. Optional semantic embedding from an external AI analysis
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, FrozenSet, Any, Iterable

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .errors import CatalogError
from .config import (
    STANDARD_GENRES,
    STANDARD_MECHANICS,
    GENRE_ALIASES,
    ERA_BUCKETS,
    UNKNOWN_ERA,
    STRUCTURAL_WEIGHTS,
    SEMANTIC_WEIGHTS,
    NEUTRAL_SIMILARITY,
    MAX_PLATFORM_GENERATION,
    GENRE_MECHANICS,
    GENRE_SUBGENRES,
    DECK_GENRE_WEIGHT,
    GENRE_COMPLEXITY,
    DEFAULT_COMPLEXITY,
    ERA_COMPLEXITY_BONUS,
    GENRE_ACTION_STRATEGY,
    GENRE_SINGLE_MULTI,
    DEFAULT_SINGLE_MULTI,
    ARCADE_SINGLE_MULTI,
    PLATFORM_GENERATIONS,
    YEAR_GENERATIONS,
    DEFAULT_PLATFORM_GENERATION,
    GENRE_MOODS,
)


def era_category(year: int) -> str:
    """Map a release year onto its fixed era bucket."""
    for name, start, end in ERA_BUCKETS:
        if start <= year <= end:
            return name
    return UNKNOWN_ERA


def canonical_genre(genre: Optional[str]) -> Optional[str]:
    """Resolve a catalog genre spelling to the standard genre name.

    Unknown genres are kept as written; the genre vocabulary is open.
    """
    if not genre:
        return None
    cleaned = genre.strip()
    lowered = cleaned.lower()
    if lowered in GENRE_ALIASES:
        return GENRE_ALIASES[lowered]
    for standard in STANDARD_GENRES:
        if standard.lower() == lowered:
            return standard
    return cleaned


def normalize_tag(tag: str) -> str:
    """Loose key for comparing free-form tags ("real_time" == "Real-Time")."""
    return re.sub(r"[\s_\-]+", " ", tag.strip().lower())


def genre_cosine(a: Tuple[float, ...], b: Tuple[float, ...]) -> float:
    """Cosine of two genre weight sequences paired index by index."""
    if not a or not b:
        return NEUTRAL_SIMILARITY

    n = min(len(a), len(b))
    va = np.asarray(a[:n], dtype=float)
    vb = np.asarray(b[:n], dtype=float)

    magnitude_a = float(np.dot(va, va))
    magnitude_b = float(np.dot(vb, vb))
    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0

    return float(np.dot(va, vb)) / (np.sqrt(magnitude_a) * np.sqrt(magnitude_b))


def mechanic_agreement(a: Tuple[bool, ...], b: Tuple[bool, ...]) -> float:
    """Share of equal flag positions, over the shorter sequence."""
    if not a or not b:
        return NEUTRAL_SIMILARITY

    matches = sum(1 for x, y in zip(a, b) if x == y)
    return matches / min(len(a), len(b))


def embedding_cosine(a: Optional[Tuple[float, ...]], b: Optional[Tuple[float, ...]]) -> float:
    """
    Cosine similarity of two embeddings.

    Returns 0.0 for missing, empty, mismatched or zero-magnitude input.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if np.linalg.norm(va) == 0 or np.linalg.norm(vb) == 0:
        return 0.0

    # Reshape for sklearn
    return float(cosine_similarity(va.reshape(1, -1), vb.reshape(1, -1))[0, 0])


@dataclass(frozen=True)
class FeatureVector:
    """Fixed-shape numeric descriptor of one catalog item."""
    # One weight per STANDARD_GENRES slot, each in [0, 1]
    genre_weights: Tuple[float, ...] = ()

    # One flag per STANDARD_MECHANICS slot
    mechanic_flags: Tuple[bool, ...] = ()

    platform_generation: int = 1
    complexity: float = 0.0

    # -1.0 = pure action, 1.0 = pure strategy
    action_strategy_balance: float = 0.0

    # -1.0 = single-player, 1.0 = multiplayer
    single_multi_balance: float = 0.0

    semantic_embedding: Optional[Tuple[float, ...]] = None

    def __post_init__(self):
        # Freeze list input so instances stay immutable value objects
        object.__setattr__(self, "genre_weights", tuple(float(w) for w in self.genre_weights))
        object.__setattr__(self, "mechanic_flags", tuple(bool(f) for f in self.mechanic_flags))
        if self.semantic_embedding is not None:
            object.__setattr__(
                self,
                "semantic_embedding",
                tuple(float(v) for v in self.semantic_embedding),
            )

    def uses_embedding_with(self, other: "FeatureVector") -> bool:
        """True when both sides carry comparable embeddings."""
        return (
            self.semantic_embedding is not None
            and other.semantic_embedding is not None
            and len(self.semantic_embedding) > 0
            and len(self.semantic_embedding) == len(other.semantic_embedding)
        )

    def similarity_components(self, other: "FeatureVector") -> Dict[str, float]:
        """
        Individual sub-scores used by similarity().

        Returns:
            Mapping of component name -> score in [0, 1] (semantic may be
            negative for opposing embeddings)
        """
        components = {
            "genre": genre_cosine(self.genre_weights, other.genre_weights),
            "mechanic": mechanic_agreement(self.mechanic_flags, other.mechanic_flags),
        }

        if self.uses_embedding_with(other):
            components["semantic"] = embedding_cosine(
                self.semantic_embedding, other.semantic_embedding
            )
            return components

        components["platform_generation"] = 1.0 - (
            abs(self.platform_generation - other.platform_generation) / MAX_PLATFORM_GENERATION
        )
        components["complexity"] = 1.0 - abs(self.complexity - other.complexity)
        components["action_strategy"] = 1.0 - (
            abs(self.action_strategy_balance - other.action_strategy_balance) / 2.0
        )
        components["single_multi"] = 1.0 - (
            abs(self.single_multi_balance - other.single_multi_balance) / 2.0
        )
        return components

    def similarity(self, other: "FeatureVector") -> float:
        """
        Compatibility between two vectors in [0, 1].

        Semantic embeddings dominate when both sides have them:
            0.6 * semantic + 0.2 * genre + 0.2 * mechanic
        otherwise six structural sub-scores are combined with fixed weights.
        """
        components = self.similarity_components(other)
        weights = SEMANTIC_WEIGHTS if "semantic" in components else STRUCTURAL_WEIGHTS

        score = math.fsum(weights[name] * components[name] for name in weights)
        return float(np.clip(score, 0.0, 1.0))


@dataclass(frozen=True)
class Metadata:
    """Immutable per-item record owned by the catalog store."""
    id: str
    name: str
    year: int
    era_category: str
    feature_vector: FeatureVector

    mechanic_tags: FrozenSet[str] = frozenset()
    mood_tags: FrozenSet[str] = frozenset()
    genre_affinities: Dict[str, float] = field(default_factory=dict)

    # Precomputed scores against other catalog ids (optional cache)
    common_pairings: Dict[str, float] = field(default_factory=dict)

    primary_genre: Optional[str] = None
    platforms: Tuple[str, ...] = ()
    description: Optional[str] = None
    developer: Optional[str] = None

    # Explicit visual descriptors; derived from era and genre when empty
    art_styles: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "mechanic_tags", frozenset(self.mechanic_tags))
        object.__setattr__(self, "mood_tags", frozenset(self.mood_tags))
        object.__setattr__(self, "platforms", tuple(self.platforms))
        object.__setattr__(self, "art_styles", tuple(self.art_styles))


class MetadataBuilder:
    """
    Turns raw catalog records into Metadata.

    Records are plain dicts (one per game) with at least ``id``, ``name`` and
    ``year``. Optional keys: ``genre``, ``deck``, ``platforms``,
    ``developer``, ``mechanic_tags``, ``mood_tags``, ``genre_affinities``,
    ``semantic_embedding``, ``art_styles`` and ``feature_vector`` (a dict
    overriding any derived vector field).
    """

    def __init__(self):
        self.genre_indices = {g.lower(): i for i, g in enumerate(STANDARD_GENRES)}
        self.mechanic_indices = {normalize_tag(m): i for i, m in enumerate(STANDARD_MECHANICS)}

    def build_from_record(self, record: Dict[str, Any]) -> Metadata:
        """
        Build metadata for a single catalog record.

        Raises:
            CatalogError: if id, name or year is missing or malformed
        """
        item_id = record.get("id", record.get("guid"))
        if item_id is None or str(item_id).strip() == "":
            raise CatalogError("Missing game id")
        item_id = str(item_id)

        name = record.get("name")
        if not name:
            raise CatalogError(f"Missing game name for {item_id!r}")

        try:
            year = int(record["year"])
        except KeyError:
            raise CatalogError(f"Missing game year for {item_id!r}")
        except (TypeError, ValueError):
            raise CatalogError(f"Invalid year {record['year']!r} for {item_id!r}")

        genre = canonical_genre(record.get("genre"))
        deck = record.get("deck") or record.get("description")
        platforms = tuple(record.get("platforms") or ())
        extra_mechanics = list(record.get("mechanic_tags") or [])

        mechanic_flags = self.build_mechanic_flags(genre, year, platforms, extra_mechanics)
        vector = FeatureVector(
            genre_weights=self.build_genre_weights(genre, deck),
            mechanic_flags=mechanic_flags,
            platform_generation=self.determine_platform_generation(platforms, year),
            complexity=self.calculate_complexity(genre, year),
            action_strategy_balance=GENRE_ACTION_STRATEGY.get(genre, 0.0),
            single_multi_balance=self.calculate_single_multi_balance(genre, platforms),
            semantic_embedding=record.get("semantic_embedding"),
        )

        overrides = record.get("feature_vector")
        if overrides:
            vector = self._apply_overrides(vector, overrides, item_id)

        mechanic_tags = [
            STANDARD_MECHANICS[i] for i, flag in enumerate(vector.mechanic_flags)
            if flag and i < len(STANDARD_MECHANICS)
        ]
        mechanic_tags.extend(extra_mechanics)

        genre_affinities = record.get("genre_affinities")
        if genre_affinities is None:
            genre_affinities = {genre: 1.0} if genre else {}

        mood_tags = record.get("mood_tags")
        if mood_tags is None:
            mood_tags = self.determine_mood_tags(genre, year)

        return Metadata(
            id=item_id,
            name=str(name),
            year=year,
            era_category=era_category(year),
            feature_vector=vector,
            mechanic_tags=frozenset(mechanic_tags),
            mood_tags=frozenset(mood_tags),
            genre_affinities={str(g): float(w) for g, w in genre_affinities.items()},
            primary_genre=genre,
            platforms=platforms,
            description=deck,
            developer=record.get("developer"),
            art_styles=tuple(record.get("art_styles") or ()),
        )

    def build_genre_weights(self, genre: Optional[str], deck: Optional[str]) -> List[float]:
        """
        Encode the primary genre plus secondary genres as slot weights.

        The primary genre gets 1.0; implied sub-genres and genres named in
        the description get partial weight. Weights are normalized to sum 1.
        """
        weights = [0.0] * len(STANDARD_GENRES)

        if genre and genre.lower() in self.genre_indices:
            weights[self.genre_indices[genre.lower()]] = 1.0
            for sub, weight in GENRE_SUBGENRES.get(genre, {}).items():
                idx = self.genre_indices[sub.lower()]
                weights[idx] = max(weights[idx], weight)

        if deck:
            deck_words = set(re.findall(r"[a-z\-]+", deck.lower()))
            for standard, idx in self.genre_indices.items():
                if standard in deck_words:
                    weights[idx] = max(weights[idx], DECK_GENRE_WEIGHT)

        total = sum(weights)
        if total > 0:
            weights = [w / total for w in weights]

        return weights

    def build_mechanic_flags(
        self,
        genre: Optional[str],
        year: int,
        platforms: Tuple[str, ...],
        extra_mechanics: Iterable[str] = (),
    ) -> List[bool]:
        """Infer mechanic presence from genre, era and platform."""
        flags = [False] * len(STANDARD_MECHANICS)

        for mechanic in GENRE_MECHANICS.get(genre, []):
            self._set_flag(mechanic, flags)

        for mechanic in extra_mechanics:
            self._set_flag(mechanic, flags)

        # Early arcade-era design
        if year <= 1985:
            self._set_flag("Time Pressure", flags)

        if any("arcade" in p.lower() for p in platforms):
            self._set_flag("Multiplayer", flags)

        return flags

    def _set_flag(self, mechanic: str, flags: List[bool]):
        idx = self.mechanic_indices.get(normalize_tag(mechanic))
        if idx is not None:
            flags[idx] = True

    def determine_platform_generation(self, platforms: Tuple[str, ...], year: int) -> int:
        """Hardware generation from the platform list, else from the year."""
        for platform in platforms:
            for fragment, generation in PLATFORM_GENERATIONS:
                if fragment.lower() in platform.lower():
                    return generation

        for last_year, generation in YEAR_GENERATIONS:
            if 1980 <= year <= last_year:
                return generation

        return DEFAULT_PLATFORM_GENERATION

    def calculate_complexity(self, genre: Optional[str], year: int) -> float:
        """Genre base complexity plus a small bonus for later releases."""
        base = GENRE_COMPLEXITY.get(genre, DEFAULT_COMPLEXITY)
        era_bonus = min(max((year - 1980) / 15.0 * ERA_COMPLEXITY_BONUS, 0.0), ERA_COMPLEXITY_BONUS)
        return min(base + era_bonus, 1.0)

    def calculate_single_multi_balance(
        self,
        genre: Optional[str],
        platforms: Tuple[str, ...],
    ) -> float:
        balance = GENRE_SINGLE_MULTI.get(genre, DEFAULT_SINGLE_MULTI)
        # Arcade cabinets commonly shipped with 2-player modes
        if any("arcade" in p.lower() for p in platforms):
            balance = max(balance, ARCADE_SINGLE_MULTI)
        return balance

    def determine_mood_tags(self, genre: Optional[str], year: int) -> List[str]:
        moods = list(GENRE_MOODS.get(genre, []))
        if year <= 1985:
            moods.extend(["Arcade", "Retro"])
        elif year >= 1992:
            moods.append("16-bit Era")
        return moods

    def _apply_overrides(
        self,
        vector: FeatureVector,
        overrides: Dict[str, Any],
        item_id: str,
    ) -> FeatureVector:
        """Replace derived vector fields with explicit catalog values."""
        values = {
            "genre_weights": vector.genre_weights,
            "mechanic_flags": vector.mechanic_flags,
            "platform_generation": vector.platform_generation,
            "complexity": vector.complexity,
            "action_strategy_balance": vector.action_strategy_balance,
            "single_multi_balance": vector.single_multi_balance,
            "semantic_embedding": vector.semantic_embedding,
        }
        unknown = set(overrides) - set(values)
        if unknown:
            raise CatalogError(
                f"Unknown feature_vector fields for {item_id!r}: {', '.join(sorted(unknown))}"
            )
        values.update(overrides)
        return FeatureVector(**values)
