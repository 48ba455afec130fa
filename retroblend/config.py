"""
Configuration and constants for the RetroBlend blending engine.
"""
import os
from dataclasses import dataclass, field
from typing import List, Dict, Tuple

from .errors import ConfigurationError

# =============================================================================
# CATALOG CONFIGURATION
# =============================================================================
DEFAULT_CATALOG_PATH = os.environ.get(
    "RETROBLEND_CATALOG",
    os.path.join(os.path.dirname(__file__), "data", "catalog.json"),
)

# =============================================================================
# FEATURE VECTOR LAYOUT
# =============================================================================
# Slot order is shared by every FeatureVector built from these lists.
STANDARD_GENRES = [
    "Action",
    "Adventure",
    "RPG",
    "Strategy",
    "Puzzle",
    "Platform",
    "Shooter",
    "Fighting",
    "Racing",
    "Sports",
    "Simulation",
    "Horror",
]

STANDARD_MECHANICS = [
    "Combat",
    "Exploration",
    "Puzzle Solving",
    "Platform Jumping",
    "Resource Management",
    "Character Progression",
    "Story Choices",
    "Time Pressure",
    "Collection",
    "Stealth",
    "Multiplayer",
    "Turn-Based",
    "Real-Time",
    "Physics-Based",
    "Procedural Generation",
]

# Catalog spellings that map onto a standard genre
GENRE_ALIASES = {
    "role-playing": "RPG",
    "role playing": "RPG",
    "rpg": "RPG",
    "platformer": "Platform",
    "platform": "Platform",
    "shoot 'em up": "Shooter",
    "shmup": "Shooter",
    "beat 'em up": "Fighting",
    "driving": "Racing",
    "driving/racing": "Racing",
    "sim": "Simulation",
    "survival horror": "Horror",
}

# =============================================================================
# ERA BUCKETS (inclusive year ranges, non-overlapping)
# =============================================================================
ERA_BUCKETS: List[Tuple[str, int, int]] = [
    ("early_80s", 1980, 1983),
    ("mid_80s", 1984, 1986),
    ("late_80s", 1987, 1989),
    ("early_90s", 1990, 1992),
    ("mid_90s", 1993, 1995),
]
UNKNOWN_ERA = "unknown"

ERA_LABELS = {
    "early_80s": "early '80s",
    "mid_80s": "mid '80s",
    "late_80s": "late '80s",
    "early_90s": "early '90s",
    "mid_90s": "mid '90s",
    UNKNOWN_ERA: "an unknown era",
}

# Era similarity for items in different buckets: (max year gap, score)
ERA_YEAR_STEPS: List[Tuple[int, float]] = [
    (2, 0.9),
    (5, 0.6),
    (8, 0.3),
]
ERA_FALLBACK_SIMILARITY = 0.1

# =============================================================================
# FEATURE VECTOR SIMILARITY WEIGHTS (fixed, sum to 1.0)
# =============================================================================
STRUCTURAL_WEIGHTS: Dict[str, float] = {
    "genre": 0.3,
    "mechanic": 0.3,
    "platform_generation": 0.1,
    "complexity": 0.1,
    "action_strategy": 0.1,
    "single_multi": 0.1,
}

SEMANTIC_WEIGHTS: Dict[str, float] = {
    "semantic": 0.6,
    "genre": 0.2,
    "mechanic": 0.2,
}

# Neutral score when one side has no data to compare
NEUTRAL_SIMILARITY = 0.5

MAX_PLATFORM_GENERATION = 5


# =============================================================================
# SIMILARITY ENGINE WEIGHTS (tunable)
# =============================================================================
@dataclass
class SimilarityWeights:
    """Weights for the metadata-level similarity; normalized by their sum."""
    genre: float = 0.3
    mechanic: float = 0.3
    era: float = 0.2
    complexity: float = 0.2

    def __post_init__(self):
        values = self.to_dict()
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ConfigurationError(
                f"Similarity weights must be non-negative: {', '.join(negative)}"
            )
        if self.total() <= 0:
            raise ConfigurationError("Similarity weights must not all be zero")

    @property
    def vector(self) -> float:
        """Share of the score driven by the feature vector."""
        return self.genre + self.mechanic + self.complexity

    def total(self) -> float:
        return self.genre + self.mechanic + self.era + self.complexity

    def to_dict(self) -> Dict[str, float]:
        return {
            "genre": self.genre,
            "mechanic": self.mechanic,
            "era": self.era,
            "complexity": self.complexity,
        }

DEFAULT_SIMILARITY_WEIGHTS = SimilarityWeights()


# =============================================================================
# BLEND PATH SEARCH
# =============================================================================
def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


@dataclass
class PathSearchConfig:
    """Configuration for the blend path search."""
    # Exhaustive permutation search up to this many items (8! = 40320 orderings)
    exhaustive_threshold: int = field(
        default_factory=lambda: _env_int("RETROBLEND_EXHAUSTIVE_THRESHOLD", 8)
    )

    # Cap on improving 2-opt moves per starting node
    two_opt_max_iterations: int = field(
        default_factory=lambda: _env_int("RETROBLEND_TWO_OPT_MAX_ITERATIONS", 1000)
    )

    # Totals closer than this are treated as ties
    tie_tolerance: float = 1e-12

    def __post_init__(self):
        if self.exhaustive_threshold < 2:
            raise ConfigurationError("exhaustive_threshold must be at least 2")
        if self.two_opt_max_iterations < 0:
            raise ConfigurationError("two_opt_max_iterations must be non-negative")


# =============================================================================
# SYNERGY / CONFLICT ANALYSIS
# =============================================================================
@dataclass
class AnalyzerThresholds:
    """Thresholds used when annotating compatibility edges."""
    # Synergy: axes considered "close"
    complexity_match: float = 0.2
    balance_match: float = 0.4
    close_years: int = 2

    # Conflict: axes considered "far apart"
    complexity_conflict: float = 0.5
    action_strategy_conflict: float = 1.0
    single_multi_conflict: float = 1.0
    era_gap_years: int = 10

DEFAULT_ANALYZER_THRESHOLDS = AnalyzerThresholds()

# Mechanics that cannot both dominate one design: (a, b, resolution hint)
CONFLICTING_MECHANICS: List[Tuple[str, str, str]] = [
    (
        "Real-Time",
        "Turn-Based",
        "Offer both modes: real-time play with an optional pause-and-plan tactical layer",
    ),
    (
        "Stealth",
        "Time Pressure",
        "Let players trade speed for stealth with score bonuses rather than hard timers",
    ),
    (
        "Procedural Generation",
        "Story Choices",
        "Anchor authored story beats between procedurally generated segments",
    ),
]

# Genres with clashing player expectations
CONFLICTING_GENRES: List[Tuple[str, str]] = [
    ("Action", "Strategy"),
    ("Puzzle", "Action"),
    ("Racing", "RPG"),
]

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================
NUM_SIMILAR = 5
RECOMMENDATION_GENRE_THRESHOLD = 0.3

# =============================================================================
# METADATA HEURISTICS (keyed by standard genre)
# =============================================================================
GENRE_MECHANICS: Dict[str, List[str]] = {
    "Action": ["Combat", "Real-Time"],
    "Adventure": ["Exploration", "Story Choices", "Puzzle Solving"],
    "RPG": ["Character Progression", "Exploration", "Story Choices"],
    "Strategy": ["Resource Management", "Turn-Based"],
    "Puzzle": ["Puzzle Solving"],
    "Platform": ["Platform Jumping", "Collection"],
    "Shooter": ["Combat", "Real-Time"],
    "Fighting": ["Combat", "Multiplayer", "Real-Time"],
    "Racing": ["Time Pressure", "Real-Time"],
    "Sports": ["Multiplayer", "Real-Time"],
    "Simulation": ["Resource Management", "Physics-Based"],
    "Horror": ["Exploration", "Stealth"],
}

# Secondary genre weight implied by a primary genre
GENRE_SUBGENRES: Dict[str, Dict[str, float]] = {
    "Action": {"Platform": 0.3},
    "RPG": {"Adventure": 0.5},
    "Horror": {"Adventure": 0.4},
}
DECK_GENRE_WEIGHT = 0.3

GENRE_COMPLEXITY: Dict[str, float] = {
    "RPG": 0.8,
    "Strategy": 0.7,
    "Simulation": 0.7,
    "Adventure": 0.6,
    "Fighting": 0.5,
    "Puzzle": 0.5,
    "Horror": 0.5,
    "Action": 0.4,
    "Shooter": 0.4,
    "Platform": 0.3,
    "Sports": 0.3,
    "Racing": 0.3,
}
DEFAULT_COMPLEXITY = 0.5
ERA_COMPLEXITY_BONUS = 0.2

# Negative leans toward action, positive toward strategy
GENRE_ACTION_STRATEGY: Dict[str, float] = {
    "Action": -0.8,
    "Shooter": -0.8,
    "Platform": -0.8,
    "Fighting": -0.6,
    "Racing": -0.6,
    "Sports": -0.4,
    "Horror": -0.2,
    "Adventure": 0.0,
    "RPG": 0.2,
    "Puzzle": 0.4,
    "Simulation": 0.6,
    "Strategy": 0.8,
}

# Negative leans toward single-player, positive toward multiplayer
GENRE_SINGLE_MULTI: Dict[str, float] = {
    "Fighting": 0.8,
    "Sports": 0.8,
    "Racing": 0.4,
    "Action": -0.4,
    "Platform": -0.4,
    "RPG": -0.8,
    "Adventure": -0.8,
    "Strategy": -0.8,
}
DEFAULT_SINGLE_MULTI = -0.5
ARCADE_SINGLE_MULTI = 0.5

# Platform name fragments -> hardware generation, checked in order
PLATFORM_GENERATIONS: List[Tuple[str, int]] = [
    ("Arcade", 1),
    ("Atari 2600", 1),
    ("Super Nintendo", 3),
    ("SNES", 3),
    ("Genesis", 3),
    ("Mega Drive", 3),
    ("TurboGrafx", 3),
    ("Nintendo 64", 5),
    ("PlayStation", 4),
    ("Saturn", 4),
    ("Nintendo Entertainment System", 2),
    ("NES", 2),
    ("Master System", 2),
    ("Game Boy", 2),
]

# Year -> generation when no platform matches: (last year, generation)
YEAR_GENERATIONS: List[Tuple[int, int]] = [
    (1983, 1),
    (1987, 2),
    (1991, 3),
    (1995, 4),
]
DEFAULT_PLATFORM_GENERATION = 3

GENRE_MOODS: Dict[str, List[str]] = {
    "Action": ["Fast-paced", "Intense"],
    "RPG": ["Epic", "Immersive"],
    "Strategy": ["Thoughtful", "Tactical"],
    "Puzzle": ["Relaxing", "Cerebral"],
    "Adventure": ["Exploratory", "Narrative"],
    "Platform": ["Cheerful", "Challenging"],
    "Shooter": ["Adrenaline", "Competitive"],
    "Sports": ["Competitive", "Energetic"],
    "Racing": ["Thrilling", "Speed"],
    "Fighting": ["Competitive", "Intense"],
    "Horror": ["Tense", "Eerie"],
    "Simulation": ["Methodical", "Thoughtful"],
}

# Sprite style by release year: (last year, styles)
ERA_ART_STYLES: List[Tuple[int, List[str]]] = [
    (1985, ["8-bit pixel art", "Limited color palette"]),
    (1991, ["16-bit pixel art", "Vibrant colors"]),
]
LATE_ART_STYLES = ["High-color pixel art", "Detailed sprites"]

GENRE_ART_STYLES: Dict[str, str] = {
    "RPG": "Top-down or isometric view",
    "Platform": "Side-scrolling perspective",
    "Adventure": "Detailed backgrounds",
    "Racing": "Pseudo-3D perspective",
    "Shooter": "Scrolling playfield",
    "Fighting": "Large character sprites",
    "Horror": "Dark, high-contrast shading",
    "Strategy": "Tile-based map view",
}
