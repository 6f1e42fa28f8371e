"""Taste profiles and recipe feature vectors.

A recipe is described by a small rule-based feature vector over fixed
preference axes (cuisine family, main protein, flavour, cooking method,
complexity and time). A user's taste profile is an exponential moving
average of the vectors of recipes they interacted with; positive signals
pull the profile toward a recipe and negative signals push it away.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import NEUTRAL_SCORE
from .logging_utils import get_logger
from .models import LibraryRecipe

logger = get_logger(__name__)

EMBEDDING_DIMENSIONS = (
    "cuisine_italian",
    "cuisine_asian",
    "cuisine_mexican",
    "cuisine_indian",
    "cuisine_american",
    "cuisine_mediterranean",
    "flavor_spicy",
    "flavor_savory",
    "flavor_sweet",
    "flavor_sour",
    "protein_chicken",
    "protein_beef",
    "protein_fish",
    "protein_vegetarian",
    "protein_pork",
    "method_grilled",
    "method_baked",
    "method_fried",
    "method_steamed",
    "method_raw",
    "complexity_simple",
    "complexity_moderate",
    "complexity_complex",
    "time_quick",
    "time_medium",
    "time_long",
)

EMBEDDING_SIZE = len(EMBEDDING_DIMENSIONS)
_INDEX = {dim: i for i, dim in enumerate(EMBEDDING_DIMENSIONS)}

CUISINE_MAP = {
    "italian": "cuisine_italian",
    "asian": "cuisine_asian",
    "chinese": "cuisine_asian",
    "japanese": "cuisine_asian",
    "thai": "cuisine_asian",
    "korean": "cuisine_asian",
    "vietnamese": "cuisine_asian",
    "mexican": "cuisine_mexican",
    "indian": "cuisine_indian",
    "american": "cuisine_american",
    "mediterranean": "cuisine_mediterranean",
    "greek": "cuisine_mediterranean",
    "middle eastern": "cuisine_mediterranean",
    "middle_eastern": "cuisine_mediterranean",
}

PROTEIN_KEYWORDS = {
    "chicken": "protein_chicken",
    "turkey": "protein_chicken",
    "beef": "protein_beef",
    "steak": "protein_beef",
    "fish": "protein_fish",
    "salmon": "protein_fish",
    "tuna": "protein_fish",
    "shrimp": "protein_fish",
    "pork": "protein_pork",
    "bacon": "protein_pork",
    "tofu": "protein_vegetarian",
    "tempeh": "protein_vegetarian",
    "lentil": "protein_vegetarian",
    "chickpea": "protein_vegetarian",
    "bean": "protein_vegetarian",
}

METHOD_KEYWORDS = {
    "grill": "method_grilled",
    "bake": "method_baked",
    "roast": "method_baked",
    "fry": "method_fried",
    "fried": "method_fried",
    "steam": "method_steamed",
    "raw": "method_raw",
    "salad": "method_raw",
}

SPICY_PATTERN = re.compile(r"chili|chile|jalape|cayenne|sriracha|hot sauce|spicy|gochujang")
SWEET_PATTERN = re.compile(r"sugar|honey|maple|sweet|chocolate|caramel")
SAVORY_PATTERN = re.compile(r"soy sauce|miso|mushroom|parmesan|anchov|fish sauce|worcestershire")
SOUR_PATTERN = re.compile(r"lemon|lime|vinegar|pickle|tamarind")

# EMA step size and direction per interaction type
SIGNAL_WEIGHTS = {
    "cooked": (0.15, 1),
    "repeated": (0.2, 1),
    "thumbs_up": (0.25, 1),
    "thumbs_down": (0.2, -1),
    "skipped": (0.05, -1),
    "edited": (0.08, 1),
}


@dataclass(frozen=True)
class TasteProfile:
    """Snapshot of a user's accumulated taste."""
    embedding: tuple[float, ...]
    interaction_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, "embedding", tuple(float(v) for v in self.embedding))

    @classmethod
    def empty(cls) -> "TasteProfile":
        return cls(embedding=zero_embedding())

    @property
    def is_cold(self) -> bool:
        return not any(self.embedding)


def zero_embedding() -> tuple[float, ...]:
    return (0.0,) * EMBEDDING_SIZE


def normalize_vector(vec: Sequence[float]) -> tuple[float, ...]:
    """Scale a vector to unit length; zero vectors are returned unchanged."""
    magnitude = math.sqrt(math.fsum(v * v for v in vec))
    if magnitude == 0:
        return tuple(vec)
    return tuple(v / magnitude for v in vec)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0 for mismatched or zero vectors."""
    if len(a) != len(b):
        return 0.0
    dot = math.fsum(x * y for x, y in zip(a, b))
    mag_a = math.sqrt(math.fsum(x * x for x in a))
    mag_b = math.sqrt(math.fsum(y * y for y in b))
    denom = mag_a * mag_b
    if denom == 0:
        return 0.0
    return max(-1.0, min(1.0, dot / denom))


def ema_update(current: Sequence[float], signal: Sequence[float], alpha: float = 0.1) -> tuple[float, ...]:
    """Exponential moving average step."""
    if len(current) != len(signal):
        raise ValueError("Embedding dimension mismatch")
    return tuple(c * (1 - alpha) + s * alpha for c, s in zip(current, signal))


def recipe_embedding(recipe: LibraryRecipe) -> tuple[float, ...]:
    """Rule-based feature vector for a recipe, unit-normalized."""
    emb = [0.0] * EMBEDDING_SIZE

    def bump(dim: str, value: float = 1.0):
        i = _INDEX[dim]
        emb[i] = max(emb[i], value)

    cuisine = (recipe.cuisine or "").strip().lower()
    if cuisine in CUISINE_MAP:
        bump(CUISINE_MAP[cuisine])

    ingredient_text = " ".join(recipe.ingredient_names).lower()
    for keyword, dim in PROTEIN_KEYWORDS.items():
        if keyword in ingredient_text:
            bump(dim)

    if SPICY_PATTERN.search(ingredient_text):
        bump("flavor_spicy")
    if SWEET_PATTERN.search(ingredient_text):
        bump("flavor_sweet")
    if SAVORY_PATTERN.search(ingredient_text):
        bump("flavor_savory")
    if SOUR_PATTERN.search(ingredient_text):
        bump("flavor_sour")

    instruction_text = " ".join(recipe.instructions).lower()
    for keyword, dim in METHOD_KEYWORDS.items():
        if keyword in instruction_text:
            bump(dim)

    total = recipe.total_time_minutes
    if total <= 20:
        bump("time_quick")
        bump("complexity_simple", 0.8)
    elif total <= 45:
        bump("time_medium")
        bump("complexity_moderate", 0.8)
    else:
        bump("time_long")
        bump("complexity_complex", 0.8)

    count = len(recipe.ingredients)
    if count <= 5:
        bump("complexity_simple", 0.6)
    elif count >= 12:
        bump("complexity_complex", 0.6)

    return normalize_vector(emb)


def update_taste_profile(
    profile: Optional[TasteProfile],
    recipe: LibraryRecipe,
    signal: str,
) -> TasteProfile:
    """Fold one interaction into a profile and return the new snapshot."""
    if signal not in SIGNAL_WEIGHTS:
        raise ValueError(f"Unknown interaction signal: {signal!r}")
    alpha, sign = SIGNAL_WEIGHTS[signal]

    current = profile if profile is not None else TasteProfile.empty()
    if len(current.embedding) != EMBEDDING_SIZE:
        logger.warning(
            "Discarding taste profile with %d dimensions (expected %d)",
            len(current.embedding), EMBEDDING_SIZE,
        )
        current = TasteProfile.empty()

    delta = tuple(v * sign for v in recipe_embedding(recipe))
    updated = normalize_vector(ema_update(current.embedding, delta, alpha))
    return TasteProfile(embedding=updated, interaction_count=current.interaction_count + 1)


def compute_taste_similarity(recipe: LibraryRecipe, taste_profile: Optional[TasteProfile]) -> float:
    """Similarity between a recipe and the user's taste, rescaled to [0, 1].

    Returns 0.5 until the user has a usable profile.
    """
    if taste_profile is None or taste_profile.is_cold:
        return NEUTRAL_SCORE
    if len(taste_profile.embedding) != EMBEDDING_SIZE:
        logger.warning(
            "Taste profile has %d dimensions (expected %d); treating as cold start",
            len(taste_profile.embedding), EMBEDDING_SIZE,
        )
        return NEUTRAL_SCORE

    cos = cosine_similarity(recipe_embedding(recipe), taste_profile.embedding)
    return max(0.0, min(1.0, (cos + 1) / 2))
