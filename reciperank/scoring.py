"""Recipe scoring and composite ranking."""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import NamedTuple, Optional, Sequence

from .config import (
    ANY_MEAL_TYPE,
    CUISINE_MISMATCH_CREDIT,
    DEFAULT_BASE_QUALITY,
    DEFAULT_WEIGHTS,
    NEUTRAL_SCORE,
    REUSE_MAX_MISSING,
    REUSE_SCORE_THRESHOLD,
    WeightVector,
)
from .logging_utils import get_logger
from .models import (
    InventoryItem,
    LibraryRecipe,
    PreferenceFilter,
    RankedCandidate,
    ServingRecord,
    UserProfile,
)
from .normalize import normalize_ingredient_name
from .novelty import compute_novelty
from .taste import TasteProfile, compute_taste_similarity

logger = get_logger(__name__)

# Feedback moves the base score by at most +/- 0.1
FEEDBACK_SPAN = 0.2
USAGE_BONUS_CAP = 0.05
USAGE_BONUS_SCALE = 0.03


def clamp01(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


class Coverage(NamedTuple):
    coverage: float
    missing: tuple[str, ...]


def compute_coverage(
    recipe_ingredient_names: Sequence[str],
    inventory: Sequence[InventoryItem],
) -> Coverage:
    """Fraction of the recipe's ingredients present in the inventory.

    Missing names are returned as written in the recipe, in recipe order.
    An empty ingredient list scores 0 rather than a perfect match.
    """
    required = [n for n in recipe_ingredient_names if normalize_ingredient_name(n)]
    if not required:
        return Coverage(0.0, ())

    have = {normalize_ingredient_name(item.name) for item in inventory or ()}
    have.discard("")

    missing = []
    matched = 0
    for name in required:
        if normalize_ingredient_name(name) in have:
            matched += 1
        else:
            missing.append(name)

    return Coverage(matched / len(required), tuple(missing))


def compute_quality(recipe: LibraryRecipe) -> float:
    """Reliability signal from base quality, thumbs feedback and usage."""
    if recipe.quality_score is None:
        base = DEFAULT_BASE_QUALITY
    else:
        base = clamp01(recipe.quality_score)

    up = max(0, recipe.thumbs_up or 0)
    down = max(0, recipe.thumbs_down or 0)
    total = up + down
    ratio = up / total if total > 0 else 0.5
    feedback = (ratio - 0.5) * FEEDBACK_SPAN

    # log-shaped confidence from usage, capped
    usage = max(0, recipe.usage_count or 0)
    usage_bonus = min(USAGE_BONUS_CAP, math.log10(usage + 1) * USAGE_BONUS_SCALE)

    return clamp01(base + feedback + usage_bonus)


def _preference_signals(
    recipe: LibraryRecipe,
    user: Optional[UserProfile],
    preference_filter: Optional[PreferenceFilter],
) -> list[tuple[bool, float]]:
    signals = []

    meal_type = ""
    must_include = ""
    if preference_filter is not None:
        meal_type = (preference_filter.meal_type or "").strip().lower()
        must_include = normalize_ingredient_name(preference_filter.must_include_ingredient)

    wants_meal_type = bool(meal_type) and meal_type != ANY_MEAL_TYPE
    signals.append((
        wants_meal_type,
        1.0 if (recipe.meal_type or "").strip().lower() == meal_type else 0.0,
    ))

    signals.append((
        bool(must_include),
        1.0 if must_include in recipe.normalized_ingredient_names else 0.0,
    ))

    cuisines = set()
    if user is not None:
        cuisines = {c.strip().lower() for c in user.cuisine_preferences if c and c.strip()}
    recipe_cuisine = (recipe.cuisine or "").strip().lower()
    signals.append((
        bool(cuisines),
        1.0 if recipe_cuisine and recipe_cuisine in cuisines else CUISINE_MISMATCH_CREDIT,
    ))

    return signals


def compute_preference(
    recipe: LibraryRecipe,
    user: Optional[UserProfile] = None,
    preference_filter: Optional[PreferenceFilter] = None,
) -> float:
    """Mean of the preference signals that apply; 0.5 when none do."""
    applicable = [value for active, value in _preference_signals(recipe, user, preference_filter) if active]
    if not applicable:
        return NEUTRAL_SCORE
    return clamp01(sum(applicable) / len(applicable))


@dataclass(frozen=True)
class RankingContext:
    """Everything about the request that scoring needs."""
    inventory: tuple[InventoryItem, ...] = ()
    user: UserProfile = field(default_factory=UserProfile)
    preference_filter: PreferenceFilter = field(default_factory=PreferenceFilter)
    taste_profile: Optional[TasteProfile] = None
    history: tuple[ServingRecord, ...] = ()
    as_of: Optional[date] = None

    def __post_init__(self):
        object.__setattr__(self, "inventory", tuple(self.inventory))
        object.__setattr__(self, "history", tuple(self.history))


def composite_score(signals: dict[str, float], weights: WeightVector = DEFAULT_WEIGHTS) -> float:
    """Weighted sum of the five signals, keyed like WeightVector fields."""
    w = weights.as_dict()
    return clamp01(math.fsum(w[name] * signals[name] for name in w))


def score_candidate(
    recipe: LibraryRecipe,
    context: RankingContext,
    weights: WeightVector = DEFAULT_WEIGHTS,
) -> RankedCandidate:
    """Compute all signals for one recipe."""
    coverage, missing = compute_coverage(recipe.ingredient_names, context.inventory)
    preference = compute_preference(recipe, context.user, context.preference_filter)
    quality = compute_quality(recipe)
    taste = compute_taste_similarity(recipe, context.taste_profile)
    novelty = compute_novelty(recipe, context.history, as_of=context.as_of)

    composite = composite_score(
        {
            "inventory_coverage": coverage,
            "explicit_preference": preference,
            "quality": quality,
            "taste_similarity": taste,
            "novelty": novelty,
        },
        weights,
    )

    return RankedCandidate(
        recipe=recipe,
        inventory_coverage=coverage,
        missing_count=len(missing),
        preference_score=preference,
        quality_score=quality,
        taste_similarity=taste,
        novelty_bonus=novelty,
        composite_score=composite,
        missing_ingredients=missing,
    )


def ranking_key(candidate: RankedCandidate, position: int) -> tuple:
    """Sort key: composite, then coverage, then quality, then input order."""
    return (
        -candidate.composite_score,
        -candidate.inventory_coverage,
        -candidate.quality_score,
        position,
    )


def rank_candidates(
    candidates: Sequence[LibraryRecipe],
    context: Optional[RankingContext] = None,
    weights: WeightVector = DEFAULT_WEIGHTS,
) -> list[RankedCandidate]:
    """Score every candidate and return them best first."""
    context = context or RankingContext()
    scored = [score_candidate(recipe, context, weights) for recipe in candidates or ()]
    order = sorted(range(len(scored)), key=lambda i: ranking_key(scored[i], i))
    ranked = [scored[i] for i in order]

    if ranked:
        top = ranked[0]
        logger.debug(
            "Ranked %d recipes; top %r composite=%.3f coverage=%.2f",
            len(ranked), top.recipe.title, top.composite_score, top.inventory_coverage,
        )
    return ranked


def should_reuse(candidate: Optional[RankedCandidate]) -> bool:
    """Whether a library recipe is good enough to cook as-is."""
    if candidate is None:
        return False
    return (
        candidate.composite_score >= REUSE_SCORE_THRESHOLD
        and candidate.missing_count <= REUSE_MAX_MISSING
    )
