"""Weekly meal planning over a ranked recipe pool."""

import heapq
from collections import Counter
from datetime import date
from typing import Optional, Sequence

from .config import (
    EFFORT_FLOOR,
    INGREDIENT_REUSE_CAP,
    INGREDIENT_REUSE_STEP,
    WEEK_DAYS,
    Config,
    WeeklyConstraints,
    WeightVector,
)
from .history import History, build_taste_profile
from .logging_utils import get_logger
from .models import (
    DaySlot,
    InventoryItem,
    LibraryRecipe,
    PreferenceFilter,
    RankedCandidate,
    UserProfile,
    WeeklyPlan,
)
from .recipe_parser import RecipeLibrary
from .scoring import RankingContext, rank_candidates, ranking_key

logger = get_logger(__name__)

# Checked in order; the first one found is the recipe's primary protein
PRIMARY_PROTEINS = (
    "chicken", "beef", "pork", "fish", "salmon", "shrimp", "tofu", "turkey", "lamb",
)


def primary_protein(candidate: RankedCandidate) -> Optional[str]:
    names = [n.lower() for n in candidate.recipe.ingredient_names]
    for protein in PRIMARY_PROTEINS:
        if any(protein in n for n in names):
            return protein
    return None


def _cuisine(candidate: RankedCandidate) -> str:
    return (candidate.recipe.cuisine or "").strip().lower()


def effort_balance(candidate: RankedCandidate, total_effort: int, filled: int, target: int) -> float:
    """1.0 when adding the recipe keeps the average effort on target, 0.0 at 100% off."""
    new_avg = (total_effort + candidate.recipe.total_time_minutes) / (filled + 1)
    return max(0.0, 1.0 - abs(new_avg - target) / target)


def ingredient_reuse_bonus(candidate: RankedCandidate, used_ingredients: set[str]) -> float:
    """Small boost for recipes that share ingredients with earlier days."""
    shared = len(candidate.recipe.normalized_ingredient_names & used_ingredients)
    return min(shared * INGREDIENT_REUSE_STEP, INGREDIENT_REUSE_CAP)


class _WeekState:
    """Running tallies while filling the week."""

    def __init__(self, constraints: WeeklyConstraints):
        self.constraints = constraints
        self.used_ids: set[str] = set()
        self.day_cuisines: list[str] = []  # one entry per day, "" when empty
        self.cuisine_counts: Counter = Counter()
        self.protein_counts: Counter = Counter()
        self.used_ingredients: set[str] = set()
        self.total_effort = 0
        self.filled = 0

    def is_eligible(self, candidate: RankedCandidate) -> bool:
        if candidate.recipe_id in self.used_ids:
            return False

        cuisine = _cuisine(candidate)
        if cuisine:
            gap = self.constraints.cuisine_gap_days
            recent = self.day_cuisines[-gap:] if gap else []
            if cuisine in recent:
                return False
            cap = self.constraints.max_cuisine_per_week
            if cap is not None and self.cuisine_counts[cuisine] >= cap:
                return False

        cap = self.constraints.max_protein_per_week
        if cap is not None:
            protein = primary_protein(candidate)
            if protein and self.protein_counts[protein] >= cap:
                return False

        return True

    def adjusted_score(self, candidate: RankedCandidate) -> float:
        """Composite score reweighted by the week's effort and ingredient preferences."""
        score = candidate.composite_score
        if self.constraints.reward_ingredient_reuse:
            score *= 1.0 + ingredient_reuse_bonus(candidate, self.used_ingredients)
        target = self.constraints.target_effort_minutes
        if target is not None:
            balance = effort_balance(candidate, self.total_effort, self.filled, target)
            score *= EFFORT_FLOOR + (1.0 - EFFORT_FLOOR) * balance
        return score

    def record(self, candidate: Optional[RankedCandidate]):
        if candidate is None:
            self.day_cuisines.append("")
            return
        self.used_ids.add(candidate.recipe_id)
        cuisine = _cuisine(candidate)
        self.day_cuisines.append(cuisine)
        if cuisine:
            self.cuisine_counts[cuisine] += 1
        protein = primary_protein(candidate)
        if protein:
            self.protein_counts[protein] += 1
        self.used_ingredients |= candidate.recipe.normalized_ingredient_names
        self.total_effort += candidate.recipe.total_time_minutes
        self.filled += 1


def _pick(heap: list, state: _WeekState) -> Optional[RankedCandidate]:
    """Pop today's candidate off the heap; ineligible entries go back for later days.

    Without effort or reuse preferences the first eligible entry wins.
    Otherwise every eligible entry is compared by adjusted score, with the
    ranking order breaking ties.
    """
    best = None
    deferred = []
    while heap:
        entry = heapq.heappop(heap)
        candidate = entry[1]
        if candidate.recipe_id in state.used_ids:
            continue  # duplicate id in the pool
        if not state.is_eligible(candidate):
            deferred.append(entry)
            continue
        if not state.constraints.adjusts_order:
            best = entry
            break
        if best is None or state.adjusted_score(candidate) > state.adjusted_score(best[1]):
            if best is not None:
                deferred.append(best)
            best = entry
        else:
            deferred.append(entry)

    for entry in deferred:
        heapq.heappush(heap, entry)
    return best[1] if best is not None else None


def build_week(
    ranked_candidates: Sequence[RankedCandidate],
    constraints: Optional[WeeklyConstraints] = None,
) -> WeeklyPlan:
    """Greedily assign one recipe per day in composite-score order.

    A recipe is never used twice. Candidates that break a variety rule for
    one day go back into the pool for later days; a day with no eligible
    candidate is left empty and the plan reports itself as partial.
    """
    constraints = constraints or WeeklyConstraints()
    heap = [(ranking_key(c, i), c) for i, c in enumerate(ranked_candidates or ())]
    heapq.heapify(heap)

    state = _WeekState(constraints)
    slots = []

    for day in WEEK_DAYS[:constraints.days]:
        chosen = _pick(heap, state)
        state.record(chosen)
        slots.append(DaySlot(day=day, candidate=chosen))

    plan = WeeklyPlan(days=tuple(slots))
    logger.debug(
        "Built week with %d/%d days filled", len(plan.filled_slots), len(plan.days),
    )
    return plan


class MealPlanner:
    """Ranks the recipe library for one user and builds weekly plans."""

    def __init__(
        self,
        config: Config,
        recipe_library: RecipeLibrary,
        inventory: Sequence[InventoryItem] = (),
        history: Optional[History] = None,
    ):
        self.config = config
        self.recipe_library = recipe_library
        self.inventory = tuple(inventory)
        self.history = history or History()
        self.taste_profile = build_taste_profile(self.history.signals, recipe_library.recipes)

    def _context(
        self,
        user: Optional[UserProfile],
        preference_filter: Optional[PreferenceFilter],
        as_of: Optional[date],
    ) -> RankingContext:
        return RankingContext(
            inventory=self.inventory,
            user=user or UserProfile(),
            preference_filter=preference_filter or PreferenceFilter(),
            taste_profile=self.taste_profile,
            history=self.history.servings,
            as_of=as_of,
        )

    def candidate_pool(
        self,
        max_time_minutes: Optional[int] = None,
        exclude_allergens: Sequence[str] = (),
    ) -> list[LibraryRecipe]:
        """Library recipes that pass the hard filters.

        Meal type is left to the preference score so untyped recipes still rank.
        """
        pool = self.recipe_library.search(
            max_time_minutes=max_time_minutes,
            exclude_allergens=list(exclude_allergens),
        )
        dropped = len(self.recipe_library.recipes) - len(pool)
        if dropped:
            logger.info("Filtered out %d recipe(s) by time or allergens", dropped)
        return pool

    def rank(
        self,
        user: Optional[UserProfile] = None,
        preference_filter: Optional[PreferenceFilter] = None,
        weights: Optional[WeightVector] = None,
        as_of: Optional[date] = None,
        max_time_minutes: Optional[int] = None,
        exclude_allergens: Sequence[str] = (),
    ) -> list[RankedCandidate]:
        """Rank the library, optionally limited by cooking time and allergens."""
        return rank_candidates(
            self.candidate_pool(max_time_minutes, exclude_allergens),
            self._context(user, preference_filter, as_of),
            weights or self.config.weights,
        )

    def plan_week(
        self,
        user: Optional[UserProfile] = None,
        preference_filter: Optional[PreferenceFilter] = None,
        constraints: Optional[WeeklyConstraints] = None,
        weights: Optional[WeightVector] = None,
        as_of: Optional[date] = None,
        max_time_minutes: Optional[int] = None,
        exclude_allergens: Sequence[str] = (),
    ) -> WeeklyPlan:
        """Rank the library and fill a week from it."""
        ranked = self.rank(
            user, preference_filter, weights, as_of, max_time_minutes, exclude_allergens,
        )
        plan = build_week(ranked, constraints or self.config.weekly_constraints)
        if plan.is_partial:
            logger.warning(
                "Only %d of %d days could be filled; no recipe for %s",
                len(plan.filled_slots), len(plan.days), ", ".join(plan.missing_days),
            )
        return plan

    def get_plan_summary(self, plan: WeeklyPlan) -> str:
        """Generate a markdown summary of the weekly plan."""
        lines = ["# Weekly Plan\n"]

        for slot in plan.days:
            if not slot.is_filled:
                lines.append(f"- **{slot.day}**: _no recipe available_")
                continue

            candidate = slot.candidate
            recipe = candidate.recipe
            time_str = f" ({recipe.total_time_minutes} min)" if recipe.total_time_minutes else ""
            cuisine = f", {recipe.cuisine}" if recipe.cuisine else ""
            lines.append(
                f"- **{slot.day}**: {recipe.title}{time_str}{cuisine} "
                f"- score {candidate.composite_score:.2f}, "
                f"{round(candidate.inventory_coverage * 100)}% in pantry"
            )
            if candidate.missing_ingredients:
                lines.append(f"  - missing: {', '.join(candidate.missing_ingredients)}")

        if plan.is_partial:
            lines.append(
                f"\n_Not enough distinct recipes: {len(plan.missing_days)} day(s) left open._"
            )

        return "\n".join(lines)
