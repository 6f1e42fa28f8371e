"""Map ranked candidates and weekly plans to API-style dictionaries."""

import math
from typing import Any

from .models import LibraryRecipe, RankedCandidate, WeeklyPlan


def match_score(inventory_coverage: float) -> int:
    """0-100 pantry match; halves round up."""
    if not math.isfinite(inventory_coverage):
        return 0
    return int(math.floor(inventory_coverage * 100 + 0.5))


def build_recipe_tags(recipe: LibraryRecipe, fallback_servings: int) -> list[str]:
    """Diet tags, meal type, cuisine and a "serves N" tag."""
    tags = sorted(recipe.diet_tags)
    if recipe.meal_type:
        tags.append(recipe.meal_type)
    if recipe.cuisine:
        tags.append(recipe.cuisine)
    tags.append(f"serves {recipe.servings or fallback_servings}")
    return [t for t in tags if t]


def map_recipe(recipe: LibraryRecipe, fallback_servings: int, score: int = 0) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "title": recipe.title,
        "description": recipe.description,
        "ingredients": [
            {"name": ing.name, "quantity": ing.quantity} for ing in recipe.ingredients
        ],
        "instructions": list(recipe.instructions),
        "prepTime": recipe.prep_time,
        "cookTime": recipe.cook_time,
        "calories": recipe.calories,
        "matchScore": score,
        "tags": build_recipe_tags(recipe, fallback_servings),
    }


def map_ranked_candidate(candidate: RankedCandidate, fallback_servings: int) -> dict[str, Any]:
    data = map_recipe(
        candidate.recipe, fallback_servings, match_score(candidate.inventory_coverage)
    )
    data["missingIngredients"] = list(candidate.missing_ingredients)
    return data


def map_weekly_plan(plan: WeeklyPlan, fallback_servings: int) -> list[dict[str, Any]]:
    return [
        {
            "day": slot.day,
            "recipe": (
                map_ranked_candidate(slot.candidate, fallback_servings)
                if slot.candidate is not None else None
            ),
        }
        for slot in plan.days
    ]
