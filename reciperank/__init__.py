"""reciperank - Rank recipes by pantry coverage, taste and novelty, and plan varied weeks."""

__version__ = "0.1.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name in ("Config", "WeightVector", "WeeklyConstraints", "DEFAULT_WEIGHTS"):
        from . import config
        return getattr(config, name)
    elif name in ("Ingredient", "LibraryRecipe", "InventoryItem", "UserProfile",
                  "PreferenceFilter", "ServingRecord", "RankedCandidate",
                  "DaySlot", "WeeklyPlan"):
        from . import models
        return getattr(models, name)
    elif name in ("RankingContext", "rank_candidates", "should_reuse"):
        from . import scoring
        return getattr(scoring, name)
    elif name in ("TasteProfile", "update_taste_profile"):
        from . import taste
        return getattr(taste, name)
    elif name == "normalize_ingredient_name":
        from .normalize import normalize_ingredient_name
        return normalize_ingredient_name
    elif name == "RecipeLibrary":
        from .recipe_parser import RecipeLibrary
        return RecipeLibrary
    elif name == "parse_recipe_file":
        from .recipe_parser import parse_recipe_file
        return parse_recipe_file
    elif name == "Pantry":
        from .pantry import Pantry
        return Pantry
    elif name in ("History", "load_history"):
        from . import history
        return getattr(history, name)
    elif name in ("MealPlanner", "build_week"):
        from . import planner
        return getattr(planner, name)
    elif name in ("ShoppingList", "build_shopping_list"):
        from . import shopping
        return getattr(shopping, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "Config",
    "WeightVector",
    "WeeklyConstraints",
    "DEFAULT_WEIGHTS",
    "Ingredient",
    "LibraryRecipe",
    "InventoryItem",
    "UserProfile",
    "PreferenceFilter",
    "ServingRecord",
    "RankedCandidate",
    "DaySlot",
    "WeeklyPlan",
    "RankingContext",
    "rank_candidates",
    "should_reuse",
    "TasteProfile",
    "update_taste_profile",
    "normalize_ingredient_name",
    "RecipeLibrary",
    "parse_recipe_file",
    "Pantry",
    "History",
    "load_history",
    "MealPlanner",
    "build_week",
    "ShoppingList",
    "build_shopping_list",
]
