"""Data models for reciperank."""

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .errors import RecipeValidationError
from .normalize import ingredient_signature, normalize_ingredient_name

# Units recognised between a leading quantity and the ingredient name
QUANTITY_UNITS = r"(?:g|kg|ml|l|oz|lb|lbs|cups?|tbsp|tsp|tablespoons?|teaspoons?|cloves?|cans?)"


@dataclass(frozen=True)
class Ingredient:
    """A recipe ingredient with an optional free-text quantity."""
    name: str
    quantity: Optional[str] = None

    def __str__(self) -> str:
        if self.quantity:
            return f"{self.name}, {self.quantity}"
        return self.name

    @classmethod
    def parse(cls, text: str) -> "Ingredient":
        """Parse an ingredient bullet into name and quantity."""
        # Remove list marker and checkbox markdown
        text = re.sub(r"^\s*-\s*(\[.?\])?\s*", "", text).strip()

        # "ground beef, 450 g"
        match = re.match(r"^(.+?),\s*([\d./\-]+\s*[a-zA-Z]*)\s*$", text)
        if match:
            return cls(name=match.group(1).strip(), quantity=match.group(2).strip())

        # "2 tablespoons olive oil" / "4 eggs"
        match = re.match(rf"^([\d./]+(?:\s+{QUANTITY_UNITS})?)\s+(.+)$", text)
        if match:
            return cls(name=match.group(2).strip(), quantity=match.group(1).strip())

        # Drop trailing notes like "Salt, to taste"
        name = re.sub(r",\s*(to taste|as needed|optional)\s*$", "", text, flags=re.IGNORECASE)
        return cls(name=name.strip(" ,"))

    @classmethod
    def from_value(cls, value: Any) -> "Ingredient":
        """Build from a row entry: a {"name", "quantity"} mapping or a string."""
        if isinstance(value, Ingredient):
            return value
        if isinstance(value, dict):
            name = value.get("name")
            if not isinstance(name, str) or not name.strip():
                raise RecipeValidationError(f"ingredient without a name: {value!r}")
            quantity = value.get("quantity")
            return cls(name=name.strip(), quantity=str(quantity) if quantity not in (None, "") else None)
        if isinstance(value, str) and value.strip():
            return cls.parse(value)
        raise RecipeValidationError(f"unsupported ingredient entry: {value!r}")


def _finite_or_none(data: dict, key: str) -> Optional[float]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RecipeValidationError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise RecipeValidationError(f"{key} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise RecipeValidationError(f"{key} must be finite, got {value!r}")
    return number


def _optional_int(data: dict, key: str) -> Optional[int]:
    number = _finite_or_none(data, key)
    return int(round(number)) if number is not None else None


def _count(data: dict, key: str) -> int:
    number = _finite_or_none(data, key)
    if number is None:
        return 0
    return max(0, int(number))


def _lower_set(values: Any) -> frozenset[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(
        v.strip().lower() for v in values
        if isinstance(v, str) and v.strip()
    )


def _clean_label(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value or None


@dataclass(frozen=True)
class LibraryRecipe:
    """An immutable catalog entry.

    ingredient_names and ingredient_signature are derived from ingredients
    when the recipe is created and cannot be passed in.
    """
    id: str
    title: str
    ingredients: tuple[Ingredient, ...] = ()
    instructions: tuple[str, ...] = ()
    description: Optional[str] = None

    cuisine: Optional[str] = None
    meal_type: Optional[str] = None
    diet_tags: frozenset[str] = frozenset()
    allergens: frozenset[str] = frozenset()

    prep_time: Optional[int] = None  # minutes
    cook_time: Optional[int] = None  # minutes
    servings: Optional[int] = None
    calories: Optional[float] = None

    # History
    quality_score: Optional[float] = None
    usage_count: int = 0
    save_count: int = 0
    thumbs_up: int = 0
    thumbs_down: int = 0

    ingredient_names: tuple[str, ...] = field(init=False)
    ingredient_signature: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        object.__setattr__(self, "instructions", tuple(self.instructions))
        object.__setattr__(self, "diet_tags", frozenset(self.diet_tags))
        object.__setattr__(self, "allergens", frozenset(self.allergens))

        names = tuple(ing.name for ing in self.ingredients)
        object.__setattr__(self, "ingredient_names", names)
        object.__setattr__(self, "ingredient_signature", ingredient_signature(names))

    @property
    def total_time_minutes(self) -> int:
        return (self.prep_time or 0) + (self.cook_time or 0)

    @property
    def normalized_ingredient_names(self) -> frozenset[str]:
        names = {normalize_ingredient_name(n) for n in self.ingredient_names}
        names.discard("")
        return frozenset(names)

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryRecipe":
        """Build a recipe from a library row, rejecting malformed values."""
        recipe_id = data.get("id")
        if recipe_id is None or str(recipe_id).strip() == "":
            raise RecipeValidationError("recipe row has no id")
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise RecipeValidationError(f"recipe {recipe_id} has no title")

        raw_ingredients = data.get("ingredients") or []
        if not isinstance(raw_ingredients, (list, tuple)):
            raise RecipeValidationError(f"recipe {recipe_id}: ingredients must be a list")
        ingredients = tuple(Ingredient.from_value(v) for v in raw_ingredients)

        raw_instructions = data.get("instructions") or []
        if not isinstance(raw_instructions, (list, tuple)):
            raw_instructions = []
        instructions = tuple(str(s).strip() for s in raw_instructions if str(s).strip())

        quality = _finite_or_none(data, "quality_score")

        recipe = cls(
            id=str(recipe_id),
            title=title.strip(),
            ingredients=ingredients,
            instructions=instructions,
            description=data.get("description") or None,
            cuisine=_clean_label(data.get("cuisine")),
            meal_type=_clean_label(data.get("meal_type")),
            diet_tags=_lower_set(data.get("diet_tags")),
            allergens=_lower_set(data.get("allergens")),
            prep_time=_optional_int(data, "prep_time"),
            cook_time=_optional_int(data, "cook_time"),
            servings=_optional_int(data, "servings"),
            calories=_finite_or_none(data, "calories"),
            quality_score=quality,
            usage_count=_count(data, "usage_count"),
            save_count=_count(data, "save_count"),
            thumbs_up=_count(data, "thumbs_up"),
            thumbs_down=_count(data, "thumbs_down"),
        )

        # Stored rows may carry names with different spacing or case
        supplied_names = data.get("ingredient_names")
        if supplied_names is not None and (
            tuple(normalize_ingredient_name(str(n)) for n in supplied_names)
            != tuple(normalize_ingredient_name(n) for n in recipe.ingredient_names)
        ):
            raise RecipeValidationError(
                f"recipe {recipe_id}: ingredient_names do not match ingredients"
            )

        return recipe

    def to_summary(self) -> str:
        """Generate a brief summary of the recipe."""
        time_str = f" ({self.total_time_minutes} min)" if self.total_time_minutes else ""
        cuisine = f" [{self.cuisine}]" if self.cuisine else ""
        return f"{self.title}{time_str}{cuisine} - {len(self.ingredients)} ingredients"


@dataclass(frozen=True)
class InventoryItem:
    """An item in the user's kitchen, as supplied per request."""
    name: str
    quantity: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Profile-level preferences."""
    cuisine_preferences: tuple[str, ...] = ()
    household_size: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "cuisine_preferences", tuple(self.cuisine_preferences))


@dataclass(frozen=True)
class PreferenceFilter:
    """Explicit per-request filters."""
    meal_type: Optional[str] = "any"
    must_include_ingredient: Optional[str] = None


@dataclass(frozen=True)
class ServingRecord:
    """One time a recipe was served to the user."""
    recipe_id: str
    served_on: date


@dataclass(frozen=True)
class RankedCandidate:
    """A recipe scored for one request."""
    recipe: LibraryRecipe
    inventory_coverage: float
    missing_count: int
    preference_score: float
    quality_score: float
    taste_similarity: float
    novelty_bonus: float
    composite_score: float
    missing_ingredients: tuple[str, ...] = ()

    @property
    def recipe_id(self) -> str:
        return self.recipe.id


@dataclass(frozen=True)
class DaySlot:
    """A single day in a weekly plan."""
    day: str
    candidate: Optional[RankedCandidate] = None

    @property
    def is_filled(self) -> bool:
        return self.candidate is not None


@dataclass(frozen=True)
class WeeklyPlan:
    """One recipe per day, built once per planning request."""
    days: tuple[DaySlot, ...] = ()

    @property
    def filled_slots(self) -> list[DaySlot]:
        return [slot for slot in self.days if slot.is_filled]

    @property
    def missing_days(self) -> list[str]:
        return [slot.day for slot in self.days if not slot.is_filled]

    @property
    def is_partial(self) -> bool:
        """True when the pool ran out before every day was filled."""
        return any(not slot.is_filled for slot in self.days)

    def recipe_ids(self) -> list[str]:
        return [slot.candidate.recipe_id for slot in self.filled_slots]
