"""Recipe parser for markdown files with YAML frontmatter."""

import re
from itertools import combinations
from pathlib import Path
from typing import Iterable, Optional

import frontmatter

from .errors import RecipeValidationError
from .logging_utils import get_logger
from .models import Ingredient, LibraryRecipe
from .normalize import jaccard, normalize_ingredient_name

logger = get_logger(__name__)

DUPLICATE_THRESHOLD = 0.85

MEAL_TYPE_KEYWORDS = {
    "breakfast": [
        "breakfast", "brunch", "pancake", "waffle", "omelette", "frittata",
        "porridge", "oatmeal", "granola", "toast",
    ],
    "lunch": ["sandwich", "wrap", "salad", "lunch", "sub", "hoagie"],
    "dinner": [
        "dinner", "roast", "stew", "braise", "curry", "pasta", "rice bowl",
        "stir fry", "casserole",
    ],
    "snack": ["snack", "bite", "dip", "cracker", "popcorn"],
    "dessert": ["dessert", "cake", "cookie", "pie", "pudding", "brownie", "cobbler"],
}


def parse_minutes(value) -> Optional[int]:
    """Parse a duration in minutes from 30, "30 min", "1 hr" or "PT1H30M"."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)

    text = str(value).strip()
    if text.isdigit():
        return int(text)

    match = re.fullmatch(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?", text, re.IGNORECASE)
    if match and any(match.groups()):
        hours = int(match.group(1) or 0)
        minutes = int(match.group(2) or 0)
        seconds = int(match.group(3) or 0)
        return hours * 60 + minutes + seconds // 60

    simple = re.match(r"(\d+)\s*(min|minutes?|hr|hours?)", text, re.IGNORECASE)
    if simple:
        amount = int(simple.group(1))
        return amount * 60 if simple.group(2).lower().startswith("h") else amount

    return None


def parse_servings(value) -> Optional[int]:
    """Parse servings from 4, "Serves 4" or [4, "Serves 4"]."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, list):
        return parse_servings(value[0]) if value else None
    match = re.search(r"(\d+)", str(value))
    return int(match.group(1)) if match else None


def infer_meal_type(title: str, tags: list[str]) -> Optional[str]:
    """Guess a single meal type from the title and tags."""
    title_lower = title.lower()
    tags_lower = {t.lower() for t in tags}
    for meal_type in MEAL_TYPE_KEYWORDS:
        if meal_type in tags_lower:
            return meal_type
    for meal_type, keywords in MEAL_TYPE_KEYWORDS.items():
        if any(kw in title_lower for kw in keywords):
            return meal_type
    return None


def _section(content: str, heading: str) -> str:
    match = re.search(rf"^##\s+{heading}\s*\n(.*?)(?=^##\s|\Z)", content, re.DOTALL | re.MULTILINE | re.IGNORECASE)
    return match.group(1) if match else ""


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def parse_recipe_file(file_path: Path) -> LibraryRecipe:
    """Parse a markdown recipe file into a LibraryRecipe."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            post = frontmatter.load(f)
    except Exception as e:
        raise RecipeValidationError(f"Error loading {file_path}: {e}") from e

    metadata = post.metadata
    content = post.content

    # Title from H1 heading, frontmatter, or filename
    title_match = re.search(r"^#\s+(.+)$", content, re.MULTILINE)
    if title_match:
        title = title_match.group(1).strip()
    else:
        title = str(metadata.get("title") or file_path.stem.replace("-", " ").title())

    ingredients = []
    for line in _section(content, "Ingredients").splitlines():
        line = line.strip()
        if line.startswith("- ") or line.startswith("* "):
            ingredient = Ingredient.parse("- " + line[2:])
            if ingredient.name:
                ingredients.append({"name": ingredient.name, "quantity": ingredient.quantity})

    instructions = []
    for step in re.split(r"^\s*(?:\d+[.)]|-)\s+", _section(content, "Instructions"), flags=re.MULTILINE):
        step = " ".join(step.split())
        if step:
            instructions.append(step)

    tags = _as_list(metadata.get("tags"))
    meal_type = metadata.get("meal_type") or infer_meal_type(title, tags)

    row = {
        "id": metadata.get("id") or file_path.stem,
        "title": title,
        "description": metadata.get("description"),
        "ingredients": ingredients,
        "instructions": instructions,
        "cuisine": metadata.get("cuisine"),
        "meal_type": meal_type,
        "diet_tags": _as_list(metadata.get("diet_tags")),
        "allergens": _as_list(metadata.get("allergens")),
        "prep_time": parse_minutes(metadata.get("prep_time")),
        "cook_time": parse_minutes(metadata.get("cook_time")),
        "servings": parse_servings(metadata.get("servings", metadata.get("yields"))),
        "calories": metadata.get("calories"),
        "quality_score": metadata.get("quality_score"),
        "usage_count": metadata.get("usage_count"),
        "save_count": metadata.get("save_count"),
        "thumbs_up": metadata.get("thumbs_up"),
        "thumbs_down": metadata.get("thumbs_down"),
    }
    return LibraryRecipe.from_dict(row)


class RecipeLibrary:
    """A collection of recipes loaded from a directory."""

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = base_path
        self.recipes: dict[str, LibraryRecipe] = {}
        self.skipped: list[Path] = []
        if base_path is not None:
            self._load_recipes()

    @classmethod
    def from_recipes(cls, recipes: Iterable[LibraryRecipe]) -> "RecipeLibrary":
        """Build an in-memory library."""
        library = cls()
        for recipe in recipes:
            library.add(recipe)
        return library

    def add(self, recipe: LibraryRecipe) -> bool:
        """Add a recipe; the first recipe seen for an id wins."""
        if recipe.id in self.recipes:
            logger.warning("Duplicate recipe id %s (%s); keeping the first", recipe.id, recipe.title)
            return False
        self.recipes[recipe.id] = recipe
        return True

    def _load_recipes(self):
        """Load all recipes from the base path."""
        if not self.base_path.exists():
            logger.warning("Recipe path does not exist: %s", self.base_path)
            return

        for md_file in sorted(self.base_path.rglob("*.md")):
            try:
                recipe = parse_recipe_file(md_file)
            except RecipeValidationError as e:
                logger.warning("Skipping %s: %s", md_file, e)
                self.skipped.append(md_file)
                continue
            self.add(recipe)

        logger.info("Loaded %d recipes from %s", len(self.recipes), self.base_path)

    def get_recipe(self, recipe_id: str) -> Optional[LibraryRecipe]:
        """Get a recipe by id."""
        return self.recipes.get(recipe_id)

    def search(
        self,
        query: Optional[str] = None,
        meal_type: Optional[str] = None,
        cuisine: Optional[str] = None,
        max_time_minutes: Optional[int] = None,
        ingredients_include: Optional[list[str]] = None,
        ingredients_exclude: Optional[list[str]] = None,
        exclude_allergens: Optional[list[str]] = None,
    ) -> list[LibraryRecipe]:
        """Search recipes with various filters."""
        results = list(self.recipes.values())

        if query:
            query_lower = query.lower()
            results = [r for r in results if query_lower in r.title.lower()]

        if meal_type and meal_type.lower() != "any":
            wanted = meal_type.lower()
            # Recipes without a meal type stay in the pool
            results = [r for r in results if r.meal_type in (None, wanted)]

        if cuisine:
            results = [r for r in results if (r.cuisine or "") == cuisine.lower()]

        if max_time_minutes:
            results = [r for r in results if r.total_time_minutes <= max_time_minutes]

        if ingredients_include:
            wanted = [normalize_ingredient_name(i) for i in ingredients_include]
            results = [
                r for r in results
                if any(w in name for w in wanted for name in r.normalized_ingredient_names)
            ]

        if ingredients_exclude:
            unwanted = [normalize_ingredient_name(i) for i in ingredients_exclude]
            results = [
                r for r in results
                if not any(u in name for u in unwanted for name in r.normalized_ingredient_names)
            ]

        if exclude_allergens:
            blocked = {a.strip().lower() for a in exclude_allergens}
            results = [r for r in results if not (r.allergens & blocked)]

        return results

    def find_near_duplicates(self, threshold: float = DUPLICATE_THRESHOLD) -> list[tuple[str, str, float]]:
        """Pairs of recipe ids whose ingredient sets overlap at least `threshold`."""
        pairs = []
        recipes = sorted(self.recipes.values(), key=lambda r: r.id)
        for a, b in combinations(recipes, 2):
            names_a = a.normalized_ingredient_names
            names_b = b.normalized_ingredient_names
            if not names_a or not names_b:
                continue
            score = jaccard(set(names_a), set(names_b))
            if score >= threshold:
                pairs.append((a.id, b.id, score))
        return pairs

    def get_stats(self) -> dict:
        """Get statistics about the recipe library."""
        recipes = list(self.recipes.values())
        if not recipes:
            return {"total": 0}

        cuisines = {r.cuisine for r in recipes if r.cuisine}
        rated = [r for r in recipes if r.quality_score is not None]

        by_meal_type: dict[str, int] = {}
        for r in recipes:
            key = r.meal_type or "unspecified"
            by_meal_type[key] = by_meal_type.get(key, 0) + 1

        return {
            "total": len(recipes),
            "cuisines": len(cuisines),
            "by_meal_type": by_meal_type,
            "with_quality_score": len(rated),
            "avg_ingredients": sum(len(r.ingredients) for r in recipes) / len(recipes),
            "skipped_files": len(self.skipped),
        }
