import pytest

from reciperank.models import LibraryRecipe, RankedCandidate

ENV_KEYS = (
    "RECIPES_PATH",
    "PANTRY_PATH",
    "HISTORY_PATH",
    "DEFAULT_SERVINGS",
    "RECIPERANK_WEIGHTS",
    "RECIPERANK_LOG_LEVEL",
)


@pytest.fixture
def make_recipe():
    def _make(recipe_id="r1", title=None, ingredients=(), **fields):
        row = {
            "id": recipe_id,
            "title": title or f"Recipe {recipe_id}",
            "ingredients": [
                i if isinstance(i, dict) else {"name": i} for i in ingredients
            ],
        }
        row.update(fields)
        return LibraryRecipe.from_dict(row)
    return _make


@pytest.fixture
def make_candidate(make_recipe):
    def _make(recipe_id, composite, coverage=0.5, quality=0.5, missing=(), **recipe_fields):
        return RankedCandidate(
            recipe=make_recipe(recipe_id, **recipe_fields),
            inventory_coverage=coverage,
            missing_count=len(missing),
            preference_score=0.5,
            quality_score=quality,
            taste_similarity=0.5,
            novelty_bonus=1.0,
            composite_score=composite,
            missing_ingredients=tuple(missing),
        )
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Unset config variables; anything written to os.environ is undone afterwards."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def kitchen(tmp_path):
    """A recipe directory, pantry and .env file on disk."""
    recipes = tmp_path / "recipes"
    recipes.mkdir()

    (recipes / "garlic-pasta.md").write_text(
        "---\n"
        "id: garlic-pasta\n"
        "cuisine: Italian\n"
        "meal_type: dinner\n"
        "prep_time: 10\n"
        "cook_time: 15\n"
        "quality_score: 0.8\n"
        "allergens: [gluten]\n"
        "---\n"
        "# Garlic Pasta\n\n"
        "## Ingredients\n"
        "- spaghetti, 200g\n"
        "- Garlic, 3 cloves\n"
        "- olive oil\n\n"
        "## Instructions\n"
        "1. Boil the pasta.\n"
        "2. Fry the garlic in oil.\n",
        encoding="utf-8",
    )
    (recipes / "beef-stew.md").write_text(
        "---\n"
        "id: beef-stew\n"
        "cuisine: French\n"
        "meal_type: dinner\n"
        "---\n"
        "# Beef Stew\n\n"
        "## Ingredients\n"
        "- beef chuck, 1 kg\n"
        "- carrots\n"
        "- red wine\n\n"
        "## Instructions\n"
        "1. Brown the beef.\n"
        "2. Braise for two hours.\n",
        encoding="utf-8",
    )

    pantry = tmp_path / "pantry.md"
    pantry.write_text(
        "# Pantry\n\n"
        "## Grains\n"
        "- Spaghetti, 500g\n\n"
        "## Produce\n"
        "- garlic\n\n"
        "## Condiments\n"
        "- Olive Oil\n",
        encoding="utf-8",
    )

    history = tmp_path / "history.json"
    history.write_text('{"servings": [], "signals": []}', encoding="utf-8")

    env = tmp_path / ".env"
    env.write_text(
        f"RECIPES_PATH={recipes}\n"
        f"PANTRY_PATH={pantry}\n"
        f"HISTORY_PATH={history}\n",
        encoding="utf-8",
    )
    return tmp_path
