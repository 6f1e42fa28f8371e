import pytest

from reciperank.errors import RecipeValidationError
from reciperank.recipe_parser import (
    RecipeLibrary,
    infer_meal_type,
    parse_minutes,
    parse_recipe_file,
    parse_servings,
)

PASTA = """---
id: pasta-1
cuisine: Italian
meal_type: dinner
diet_tags: [vegetarian]
allergens: [gluten]
prep_time: 10 min
cook_time: PT20M
servings: Serves 4
quality_score: 0.8
thumbs_up: 3
---
# Garlic Pasta

## Ingredients
- spaghetti, 200g
- 2 tbsp olive oil
- Garlic, 3 cloves
- Salt, to taste

## Instructions
1. Boil the pasta.
2. Fry the garlic
   in the oil.
"""


def write(directory, name, text):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.parametrize("value,expected", [
    (30, 30),
    ("45", 45),
    ("10 min", 10),
    ("1 hr", 60),
    ("PT1H30M", 90),
    ("", None),
    (None, None),
    ("soon", None),
])
def test_parse_minutes(value, expected):
    assert parse_minutes(value) == expected


def test_parse_servings():
    assert parse_servings(4) == 4
    assert parse_servings("Serves 6") == 6
    assert parse_servings(["8", "8 servings"]) == 8
    assert parse_servings("a crowd") is None


def test_infer_meal_type():
    assert infer_meal_type("Berry Pancakes", []) == "breakfast"
    assert infer_meal_type("Something", ["Lunch"]) == "lunch"
    assert infer_meal_type("Mystery Dish", []) is None


def test_parse_recipe_file(tmp_path):
    recipe = parse_recipe_file(write(tmp_path, "garlic-pasta.md", PASTA))

    assert recipe.id == "pasta-1"
    assert recipe.title == "Garlic Pasta"
    assert recipe.cuisine == "italian"
    assert recipe.meal_type == "dinner"
    assert recipe.diet_tags == frozenset({"vegetarian"})
    assert recipe.allergens == frozenset({"gluten"})
    assert recipe.ingredient_names == ("spaghetti", "olive oil", "Garlic", "Salt")
    assert recipe.ingredients[0].quantity == "200g"
    assert recipe.instructions == ("Boil the pasta.", "Fry the garlic in the oil.")
    assert recipe.total_time_minutes == 30
    assert recipe.servings == 4
    assert recipe.quality_score == 0.8
    assert recipe.thumbs_up == 3


def test_parse_recipe_file_fallbacks(tmp_path):
    recipe = parse_recipe_file(write(
        tmp_path, "blueberry-pancakes.md",
        "No heading here.\n\n## Ingredients\n- flour\n- blueberries\n",
    ))
    assert recipe.id == "blueberry-pancakes"
    assert recipe.title == "Blueberry Pancakes"
    assert recipe.meal_type == "breakfast"
    assert recipe.instructions == ()


def test_parse_recipe_file_rejects_bad_values(tmp_path):
    path = write(tmp_path, "bad.md", "---\nquality_score: .nan\n---\n# Bad\n")
    with pytest.raises(RecipeValidationError):
        parse_recipe_file(path)


def test_library_skips_invalid_and_duplicate_files(tmp_path, caplog):
    write(tmp_path, "a-pasta.md", PASTA)
    write(tmp_path, "b-pasta-copy.md", PASTA.replace("# Garlic Pasta", "# Pasta Copy"))
    write(tmp_path, "c-bad.md", "---\ncalories: .inf\n---\n# Bad\n")

    library = RecipeLibrary(tmp_path)

    assert list(library.recipes) == ["pasta-1"]
    assert library.get_recipe("pasta-1").title == "Garlic Pasta"
    assert [p.name for p in library.skipped] == ["c-bad.md"]
    assert "Skipping" in caplog.text
    assert library.get_stats()["skipped_files"] == 1


def test_library_missing_directory(tmp_path):
    library = RecipeLibrary(tmp_path / "nope")
    assert library.recipes == {}
    assert library.get_stats() == {"total": 0}


@pytest.fixture
def library(make_recipe):
    return RecipeLibrary.from_recipes([
        make_recipe("pasta", "Garlic Pasta", ["spaghetti", "garlic", "olive oil"],
                    cuisine="italian", meal_type="dinner", prep_time=10, cook_time=15,
                    allergens=["gluten"]),
        make_recipe("pasta2", "Garlic Spaghetti", ["Spaghetti", "garlic", "olive  oil"],
                    cuisine="italian", meal_type="dinner"),
        make_recipe("tacos", "Fish Tacos", ["tortillas", "cod", "lime"],
                    cuisine="mexican", prep_time=20, cook_time=30),
        make_recipe("oats", "Overnight Oats", ["oats", "milk"], meal_type="breakfast"),
    ])


def test_search(library):
    assert [r.id for r in library.search(query="garlic")] == ["pasta", "pasta2"]
    assert [r.id for r in library.search(meal_type="dinner")] == ["pasta", "pasta2", "tacos"]
    assert [r.id for r in library.search(cuisine="Mexican")] == ["tacos"]
    assert [r.id for r in library.search(max_time_minutes=30)] == ["pasta", "pasta2", "oats"]
    assert [r.id for r in library.search(ingredients_include=["Lime"])] == ["tacos"]
    assert [r.id for r in library.search(ingredients_exclude=["garlic"])] == ["tacos", "oats"]
    assert "pasta" not in [r.id for r in library.search(exclude_allergens=["Gluten"])]


def test_find_near_duplicates(library):
    assert library.find_near_duplicates() == [("pasta", "pasta2", 1.0)]
    assert library.find_near_duplicates(threshold=1.1) == []


def test_stats(library):
    stats = library.get_stats()
    assert stats["total"] == 4
    assert stats["cuisines"] == 2
    assert stats["by_meal_type"] == {"dinner": 2, "unspecified": 1, "breakfast": 1}
