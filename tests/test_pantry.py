import pytest

from reciperank.models import InventoryItem
from reciperank.pantry import Pantry, categorize_ingredient, parse_pantry_line
from reciperank.scoring import compute_coverage

PANTRY = """# Pantry

## Format Guide
- name, quantity unit

## Protein
- Chicken breast, 2 lbs
- 6 eggs

## Spices
- Salt
- [x] Cumin (expires: 2025-01-01)
"""


@pytest.mark.parametrize("line,expected", [
    ("- Chicken breast, 2 lbs", InventoryItem("Chicken breast", "2 lbs")),
    ("- 6 eggs", InventoryItem("eggs", "6")),
    ("- 2 lbs chicken breast", InventoryItem("chicken breast", "2 lbs")),
    ("- 500g rice", InventoryItem("rice", "500g")),
    ("- 2 garlic bulbs", InventoryItem("garlic bulbs", "2")),
    ("* Salt", InventoryItem("Salt")),
    ("- [ ] Milk (expires: Friday)", InventoryItem("Milk")),
    ("- ", None),
])
def test_parse_pantry_line(line, expected):
    assert parse_pantry_line(line) == expected


def test_categorize_ingredient():
    assert categorize_ingredient("Chicken thighs") == "protein"
    assert categorize_ingredient("cheddar") == "dairy"
    assert categorize_ingredient("jasmine rice") == "grains"
    assert categorize_ingredient("dragonfruit") == "other"


def test_load_pantry(tmp_path):
    path = tmp_path / "pantry.md"
    path.write_text(PANTRY, encoding="utf-8")
    pantry = Pantry(path)

    assert [item.name for item in pantry.inventory] == ["Chicken breast", "eggs", "Salt", "Cumin"]
    assert pantry.has_item("  CHICKEN   breast")
    assert not pantry.has_item("name")
    assert [item.name for item in pantry.get_by_category("Protein")] == ["Chicken breast", "eggs"]
    assert pantry.get_stats() == {"total_items": 4, "by_category": {"protein": 2, "spices": 2}}


def test_missing_pantry_is_empty(tmp_path, caplog):
    pantry = Pantry(tmp_path / "missing.md")
    assert pantry.inventory == []
    assert "Pantry file not found" in caplog.text


def test_leading_quantity_lines_match_recipe_names(tmp_path):
    path = tmp_path / "pantry.md"
    path.write_text("## Protein\n- 2 lbs chicken breast\n- 1 can chickpeas\n", encoding="utf-8")
    pantry = Pantry(path)

    coverage, missing = compute_coverage(["Chicken Breast", "chickpeas"], pantry.inventory)
    assert coverage == 1.0
    assert missing == ()
