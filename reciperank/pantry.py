"""Read-only pantry inventory loaded from a markdown file.

Format:

    ## Protein
    - Chicken breast, 2 lbs
    - 6 eggs

    ## Spices
    - Salt

Sections named like a guide ("Format", "Notes", ...) are ignored.
"""

import re
from pathlib import Path
from typing import Optional

from .logging_utils import get_logger
from .models import QUANTITY_UNITS, InventoryItem
from .normalize import normalize_ingredient_name

logger = get_logger(__name__)

# Category mappings for ingredients
CATEGORY_KEYWORDS = {
    "protein": [
        "chicken", "beef", "pork", "turkey", "lamb", "fish", "salmon", "tuna",
        "shrimp", "tofu", "tempeh", "egg", "bacon", "sausage", "ground"
    ],
    "dairy": [
        "milk", "cream", "cheese", "yogurt", "butter", "sour cream",
        "mozzarella", "parmesan", "cheddar", "feta", "ricotta"
    ],
    "canned": [
        "tomato paste", "crushed tomato", "bean", "chickpea", "coconut milk",
        "broth", "stock"
    ],
    "condiments": [
        "soy sauce", "hot sauce", "sriracha", "ketchup", "mustard", "mayo",
        "vinegar", "oil", "honey", "maple", "salsa", "gochujang", "harissa"
    ],
    "spices": [
        "salt", "pepper", "cumin", "paprika", "cayenne", "oregano", "thyme",
        "garlic powder", "onion powder", "chili powder", "turmeric",
        "cinnamon", "curry"
    ],
    "produce": [
        "onion", "garlic", "tomato", "lettuce", "spinach", "kale",
        "broccoli", "carrot", "celery", "potato", "mushroom", "zucchini",
        "cucumber", "avocado", "lemon", "lime", "ginger", "cilantro", "basil"
    ],
    "grains": [
        "rice", "pasta", "bread", "tortilla", "noodle", "quinoa", "oat",
        "flour", "panko", "breadcrumb", "bagel", "bun"
    ],
    "frozen": [
        "frozen", "ice cream"
    ],
}

SKIP_SECTIONS = {"format guide", "format", "guide", "notes", "instructions"}


def categorize_ingredient(name: str) -> str:
    """Best-effort shopping category for an ingredient name."""
    name_lower = normalize_ingredient_name(name)

    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(kw in name_lower for kw in keywords):
            return category

    return "other"


def parse_pantry_line(line: str) -> Optional[InventoryItem]:
    """Parse a pantry bullet such as "- Chicken breast, 2 lbs"."""
    line = re.sub(r"^[-*]\s*(\[.?\])?\s*", "", line.strip()).strip()
    if not line:
        return None

    # Expiration notes are not part of the name
    line = re.sub(r"\s*\(expires?:[^)]*\)", "", line).strip()

    # "name, quantity unit"
    match = re.match(r"^(.+?),\s*([\d.]+\s*\w*)\s*$", line)
    if match:
        return InventoryItem(name=match.group(1).strip(), quantity=match.group(2).strip())

    # "quantity unit name"
    match = re.match(rf"^([\d.]+(?:\s*{QUANTITY_UNITS}\b)?)\s+(.+)$", line, re.IGNORECASE)
    if match:
        return InventoryItem(name=match.group(2).strip(), quantity=match.group(1))

    return InventoryItem(name=line)


class Pantry:
    """Inventory snapshot read from a markdown pantry file."""

    def __init__(self, pantry_path: Path):
        self.pantry_path = pantry_path
        self.items: dict[str, InventoryItem] = {}
        self.categories: dict[str, str] = {}
        self._load_pantry()

    def _load_pantry(self):
        """Load pantry from markdown file."""
        if not self.pantry_path.exists():
            logger.warning("Pantry file not found: %s", self.pantry_path)
            return

        with open(self.pantry_path, "r", encoding="utf-8") as f:
            content = f.read()

        current_category = "other"
        skip_section = False

        for line in content.split("\n"):
            line = line.strip()

            if line.startswith("## "):
                current_category = line[3:].strip().lower()
                skip_section = current_category in SKIP_SECTIONS
                continue

            if skip_section:
                continue

            if line.startswith("- ") or line.startswith("* "):
                item = parse_pantry_line(line)
                if item:
                    key = normalize_ingredient_name(item.name)
                    self.items[key] = item
                    self.categories[key] = current_category

        logger.info("Loaded %d pantry items", len(self.items))

    @property
    def inventory(self) -> list[InventoryItem]:
        """Items in file order, ready for ranking."""
        return list(self.items.values())

    def has_item(self, name: str) -> bool:
        return normalize_ingredient_name(name) in self.items

    def get_by_category(self, category: str) -> list[InventoryItem]:
        return [
            item for key, item in self.items.items()
            if self.categories.get(key) == category.lower()
        ]

    def get_stats(self) -> dict:
        by_category: dict[str, int] = {}
        for category in self.categories.values():
            by_category[category] = by_category.get(category, 0) + 1
        return {
            "total_items": len(self.items),
            "by_category": by_category,
        }
