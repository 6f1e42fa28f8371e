"""Shopping list generation from weekly plans."""

from dataclasses import dataclass, field

from .models import WeeklyPlan
from .normalize import normalize_ingredient_name
from .pantry import categorize_ingredient

CATEGORY_ORDER = [
    "protein", "dairy", "produce", "grains", "canned",
    "condiments", "spices", "frozen", "other",
]


@dataclass
class ShoppingListItem:
    """An item on the shopping list."""
    name: str
    category: str = "other"
    days: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        if len(self.days) > 1:
            return f"{self.name} ({len(self.days)} days)"
        return self.name


@dataclass
class ShoppingList:
    """Ingredients missing from the pantry for a weekly plan."""
    items: list[ShoppingListItem] = field(default_factory=list)

    def get_by_category(self) -> dict[str, list[ShoppingListItem]]:
        """Group items by category."""
        categories: dict[str, list[ShoppingListItem]] = {}
        for item in self.items:
            categories.setdefault(item.category, []).append(item)
        return categories

    def to_markdown(self) -> str:
        """Convert shopping list to markdown format."""
        lines = ["# Shopping List\n"]

        if not self.items:
            lines.append("Everything is already in the pantry.")
            return "\n".join(lines)

        by_category = self.get_by_category()
        ordered = [c for c in CATEGORY_ORDER if c in by_category]
        ordered += sorted(c for c in by_category if c not in CATEGORY_ORDER)
        for category in ordered:
            lines.append(f"\n## {category.title()}\n")
            for item in sorted(by_category[category], key=lambda x: x.name.lower()):
                lines.append(f"- [ ] {item}")

        return "\n".join(lines)


def build_shopping_list(plan: WeeklyPlan) -> ShoppingList:
    """Collect every missing ingredient across the filled days."""
    items: dict[str, ShoppingListItem] = {}

    for slot in plan.filled_slots:
        for name in slot.candidate.missing_ingredients:
            key = normalize_ingredient_name(name)
            if not key:
                continue
            if key not in items:
                items[key] = ShoppingListItem(name=name, category=categorize_ingredient(name))
            if slot.day not in items[key].days:
                items[key].days.append(slot.day)

    return ShoppingList(items=list(items.values()))
