"""Novelty scoring from the user's recent serving history."""

from datetime import date
from typing import Iterable, Optional

from .config import NOVELTY_FLOOR, NOVELTY_RECENT_DAYS, NOVELTY_WINDOW_DAYS
from .models import LibraryRecipe, ServingRecord


def last_served(recipe_id: str, history: Iterable[ServingRecord]) -> Optional[date]:
    """Most recent serving date of a recipe, if any."""
    dates = [r.served_on for r in history if r.recipe_id == recipe_id]
    return max(dates) if dates else None


def novelty_for_age(days_since: int) -> float:
    """Score for a recipe last served `days_since` days ago.

    Anything served inside the current week sits at the floor; from there
    the score climbs linearly and is fully restored at the window edge.
    """
    if days_since < NOVELTY_RECENT_DAYS:
        return NOVELTY_FLOOR
    if days_since >= NOVELTY_WINDOW_DAYS:
        return 1.0
    progress = (days_since - NOVELTY_RECENT_DAYS) / (NOVELTY_WINDOW_DAYS - NOVELTY_RECENT_DAYS)
    return NOVELTY_FLOOR + (1.0 - NOVELTY_FLOOR) * progress


def compute_novelty(
    recipe: LibraryRecipe,
    recent_history: Iterable[ServingRecord],
    as_of: Optional[date] = None,
) -> float:
    """1.0 for recipes never served, decaying toward the floor with recency."""
    served_on = last_served(recipe.id, recent_history or ())
    if served_on is None:
        return 1.0

    today = as_of or date.today()
    days_since = max(0, (today - served_on).days)
    return novelty_for_age(days_since)
