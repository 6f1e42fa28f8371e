"""Serving and interaction history loaded from a JSON file.

Layout:

    {
      "servings": [{"recipe_id": "r1", "served_on": "2024-03-01"}],
      "signals":  [{"recipe_id": "r1", "signal": "thumbs_up"}]
    }

Signals are listed oldest first; the taste profile is rebuilt from them on
every load.
"""

import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional

from .errors import HistoryFormatError
from .logging_utils import get_logger
from .models import LibraryRecipe, ServingRecord
from .taste import SIGNAL_WEIGHTS, TasteProfile, update_taste_profile

logger = get_logger(__name__)


@dataclass(frozen=True)
class InteractionSignal:
    """A single user reaction to a recipe."""
    recipe_id: str
    signal: str


@dataclass(frozen=True)
class History:
    servings: tuple[ServingRecord, ...] = ()
    signals: tuple[InteractionSignal, ...] = ()


def _parse_serving(entry) -> ServingRecord:
    if not isinstance(entry, dict):
        raise HistoryFormatError(f"serving entry must be an object, got {entry!r}")
    recipe_id = entry.get("recipe_id")
    served_on = entry.get("served_on")
    if not recipe_id or not isinstance(served_on, str):
        raise HistoryFormatError(f"serving entry needs recipe_id and served_on: {entry!r}")
    try:
        day = date.fromisoformat(served_on[:10])
    except ValueError as e:
        raise HistoryFormatError(f"invalid served_on date {served_on!r}") from e
    return ServingRecord(recipe_id=str(recipe_id), served_on=day)


def _parse_signal(entry) -> InteractionSignal:
    if not isinstance(entry, dict):
        raise HistoryFormatError(f"signal entry must be an object, got {entry!r}")
    recipe_id = entry.get("recipe_id")
    signal = entry.get("signal")
    if not recipe_id or signal not in SIGNAL_WEIGHTS:
        raise HistoryFormatError(f"signal entry needs recipe_id and a known signal: {entry!r}")
    return InteractionSignal(recipe_id=str(recipe_id), signal=signal)


def parse_history(data) -> History:
    """Validate a decoded history document."""
    if not isinstance(data, dict):
        raise HistoryFormatError("history document must be a JSON object")
    servings = data.get("servings") or []
    signals = data.get("signals") or []
    if not isinstance(servings, list) or not isinstance(signals, list):
        raise HistoryFormatError("servings and signals must be lists")
    return History(
        servings=tuple(_parse_serving(e) for e in servings),
        signals=tuple(_parse_signal(e) for e in signals),
    )


def load_history(path: Optional[Path]) -> History:
    """Load history from disk; a missing path means no history yet."""
    if path is None or not path.exists():
        return History()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise HistoryFormatError(f"{path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise HistoryFormatError(f"{path} is not UTF-8 text: {e}") from e
    except OSError as e:
        raise HistoryFormatError(f"Cannot read {path}: {e}") from e
    history = parse_history(data)
    logger.debug(
        "Loaded %d servings and %d signals from %s",
        len(history.servings), len(history.signals), path,
    )
    return history


def build_taste_profile(
    signals: Iterable[InteractionSignal],
    recipes: Mapping[str, LibraryRecipe],
) -> Optional[TasteProfile]:
    """Replay signals over the library; None when nothing applied."""
    profile = None
    for item in signals:
        recipe = recipes.get(item.recipe_id)
        if recipe is None:
            logger.warning("Ignoring %s signal for unknown recipe %s", item.signal, item.recipe_id)
            continue
        profile = update_taste_profile(profile, recipe, item.signal)
    return profile
