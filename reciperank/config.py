"""Configuration management for reciperank."""

import math
import os
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Optional

from .errors import ConfigurationError


# Neutral defaults used when a signal has no data behind it
NEUTRAL_SCORE = 0.5
DEFAULT_BASE_QUALITY = 0.55
CUISINE_MISMATCH_CREDIT = 0.4
ANY_MEAL_TYPE = "any"

# Library reuse gate
REUSE_SCORE_THRESHOLD = 0.78
REUSE_MAX_MISSING = 3

# Novelty
NOVELTY_WINDOW_DAYS = 14
NOVELTY_RECENT_DAYS = 7
NOVELTY_FLOOR = 0.1

# Weekly optimizer preferences
DEFAULT_TARGET_EFFORT_MINUTES = 35
EFFORT_FLOOR = 0.5  # multiplier when the week's average effort is off target
INGREDIENT_REUSE_STEP = 0.05
INGREDIENT_REUSE_CAP = 0.2

WEEK_DAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


@dataclass(frozen=True)
class WeightVector:
    """Weights for the five ranking signals."""
    inventory_coverage: float = 0.40
    explicit_preference: float = 0.20
    quality: float = 0.15
    taste_similarity: float = 0.15
    novelty: float = 0.10

    def __post_init__(self):
        """Weights must be non-negative, sum to 1 and favour coverage."""
        values = self.as_dict()
        for name, value in values.items():
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{name} weight must be a non-negative number")

        total = math.fsum(values.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ConfigurationError(f"weights must sum to 1.0, got {total:.6f}")

        others = [v for k, v in values.items() if k != "inventory_coverage"]
        if any(self.inventory_coverage <= v for v in others):
            raise ConfigurationError("inventory_coverage must be the largest weight")

    def as_dict(self) -> dict[str, float]:
        return {f.name: float(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def parse(cls, text: str) -> "WeightVector":
        """Parse "coverage,preference,quality,taste,novelty"."""
        parts = [p.strip() for p in text.split(",") if p.strip()]
        if len(parts) != 5:
            raise ConfigurationError(
                f"expected 5 comma-separated weights, got {len(parts)}"
            )
        try:
            values = [float(p) for p in parts]
        except ValueError as e:
            raise ConfigurationError(f"invalid weight value: {e}") from e
        return cls(*values)


DEFAULT_WEIGHTS = WeightVector()


@dataclass(frozen=True)
class WeeklyConstraints:
    """Variety rules for the weekly optimizer.

    The cuisine and protein limits are hard rules. target_effort_minutes and
    reward_ingredient_reuse only reorder the candidates that pass them.
    """
    days: int = len(WEEK_DAYS)
    cuisine_gap_days: int = 1  # cuisine may not repeat within this many previous days
    max_cuisine_per_week: Optional[int] = None
    max_protein_per_week: Optional[int] = None
    target_effort_minutes: Optional[int] = None  # average prep + cook per day
    reward_ingredient_reuse: bool = False

    def __post_init__(self):
        """Validate limits."""
        if not 1 <= self.days <= len(WEEK_DAYS):
            raise ConfigurationError(f"days must be between 1 and {len(WEEK_DAYS)}")
        if self.cuisine_gap_days < 0:
            raise ConfigurationError("cuisine_gap_days must be non-negative")
        for field_name in ("max_cuisine_per_week", "max_protein_per_week", "target_effort_minutes"):
            value = getattr(self, field_name)
            if value is not None and value < 1:
                raise ConfigurationError(f"{field_name} must be at least 1")

    @property
    def adjusts_order(self) -> bool:
        return self.target_effort_minutes is not None or self.reward_ingredient_reuse


@dataclass
class Config:
    """Main application configuration."""
    recipes_path: Path
    pantry_path: Path
    history_path: Optional[Path] = None

    log_level: str = "WARNING"
    default_servings: int = 2

    weights: WeightVector = field(default_factory=WeightVector)
    weekly_constraints: WeeklyConstraints = field(default_factory=WeeklyConstraints)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "Config":
        """Load configuration from environment variables."""
        if dotenv_path is None:
            project_root = Path(__file__).parent.parent / ".env"
            package_dir = Path(__file__).parent / ".env"
            cwd = Path.cwd() / ".env"

            for path in [cwd, project_root, package_dir]:
                if path.exists():
                    dotenv_path = path
                    break

        if dotenv_path and dotenv_path.exists():
            with open(dotenv_path) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        os.environ.setdefault(key.strip(), value.strip())

        recipes_path = Path(os.environ.get(
            "RECIPES_PATH",
            Path.home() / "Documents/recipes"
        ))
        pantry_path = Path(os.environ.get(
            "PANTRY_PATH",
            Path.home() / "Documents/pantry.md"
        ))
        history_path = os.environ.get("HISTORY_PATH")

        servings_raw = os.environ.get("DEFAULT_SERVINGS", "2")
        try:
            default_servings = int(servings_raw)
        except ValueError as e:
            raise ConfigurationError(f"DEFAULT_SERVINGS must be an integer, got {servings_raw!r}") from e
        if default_servings < 1:
            raise ConfigurationError("DEFAULT_SERVINGS must be at least 1")

        weights_raw = os.environ.get("RECIPERANK_WEIGHTS")
        weights = WeightVector.parse(weights_raw) if weights_raw else DEFAULT_WEIGHTS

        return cls(
            recipes_path=recipes_path,
            pantry_path=pantry_path,
            history_path=Path(history_path) if history_path else None,
            log_level=os.environ.get("RECIPERANK_LOG_LEVEL", "WARNING").upper(),
            default_servings=default_servings,
            weights=weights,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.recipes_path.exists():
            errors.append(f"Recipes path does not exist: {self.recipes_path}")

        if not self.pantry_path.exists():
            errors.append(f"Pantry file does not exist: {self.pantry_path}")

        if self.history_path and not self.history_path.exists():
            errors.append(f"History file does not exist: {self.history_path}")

        return errors
