import logging
from pathlib import Path

import pytest

from reciperank.config import WEEK_DAYS, Config, WeeklyConstraints
from reciperank.errors import ConfigurationError
from reciperank.history import History, InteractionSignal
from reciperank.models import InventoryItem, PreferenceFilter
from reciperank.planner import (
    MealPlanner,
    build_week,
    effort_balance,
    ingredient_reuse_bonus,
    primary_protein,
)
from reciperank.recipe_parser import RecipeLibrary


def ids(plan):
    return [slot.candidate.recipe_id if slot.candidate else None for slot in plan.days]


def test_full_week_in_ranking_order(make_candidate):
    pool = [make_candidate(f"r{i}", 0.9 - i * 0.05) for i in range(10)]
    plan = build_week(list(reversed(pool)))

    assert [slot.day for slot in plan.days] == list(WEEK_DAYS)
    assert plan.recipe_ids() == [f"r{i}" for i in range(7)]
    assert not plan.is_partial


def test_week_never_repeats_a_recipe(make_candidate):
    pool = [make_candidate("a", 0.9), make_candidate("a", 0.9), make_candidate("b", 0.8)]
    plan = build_week(pool)
    assert plan.recipe_ids() == ["a", "b"]
    assert len(set(plan.recipe_ids())) == len(plan.recipe_ids())


def test_small_pool_gives_partial_plan(make_candidate):
    plan = build_week([make_candidate("a", 0.9), make_candidate("b", 0.8)])
    assert plan.is_partial
    assert len(plan.filled_slots) == 2
    assert plan.missing_days == list(WEEK_DAYS[2:])


def test_empty_pool_gives_empty_week():
    plan = build_week([])
    assert len(plan.days) == 7
    assert plan.filled_slots == []


def test_cuisine_gap_defers_candidates(make_candidate):
    pool = [
        make_candidate("a", 0.9, cuisine="italian"),
        make_candidate("b", 0.8, cuisine="italian"),
        make_candidate("c", 0.7, cuisine="mexican"),
    ]
    assert ids(build_week(pool))[:3] == ["a", "c", "b"]
    assert ids(build_week(pool, WeeklyConstraints(cuisine_gap_days=0)))[:3] == ["a", "b", "c"]


def test_cuisine_gap_counts_empty_days(make_candidate):
    pool = [make_candidate("a", 0.9, cuisine="italian"), make_candidate("b", 0.8, cuisine="italian")]
    plan = build_week(pool, WeeklyConstraints(cuisine_gap_days=2))
    assert ids(plan)[:4] == ["a", None, None, "b"]


def test_candidates_without_cuisine_are_never_blocked(make_candidate):
    pool = [make_candidate(f"r{i}", 0.9 - i * 0.1) for i in range(3)]
    plan = build_week(pool, WeeklyConstraints(cuisine_gap_days=3, max_cuisine_per_week=1))
    assert plan.recipe_ids() == ["r0", "r1", "r2"]


def test_max_cuisine_per_week(make_candidate):
    pool = [
        make_candidate("a", 0.9, cuisine="italian"),
        make_candidate("b", 0.8, cuisine="italian"),
        make_candidate("c", 0.7, cuisine="mexican"),
    ]
    plan = build_week(pool, WeeklyConstraints(max_cuisine_per_week=1))
    assert plan.recipe_ids() == ["a", "c"]


def test_max_protein_per_week(make_candidate):
    pool = [
        make_candidate("a", 0.9, ingredients=["Chicken thighs", "rice"]),
        make_candidate("b", 0.8, ingredients=["chicken breast"]),
        make_candidate("c", 0.7, ingredients=["tofu"]),
    ]
    assert primary_protein(pool[0]) == "chicken"
    plan = build_week(pool, WeeklyConstraints(max_protein_per_week=1))
    assert plan.recipe_ids() == ["a", "c"]


def test_shorter_week(make_candidate):
    plan = build_week([make_candidate(f"r{i}", 0.5) for i in range(5)], WeeklyConstraints(days=3))
    assert [slot.day for slot in plan.days] == ["Monday", "Tuesday", "Wednesday"]
    assert not plan.is_partial


def test_ingredient_reuse_reorders_eligible_candidates(make_candidate):
    pool = [
        make_candidate("a", 0.9, ingredients=["rice", "black beans"]),
        make_candidate("b", 0.8, ingredients=["lobster"]),
        make_candidate("c", 0.78, ingredients=["Rice", "black  beans"]),
    ]
    assert build_week(pool).recipe_ids() == ["a", "b", "c"]
    plan = build_week(pool, WeeklyConstraints(reward_ingredient_reuse=True))
    assert plan.recipe_ids() == ["a", "c", "b"]


def test_ingredient_reuse_bonus_is_capped(make_candidate):
    used = {f"item {i}" for i in range(10)}
    candidate = make_candidate("a", 0.9, ingredients=sorted(used))
    assert ingredient_reuse_bonus(candidate, set()) == 0.0
    assert ingredient_reuse_bonus(candidate, {"item 1"}) == pytest.approx(0.05)
    assert ingredient_reuse_bonus(candidate, used) == pytest.approx(0.2)


def test_target_effort_keeps_week_near_average(make_candidate):
    pool = [
        make_candidate("a", 0.9, prep_time=30),
        make_candidate("b", 0.8, cook_time=120),
        make_candidate("c", 0.7, cook_time=30),
    ]
    assert build_week(pool).recipe_ids() == ["a", "b", "c"]
    plan = build_week(pool, WeeklyConstraints(target_effort_minutes=30))
    assert plan.recipe_ids() == ["a", "c", "b"]


def test_effort_balance(make_candidate):
    candidate = make_candidate("a", 0.9, prep_time=10, cook_time=20)
    assert effort_balance(candidate, 0, 0, 30) == 1.0
    assert effort_balance(candidate, 90, 1, 30) == pytest.approx(0.0)
    assert effort_balance(candidate, 30, 1, 40) == pytest.approx(0.75)


def test_order_preferences_never_break_variety_rules(make_candidate):
    pool = [
        make_candidate("a", 0.9, cuisine="italian", ingredients=["pasta"]),
        make_candidate("b", 0.5, cuisine="italian", ingredients=["pasta"]),
        make_candidate("c", 0.4, cuisine="thai", ingredients=["rice"]),
    ]
    constraints = WeeklyConstraints(reward_ingredient_reuse=True, target_effort_minutes=30)
    assert build_week(pool, constraints).recipe_ids() == ["a", "c", "b"]


@pytest.mark.parametrize("kwargs", [
    {"days": 0},
    {"days": 8},
    {"cuisine_gap_days": -1},
    {"max_cuisine_per_week": 0},
    {"max_protein_per_week": 0},
    {"target_effort_minutes": 0},
])
def test_invalid_constraints(kwargs):
    with pytest.raises(ConfigurationError):
        WeeklyConstraints(**kwargs)


@pytest.fixture
def planner(make_recipe):
    recipes = [
        make_recipe("pasta", "Garlic Pasta", ["spaghetti", "garlic", "olive oil"], cuisine="italian", meal_type="dinner"),
        make_recipe("stew", "Beef Stew", ["beef chuck", "carrots"], cuisine="french", meal_type="dinner"),
        make_recipe("oats", "Overnight Oats", ["oats", "milk"], meal_type="breakfast"),
    ]
    config = Config(recipes_path=Path("recipes"), pantry_path=Path("pantry.md"))
    return MealPlanner(
        config,
        RecipeLibrary.from_recipes(recipes),
        inventory=[InventoryItem("Spaghetti"), InventoryItem("garlic"), InventoryItem("olive oil")],
        history=History(signals=(InteractionSignal("stew", "thumbs_up"),)),
    )


def test_planner_ranks_library(planner):
    ranked = planner.rank(preference_filter=PreferenceFilter(meal_type="dinner"))
    assert ranked[0].recipe_id == "pasta"
    assert ranked[-1].recipe_id == "oats"


def test_planner_builds_taste_profile_from_history(planner):
    assert planner.taste_profile is not None
    ranked = {c.recipe_id: c for c in planner.rank()}
    assert ranked["stew"].taste_similarity == pytest.approx(1.0)


def test_planner_logs_partial_week(planner, caplog):
    with caplog.at_level(logging.WARNING, logger="reciperank"):
        plan = planner.plan_week()
    assert plan.is_partial
    assert sorted(plan.recipe_ids()) == ["oats", "pasta", "stew"]
    assert "Only 3 of 7 days" in caplog.text


def test_plan_summary(planner):
    plan = planner.plan_week()
    summary = planner.get_plan_summary(plan)
    assert summary.startswith("# Weekly Plan")
    assert "**Monday**: Garlic Pasta" in summary
    assert "_no recipe available_" in summary
    assert "missing: beef chuck, carrots" in summary


def test_planner_filters_pool_by_time_and_allergens(make_recipe, caplog):
    recipes = [
        make_recipe("quick", ingredients=["eggs"], prep_time=5, cook_time=5),
        make_recipe("slow", ingredients=["beef"], cook_time=180),
        make_recipe("nutty", ingredients=["peanuts"], prep_time=10, allergens=["Peanuts"]),
    ]
    config = Config(recipes_path=Path("recipes"), pantry_path=Path("pantry.md"))
    planner = MealPlanner(config, RecipeLibrary.from_recipes(recipes))

    with caplog.at_level(logging.INFO, logger="reciperank"):
        ranked = planner.rank(max_time_minutes=30, exclude_allergens=["peanuts"])
    assert [c.recipe_id for c in ranked] == ["quick"]
    assert "Filtered out 2 recipe(s)" in caplog.text

    plan = planner.plan_week(exclude_allergens=["peanuts"])
    assert sorted(plan.recipe_ids()) == ["quick", "slow"]
