"""Command-line interface for reciperank."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .config import DEFAULT_TARGET_EFFORT_MINUTES, Config, WeeklyConstraints, WeightVector
from .errors import ReciperankError
from .history import load_history
from .logging_utils import init_logging
from .mappers import map_ranked_candidate, map_weekly_plan, match_score
from .models import PreferenceFilter, UserProfile
from .pantry import Pantry
from .planner import MealPlanner
from .recipe_parser import RecipeLibrary
from .scoring import should_reuse
from .shopping import build_shopping_list

console = Console()


def load_app(env_path: str = None):
    """Load application components."""
    config = Config.from_env(Path(env_path) if env_path else None)
    init_logging(config.log_level)

    errors = config.validate()
    for error in errors:
        console.print(f"[yellow]Warning:[/yellow] {error}")

    recipe_library = RecipeLibrary(config.recipes_path)
    pantry = Pantry(config.pantry_path) if config.pantry_path.exists() else None
    history = load_history(config.history_path)

    planner = MealPlanner(
        config,
        recipe_library,
        inventory=pantry.inventory if pantry else (),
        history=history,
    )
    return config, recipe_library, pantry, planner


def _request(meal_type, must_include, cuisine, household):
    user = UserProfile(cuisine_preferences=tuple(cuisine), household_size=household)
    preference_filter = PreferenceFilter(meal_type=meal_type, must_include_ingredient=must_include)
    return user, preference_filter


def _as_date(value):
    return value.date() if value else None


@click.group()
@click.option("--env", default=None, help="Path to .env file")
@click.pass_context
def cli(ctx, env):
    """reciperank - rank your recipes by what is in your kitchen."""
    ctx.ensure_object(dict)
    ctx.obj["env"] = env


@cli.command()
@click.option("--meal-type", default="any", help="breakfast, lunch, dinner, ... or any")
@click.option("--must-include", default=None, help="Ingredient the recipe must use")
@click.option("--cuisine", multiple=True, help="Preferred cuisine (repeatable)")
@click.option("--household", type=int, default=None, help="People to cook for")
@click.option("--weights", default=None, help="coverage,preference,quality,taste,novelty")
@click.option("--max-time", type=int, default=None, help="Maximum prep + cook minutes")
@click.option("--exclude-allergen", multiple=True, help="Allergen to leave out (repeatable)")
@click.option("--top", "-n", default=10, help="Number of recipes to show")
@click.option("--as-of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Score as of this date")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def rank(ctx, meal_type, must_include, cuisine, household, weights, max_time, exclude_allergen,
         top, as_of, as_json):
    """Rank recipes against your pantry and preferences."""
    try:
        config, _, _, planner = load_app(ctx.obj["env"])
        user, preference_filter = _request(meal_type, must_include, cuisine, household)
        weight_vector = WeightVector.parse(weights) if weights else None
        ranked = planner.rank(
            user, preference_filter, weight_vector, _as_date(as_of),
            max_time_minutes=max_time, exclude_allergens=exclude_allergen,
        )
    except ReciperankError as e:
        raise click.ClickException(str(e)) from e

    servings = household or config.default_servings
    shown = ranked[:top]

    if as_json:
        click.echo(json.dumps([map_ranked_candidate(c, servings) for c in shown], indent=2))
        return

    if not shown:
        console.print("[yellow]No recipes found.[/yellow]")
        return

    table = Table(title=f"Top {len(shown)} of {len(ranked)} recipes")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recipe", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Match", justify="right")
    table.add_column("Pref", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("Taste", justify="right")
    table.add_column("Novelty", justify="right")
    table.add_column("Missing", style="dim")

    for i, c in enumerate(shown, 1):
        title = c.recipe.title[:40]
        if should_reuse(c):
            title = f"{title} [bold green]✓[/bold green]"
        table.add_row(
            str(i),
            title,
            f"{c.composite_score:.2f}",
            f"{match_score(c.inventory_coverage)}%",
            f"{c.preference_score:.2f}",
            f"{c.quality_score:.2f}",
            f"{c.taste_similarity:.2f}",
            f"{c.novelty_bonus:.2f}",
            ", ".join(c.missing_ingredients[:4]) + (" ..." if c.missing_count > 4 else ""),
        )

    console.print(table)
    console.print("[dim]✓ = ready to cook from the library[/dim]")


@cli.command()
@click.option("--meal-type", default="any", help="breakfast, lunch, dinner, ... or any")
@click.option("--must-include", default=None, help="Ingredient every recipe should use")
@click.option("--cuisine", multiple=True, help="Preferred cuisine (repeatable)")
@click.option("--household", type=int, default=None, help="People to cook for")
@click.option("--cuisine-gap", default=1, help="Days before a cuisine may repeat")
@click.option("--max-cuisine", type=int, default=None, help="Max days per cuisine")
@click.option("--max-protein", type=int, default=None, help="Max days per main protein")
@click.option("--balance-effort", is_flag=True, help=f"Keep average effort near {DEFAULT_TARGET_EFFORT_MINUTES} minutes")
@click.option("--target-effort", type=int, default=None, help="Average prep + cook minutes to aim for")
@click.option("--reuse-ingredients", is_flag=True, help="Prefer recipes that share ingredients")
@click.option("--max-time", type=int, default=None, help="Maximum prep + cook minutes")
@click.option("--exclude-allergen", multiple=True, help="Allergen to leave out (repeatable)")
@click.option("--as-of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Plan as of this date")
@click.option("--output", "-o", default=None, help="Output file for the plan")
@click.option("--shopping", "-s", default=None, help="Output file for the shopping list")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of markdown")
@click.pass_context
def week(ctx, meal_type, must_include, cuisine, household, cuisine_gap, max_cuisine,
         max_protein, balance_effort, target_effort, reuse_ingredients, max_time,
         exclude_allergen, as_of, output, shopping, as_json):
    """Plan seven days of varied recipes."""
    try:
        config, _, _, planner = load_app(ctx.obj["env"])
        if target_effort is None and balance_effort:
            target_effort = DEFAULT_TARGET_EFFORT_MINUTES
        user, preference_filter = _request(meal_type, must_include, cuisine, household)
        constraints = WeeklyConstraints(
            cuisine_gap_days=cuisine_gap,
            max_cuisine_per_week=max_cuisine,
            max_protein_per_week=max_protein,
            target_effort_minutes=target_effort,
            reward_ingredient_reuse=reuse_ingredients,
        )
        plan = planner.plan_week(
            user, preference_filter, constraints, as_of=_as_date(as_of),
            max_time_minutes=max_time, exclude_allergens=exclude_allergen,
        )
    except ReciperankError as e:
        raise click.ClickException(str(e)) from e

    servings = household or config.default_servings

    if as_json:
        click.echo(json.dumps(map_weekly_plan(plan, servings), indent=2))
        return

    summary = planner.get_plan_summary(plan)
    shopping_list = build_shopping_list(plan)
    shopping_md = shopping_list.to_markdown()

    console.print(Markdown(summary))
    console.print()
    console.print(Markdown(shopping_md))

    if plan.is_partial:
        console.print(
            f"\n[yellow]⚠️  Only {len(plan.filled_slots)} of {len(plan.days)} days filled. "
            f"Add recipes or relax --cuisine-gap.[/yellow]"
        )

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(summary)
            if not shopping:
                f.write("\n\n---\n\n")
                f.write(shopping_md)
        console.print(f"\n[green]✅ Saved meal plan to {output}[/green]")

    if shopping:
        with open(shopping, "w", encoding="utf-8") as f:
            f.write(shopping_md)
        console.print(f"[green]✅ Saved shopping list to {shopping}[/green]")


@cli.command()
@click.argument("query", required=False)
@click.option("--meal-type", default=None, help="breakfast, lunch, dinner, ...")
@click.option("--cuisine", default=None, help="Only this cuisine")
@click.option("--max-time", type=int, default=None, help="Maximum prep + cook minutes")
@click.option("--include", multiple=True, help="Ingredient the recipe uses (repeatable)")
@click.option("--exclude", multiple=True, help="Ingredient the recipe must not use (repeatable)")
@click.option("--exclude-allergen", multiple=True, help="Allergen to leave out (repeatable)")
@click.pass_context
def search(ctx, query, meal_type, cuisine, max_time, include, exclude, exclude_allergen):
    """Search recipes with filters."""
    try:
        _, recipe_library, _, _ = load_app(ctx.obj["env"])
    except ReciperankError as e:
        raise click.ClickException(str(e)) from e

    results = recipe_library.search(
        query=query,
        meal_type=meal_type,
        cuisine=cuisine,
        max_time_minutes=max_time,
        ingredients_include=list(include),
        ingredients_exclude=list(exclude),
        exclude_allergens=list(exclude_allergen),
    )

    if not results:
        console.print("[yellow]No recipes found matching your criteria.[/yellow]")
        return

    table = Table(title=f"🔍 Search Results ({len(results)} recipes)")
    table.add_column("Recipe", style="cyan")
    table.add_column("Cuisine")
    table.add_column("Meal", style="dim")
    table.add_column("Time", justify="right")
    table.add_column("Ingredients", justify="right", style="green")

    for recipe in results[:20]:
        time_str = f"{recipe.total_time_minutes} min" if recipe.total_time_minutes else ""
        table.add_row(
            recipe.title[:40],
            recipe.cuisine or "",
            recipe.meal_type or "",
            time_str,
            str(len(recipe.ingredients)),
        )

    console.print(table)


@cli.command()
@click.option("--duplicates", is_flag=True, help="List recipes with near-identical ingredients")
@click.pass_context
def recipes(ctx, duplicates):
    """Show recipe library stats."""
    try:
        _, recipe_library, _, _ = load_app(ctx.obj["env"])
    except ReciperankError as e:
        raise click.ClickException(str(e)) from e

    stats = recipe_library.get_stats()
    if not stats["total"]:
        console.print("[yellow]No recipes found.[/yellow]")
        return

    meal_types = ", ".join(f"{k}: {v}" for k, v in sorted(stats["by_meal_type"].items()))
    console.print(Panel(
        f"[bold]Recipe Library Stats[/bold]\n\n"
        f"Total recipes: {stats['total']}\n"
        f"Cuisines: {stats['cuisines']}\n"
        f"Meal types: {meal_types}\n"
        f"With quality score: {stats['with_quality_score']}\n"
        f"Avg ingredients: {stats['avg_ingredients']:.1f}\n"
        f"Skipped files: {stats['skipped_files']}",
        title="📚 Recipes"
    ))

    if duplicates:
        pairs = recipe_library.find_near_duplicates()
        if not pairs:
            console.print("No near-duplicate recipes.")
            return
        table = Table(title="Near-duplicate recipes")
        table.add_column("Recipe", style="cyan")
        table.add_column("Looks like", style="cyan")
        table.add_column("Overlap", justify="right")
        for a, b, score in pairs:
            table.add_row(
                recipe_library.recipes[a].title,
                recipe_library.recipes[b].title,
                f"{score:.0%}",
            )
        console.print(table)


@cli.command()
@click.pass_context
def pantry(ctx):
    """Show pantry inventory."""
    try:
        config, _, pantry, _ = load_app(ctx.obj["env"])
    except ReciperankError as e:
        raise click.ClickException(str(e)) from e

    if not pantry:
        console.print("[yellow]No pantry inventory found.[/yellow]")
        console.print(f"Create one at: {config.pantry_path}")
        return

    stats = pantry.get_stats()
    console.print(Panel(
        f"[bold]Pantry Inventory[/bold]\n\nTotal items: {stats['total_items']}",
        title="🗄️ Pantry"
    ))

    for category, count in sorted(stats["by_category"].items()):
        items = pantry.get_by_category(category)
        item_names = [i.name for i in items[:5]]
        more = f" (+{count - 5} more)" if count > 5 else ""
        console.print(f"[bold]{category.title()}:[/bold] {', '.join(item_names)}{more}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
