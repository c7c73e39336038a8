"""
Dinner Planner - Shopping list aggregation.

Folds the ingredient lines of the included dishes and the manual
ingredients of a group into one row per merge key. Pure and synchronous:
callers fetch dishes and manual ingredients beforehand.
"""

from collections.abc import Callable, Iterable

from dinner_planner.shopping.models import (
    AggregatedIngredient,
    Dish,
    DishStatus,
    ManualIngredient,
)
from dinner_planner.shopping.normalize import dish_merge_key, manual_merge_key, parse_amount

DishFilter = Callable[[Dish], bool]


def is_selected(dish: Dish) -> bool:
    """Default filter: only dishes both partners agreed on."""
    return dish.status == DishStatus.SELECTED.value


def aggregate(
    dishes: Iterable[Dish],
    manual_ingredients: Iterable[ManualIngredient] = (),
    include: DishFilter | None = None,
) -> list[AggregatedIngredient]:
    """
    Merge ingredient lines into shopping list rows.

    Dish lines are keyed with the plural fold, manual lines without it, so
    a dish "Tomatoes" and a manual "Tomatoes" stay separate rows. A row is
    purchased only while every line merged into it is purchased. Amounts are
    summed; the unit and display name of the first line are kept.

    Args:
        dishes: Dishes with their ingredient lines
        manual_ingredients: Manually entered lines (always included)
        include: Which dishes contribute (default: status "selected")

    Returns:
        Rows in first-encounter order of their merge keys
    """
    include = include or is_selected
    rows: dict[str, AggregatedIngredient] = {}

    for dish in dishes:
        if not include(dish):
            continue

        for ing in dish.ingredients:
            key = dish_merge_key(ing.name, ing.unit)
            amount = parse_amount(ing.amount)
            row = rows.get(key)

            if row is None:
                rows[key] = AggregatedIngredient(
                    name=(ing.name or "").strip(),
                    amount=amount,
                    unit=ing.unit or "",
                    is_purchased=bool(ing.is_purchased),
                    ids=[ing.id],
                    dish_ids=[dish.id],
                    dish_names=[dish.name],
                )
                continue

            row.amount += amount
            row.ids.append(ing.id)
            if dish.id not in row.dish_ids:
                row.dish_ids.append(dish.id)
                row.dish_names.append(dish.name)
            if not ing.is_purchased:
                row.is_purchased = False

    for manual in manual_ingredients:
        key = manual_merge_key(manual.name, manual.unit)
        amount = parse_amount(manual.amount)
        row = rows.get(key)

        if row is None:
            rows[key] = AggregatedIngredient(
                name=(manual.name or "").strip(),
                amount=amount,
                unit=manual.unit or "",
                is_purchased=bool(manual.is_purchased),
                is_manual=True,
                manual_id=manual.id,
            )
            continue

        row.amount += amount
        row.is_purchased = row.is_purchased and bool(manual.is_purchased)
        row.is_manual = True
        # Last one wins when several manual lines share a key
        row.manual_id = manual.id

    return list(rows.values())
