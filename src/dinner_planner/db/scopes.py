"""
Dinner Planner - Dish scopes.

Couples and holiday groups keep dishes in parallel tables. A DishScope
names the tables and foreign keys for one of them so the same code serves
both.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DishScope:
    name: str
    group_table: str
    group_fk: str
    dishes_table: str
    ingredients_table: str
    dish_fk: str


COUPLE_SCOPE = DishScope(
    name="couple",
    group_table="couples",
    group_fk="couple_id",
    dishes_table="dishes",
    ingredients_table="ingredients",
    dish_fk="dish_id",
)

HOLIDAY_SCOPE = DishScope(
    name="holiday",
    group_table="holiday_groups",
    group_fk="holiday_group_id",
    dishes_table="holiday_dishes",
    ingredients_table="holiday_dish_ingredients",
    dish_fk="holiday_dish_id",
)
