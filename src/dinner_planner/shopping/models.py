"""Data models for shopping list aggregation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DishStatus(str, Enum):
    """Lifecycle of a dish in the weekly plan."""

    PROPOSED = "proposed"
    SELECTED = "selected"
    PURCHASED = "purchased"


class IngredientCategory(str, Enum):
    """Shopping list sections, in matching order."""

    VEGETABLES = "vegetables"
    FRUITS = "fruits"
    MEAT = "meat"
    DAIRY = "dairy"
    BAKERY = "bakery"
    PANTRY = "pantry"
    SPICES = "spices"
    OTHER = "other"


@dataclass
class IngredientOccurrence:
    """One ingredient line attached to a dish."""

    id: str
    name: str
    amount: Any = None  # number or free text, "1,5" allowed
    unit: str = ""
    is_purchased: bool = False
    dish_id: str | None = None

    @classmethod
    def from_record(cls, record: dict, dish_fk: str = "dish_id") -> "IngredientOccurrence":
        return cls(
            id=str(record.get("id", "")),
            name=record.get("name") or "",
            amount=record.get("amount"),
            unit=record.get("unit") or "",
            is_purchased=bool(record.get("is_purchased", False)),
            dish_id=record.get(dish_fk),
        )


@dataclass
class ManualIngredient:
    """An ingredient typed straight into the shopping list."""

    id: str
    group_id: str
    name: str
    amount: Any = None
    unit: str = ""
    is_purchased: bool = False

    @classmethod
    def from_record(cls, record: dict) -> "ManualIngredient":
        return cls(
            id=str(record.get("id", "")),
            group_id=str(record.get("couple_id", "")),
            name=record.get("name") or "",
            amount=record.get("amount"),
            unit=record.get("unit") or "",
            is_purchased=bool(record.get("is_purchased", False)),
        )


@dataclass
class Dish:
    """A dish with its ingredient lines, as fetched for one group."""

    id: str
    name: str
    status: str = DishStatus.PROPOSED.value
    ingredients: list[IngredientOccurrence] = field(default_factory=list)

    @classmethod
    def from_record(
        cls,
        record: dict,
        ingredients_key: str = "ingredients",
        dish_fk: str = "dish_id",
    ) -> "Dish":
        return cls(
            id=str(record.get("id", "")),
            name=record.get("name") or "",
            status=record.get("status") or DishStatus.PROPOSED.value,
            ingredients=[
                IngredientOccurrence.from_record(ing, dish_fk)
                for ing in record.get(ingredients_key) or []
            ],
        )


@dataclass
class AggregatedIngredient:
    """A merged shopping list row. Derived on every request, never stored."""

    name: str
    amount: float
    unit: str
    is_purchased: bool
    ids: list[str] = field(default_factory=list)
    dish_ids: list[str] = field(default_factory=list)
    dish_names: list[str] = field(default_factory=list)
    is_manual: bool = False
    manual_id: str | None = None


@dataclass(frozen=True)
class CategorizedIngredient:
    """An aggregated row with its shopping list section."""

    name: str
    amount: float
    unit: str
    is_purchased: bool
    category: IngredientCategory
    ids: tuple[str, ...] = ()
    dish_ids: tuple[str, ...] = ()
    dish_names: tuple[str, ...] = ()
    is_manual: bool = False
    manual_id: str | None = None

    @classmethod
    def from_aggregated(
        cls, row: AggregatedIngredient, category: IngredientCategory
    ) -> "CategorizedIngredient":
        return cls(
            name=row.name,
            amount=row.amount,
            unit=row.unit,
            is_purchased=row.is_purchased,
            category=category,
            ids=tuple(row.ids),
            dish_ids=tuple(row.dish_ids),
            dish_names=tuple(row.dish_names),
            is_manual=row.is_manual,
            manual_id=row.manual_id,
        )
