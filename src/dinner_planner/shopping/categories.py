"""
Dinner Planner - Ingredient categorization.

Keyword lists are bilingual (Russian + English) and matched as plain
substrings of the lowercased name, so "барбарис" lands in pantry via "рис".
Categories are checked in declaration order and the first hit wins.
"""

from collections.abc import Iterable

from dinner_planner.shopping.models import (
    AggregatedIngredient,
    CategorizedIngredient,
    IngredientCategory,
)

CATEGORY_KEYWORDS: dict[IngredientCategory, tuple[str, ...]] = {
    IngredientCategory.VEGETABLES: (
        "помидор", "томат", "огурец", "перец", "брокколи", "кабачок", "баклажан", "гриб",
        "лук", "чеснок", "морковь", "картофель", "капуста", "салат", "шпинат",
        "tomato", "cucumber", "pepper", "broccoli", "zucchini", "eggplant", "mushroom",
        "onion", "garlic", "carrot", "potato", "cabbage", "lettuce", "spinach",
    ),
    IngredientCategory.FRUITS: (
        "яблоко", "банан", "апельсин", "лимон", "груша", "виноград", "ягода",
        "apple", "banana", "orange", "lemon", "pear", "grape", "berry",
    ),
    IngredientCategory.MEAT: (
        "мясо", "курица", "говядина", "свинина", "индейка", "рыба", "морепродукт", "фарш",
        "chicken", "beef", "pork", "turkey", "fish", "seafood", "meat", "mince",
    ),
    IngredientCategory.DAIRY: (
        "молоко", "сыр", "творог", "сметана", "йогурт", "масло", "сливки",
        "milk", "cheese", "cottage", "sour cream", "yogurt", "butter", "cream",
    ),
    IngredientCategory.BAKERY: (
        "хлеб", "булка", "батон", "хлебцы",
        "bread", "bun", "loaf", "roll",
    ),
    IngredientCategory.PANTRY: (
        "макароны", "рис", "гречка", "мука", "сахар", "масло растительное", "уксус",
        "pasta", "rice", "buckwheat", "flour", "sugar", "oil", "vinegar",
    ),
    IngredientCategory.SPICES: (
        "соль", "перец", "специя", "приправа", "паприка", "куркума", "кориандр",
        "salt", "pepper", "spice", "seasoning", "paprika", "turmeric", "coriander",
    ),
    IngredientCategory.OTHER: (),
}


def categorize(name: str | None) -> IngredientCategory:
    """
    Assign an ingredient name to a shopping list section.

    Examples:
        categorize("Молоко") -> IngredientCategory.DAIRY
        categorize("Unknown Gadget") -> IngredientCategory.OTHER
    """
    lower_name = (name or "").lower().strip()

    for category, keywords in CATEGORY_KEYWORDS.items():
        if category is IngredientCategory.OTHER:
            continue
        for keyword in keywords:
            if keyword.lower() in lower_name:
                return category

    return IngredientCategory.OTHER


def _sort_key(item: CategorizedIngredient) -> tuple[str, str, str]:
    # Russian collation puts ё right after е, not after я
    folded = item.name.casefold()
    return (folded.replace("ё", "е"), folded, item.name)


def group_by_category(
    rows: Iterable[AggregatedIngredient],
) -> dict[IngredientCategory, list[CategorizedIngredient]]:
    """
    Bucket shopping list rows by category.

    Every category is present in the result (possibly empty), in declaration
    order. Rows inside a category are sorted alphabetically by name.
    """
    grouped: dict[IngredientCategory, list[CategorizedIngredient]] = {
        category: [] for category in IngredientCategory
    }

    for row in rows:
        category = categorize(row.name)
        grouped[category].append(CategorizedIngredient.from_aggregated(row, category))

    for items in grouped.values():
        items.sort(key=_sort_key)

    return grouped
