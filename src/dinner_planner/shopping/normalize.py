"""
Dinner Planner - Ingredient normalization.

Builds the keys used to merge ingredient lines into shopping list rows.
The plural fold is a two-rule suffix heuristic, not a stemmer: "potatoes"
folds to "potato", and so does "hummus" to "hummu".
"""

import re

# Emoji, dingbats, private use area and the punctuation/symbol blocks
# between U+2011 and U+26FF.
_SYMBOLS = re.compile(
    "[\u2700-\u27bf\ue000-\uf8ff\u2011-\u26ff"
    "\U0001f000-\U0001f7ff\U0001f910-\U0001f9ff]"
)

_LEADING_NUMBER = re.compile(r"\s*(\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def strip_symbols(name: str) -> str:
    """Remove emoji and decorative symbols from a name."""
    return _SYMBOLS.sub("", name)


def normalize_name(name: str | None) -> str:
    """
    Normalize an ingredient name for matching.

    Examples:
        normalize_name("  Tomatoes 🍅 ") -> "tomatoes"
        normalize_name("Молоко") -> "молоко"
    """
    if not name:
        return ""
    return strip_symbols(name).strip().lower()


def normalize_unit(unit: str | None) -> str:
    """Trim and lowercase a unit. Units are never converted."""
    if not unit:
        return ""
    return unit.strip().lower()


def fold_plural(name: str) -> str:
    """
    Fold naive English plurals.

    Examples:
        fold_plural("tomatoes") -> "tomato"
        fold_plural("onions") -> "onion"
        fold_plural("glass") -> "glass"
    """
    if name.endswith("oes"):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def dish_merge_key(name: str | None, unit: str | None) -> str:
    """Merge key for ingredients attached to a dish (plural-folded)."""
    return f"{fold_plural(normalize_name(name))}-{normalize_unit(unit)}"


def manual_merge_key(name: str | None, unit: str | None) -> str:
    """Merge key for manually entered ingredients (no plural fold)."""
    return f"{normalize_name(name)}-{normalize_unit(unit)}"


def parse_amount(raw: object) -> float:
    """
    Parse an ingredient amount leniently.

    The first comma is read as a decimal separator and only the leading
    number is used. Anything unparsable (or negative) counts as zero.

    Examples:
        parse_amount("1,5") -> 1.5
        parse_amount("2 pcs") -> 2.0
        parse_amount("to taste") -> 0.0
    """
    if raw is None or isinstance(raw, bool):
        return 0.0

    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if value > 0 and value != float("inf") else 0.0

    match = _LEADING_NUMBER.match(str(raw).replace(",", ".", 1))
    if not match:
        return 0.0

    try:
        value = float(match.group(0))
    except ValueError:
        return 0.0
    return value if value != float("inf") else 0.0
