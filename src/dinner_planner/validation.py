"""
Dinner Planner - Dish name pre-validation.

Cheap checks run before a dish row is created. Whether a name is really
food is decided by the generation backend; this only rejects input that
cannot be a dish name at all.
"""

import re

from dinner_planner.config import Language
from dinner_planner.errors import ValidationError

MIN_LENGTH = 2
MAX_LENGTH = 100

_DIGITS_ONLY = re.compile(r"^\d+$")
_QUESTION_PATTERNS = (
    re.compile(r"^(what|how|when|where|why|who|что|как|когда|где|почему|кто)\s+", re.IGNORECASE),
    re.compile(r"^(tell|explain|write|напиши|расскажи|объясни)\s+", re.IGNORECASE),
    re.compile(r"\?$"),
)

LENGTH_MESSAGES: dict[Language, str] = {
    "en": f"Please enter a dish name between {MIN_LENGTH} and {MAX_LENGTH} characters.",
    "ru": f"Название блюда должно быть от {MIN_LENGTH} до {MAX_LENGTH} символов.",
}

NOT_A_NAME_MESSAGES: dict[Language, str] = {
    "en": "This looks like a question or a command, not a dish name.",
    "ru": "Это похоже на вопрос или команду, а не на название блюда.",
}


def check_dish_name(name: str | None) -> str | None:
    """
    Return the reason a name is rejected, or None when it looks acceptable.

    Examples:
        check_dish_name("Борщ") -> None
        check_dish_name("12345") -> "digits_only"
        check_dish_name("how to cook rice?") -> "question"
    """
    trimmed = (name or "").strip()

    if len(trimmed) < MIN_LENGTH:
        return "too_short"
    if len(trimmed) > MAX_LENGTH:
        return "too_long"
    if _DIGITS_ONLY.match(trimmed):
        return "digits_only"
    for pattern in _QUESTION_PATTERNS:
        if pattern.search(trimmed):
            return "question"
    return None


def validate_dish_name(name: str | None, lang: Language) -> str:
    """
    Validate a dish name and return it trimmed.

    Raises:
        ValidationError: with a localized message
    """
    reason = check_dish_name(name)
    if reason in ("too_short", "too_long"):
        raise ValidationError(LENGTH_MESSAGES.get(lang, LENGTH_MESSAGES["en"]))
    if reason is not None:
        raise ValidationError(NOT_A_NAME_MESSAGES.get(lang, NOT_A_NAME_MESSAGES["en"]))
    return (name or "").strip()
