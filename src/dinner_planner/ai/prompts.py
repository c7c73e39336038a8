"""
Dinner Planner - Prompt templates.

Prompts are plain strings; the dish prompt asks for JSON only so the
response can go through `ai.parsing`.
"""

from dinner_planner.config import Language

INVALID_INPUT = "INVALID_INPUT"

OUTPUT_LANGUAGE: dict[Language, str] = {
    "en": "English",
    "ru": "Russian",
}

# Shown to the user when the model rejects a dish name
NOT_FOOD_MESSAGES: dict[Language, str] = {
    "en": "This is not a food-related dish name. Please enter a valid dish name.",
    "ru": "Это не название блюда, связанное с едой. Пожалуйста, введите валидное название блюда.",
}

# Used when the model rejects a name without a message
INVALID_DISH_MESSAGES: dict[Language, str] = {
    "en": "Please enter a valid dish name (food-related only)",
    "ru": "Пожалуйста, введите валидное название блюда (только связанное с едой)",
}


def not_food_message(lang: Language) -> str:
    return NOT_FOOD_MESSAGES.get(lang, NOT_FOOD_MESSAGES["en"])


def invalid_dish_message(lang: Language) -> str:
    return INVALID_DISH_MESSAGES.get(lang, INVALID_DISH_MESSAGES["en"])


def build_dish_prompt(dish_name: str, lang: Language) -> str:
    """Prompt for ingredients, recipe and nutrition of one dish."""
    return f"""You are a chef assistant. Your task is to validate if the input is a food-related dish name and generate ingredients/recipe plus an estimated nutrition profile.

IMPORTANT VALIDATION RULES:
1. If the input is NOT related to food/cooking (e.g., programming questions, general questions, commands, spam, non-food items), return: {{"error": "{INVALID_INPUT}", "message": "{not_food_message(lang)}"}}
2. If the input IS a valid dish name, proceed with generating ingredients and recipe.

If valid, generate a JSON object with:
- 'ingredients': array of ingredients, each with 'name' (string), 'amount' (number or string), 'unit' (string, e.g. kg, g, pcs, ml)
- 'recipe': string with cooking instructions (markdown allowed)
- 'calories': integer, estimated total kcal for the whole dish (not per 100g)
- 'proteins': integer, estimated total grams of protein
- 'fats': integer, estimated total grams of fat
- 'carbs': integer, estimated total grams of carbohydrates

Language of output: {OUTPUT_LANGUAGE.get(lang, "English")}.
Return ONLY valid JSON, no other text.

Input: {dish_name}"""


def _join(values: list[str], default: str) -> str:
    return ", ".join(values) or default


def build_ideas_prompt(preferences: dict, lang: Language) -> str:
    """
    Prompt for four dinner ideas.

    Restaurant-style when cuisines are chosen, simple home cooking otherwise.
    """
    sides = preferences.get("sides") or []
    proteins = preferences.get("proteins") or []
    veggies = preferences.get("veggies") or []
    treats = preferences.get("treats") or []
    cuisines = preferences.get("cuisines") or []
    language = OUTPUT_LANGUAGE.get(lang, "English")

    if cuisines:
        cuisine_list = ", ".join(cuisines)
        return f"""You are a creative chef. Suggest 4 distinct restaurant-style dinner ideas based on preferences.
Language of output: {language}.

Preferred Sides: {_join(sides, "Any")}
Preferred Proteins: {_join(proteins, "Any")}
Preferred Veggies: {_join(veggies, "Any")}
Cuisines: {cuisine_list}
Treats/Cheat meal desires: {_join(treats, "None")}

Guidelines:
1. Suggest RESTAURANT-STYLE dishes from the selected cuisines ({cuisine_list}).
2. Use authentic names and cooking techniques from these cuisines.
3. Make dishes sophisticated and restaurant-quality.
4. If 'Treats' are selected, include at least one option from there.
5. Suggest COMPLETE dish names with proper cuisine terminology."""

    if any([sides, proteins, veggies, treats]):
        preference_block = (
            f"Preferred Sides: {_join(sides, 'Any')}\n"
            f"Preferred Proteins: {_join(proteins, 'Any')}\n"
            f"Preferred Veggies: {_join(veggies, 'Any')}\n"
            f"Treats/Cheat meal desires: {_join(treats, 'None')}"
        )
    else:
        preference_block = "No specific preferences - suggest common home meals."

    return f"""You are a home cook. Suggest 4 distinct simple, everyday home-style dinner ideas based on preferences.
Language of output: {language}.

{preference_block}

Guidelines:
1. Suggest SIMPLE, EVERYDAY home-style dishes (like "гречка с сосисками", "макароны с котлетой", "рис с курицей").
2. Use common, accessible ingredients that people cook at home regularly.
3. Keep dishes practical and easy to prepare.
4. Avoid fancy restaurant names - use simple, straightforward dish descriptions.
5. If preferences are provided, use them, but keep it simple and homey.
6. Suggest COMPLETE dish names in simple language.

Examples of good home-style dishes: гречка с сосисками, макароны с фаршем, рис с курицей, картошка с котлетой, плов, борщ, суп с фрикадельками."""
