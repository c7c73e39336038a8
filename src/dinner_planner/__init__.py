"""
Dinner Planner - meal planning for couples and holiday groups.

Pieces:
- Shopping: ingredient normalization, aggregation and categorization
- AI: cached ingredient/recipe/nutrition generation per dish name
- Services: dish lifecycle and shopping list flows over Supabase
"""

__version__ = "1.0.0"
