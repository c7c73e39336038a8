"""Dinner Planner - Web API for the Telegram Mini App."""
