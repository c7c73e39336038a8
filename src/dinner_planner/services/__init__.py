"""Dinner Planner - Request-level flows over the repository."""
