"""
Dinner Planner - Error taxonomy.

AuthorizationError and ValidationError always reach the caller.
PersistenceError is surfaced as a generic failure.
GenerationError is absorbed by the generation pipeline and only logged.
"""


class PlannerError(Exception):
    """Base class for all planner errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(PlannerError):
    """Caller is unauthenticated or not a member of the group."""


class ValidationError(PlannerError):
    """Input rejected; `message` is localized and safe to show the user."""


class PersistenceError(PlannerError):
    """A Supabase read or write failed."""


class GenerationError(PlannerError):
    """The generation backend failed or returned unusable output."""
