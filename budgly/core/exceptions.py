# budgly/core/exceptions.py
"""Errors raised by Budgly itself.

Backend failures (PostgREST ``APIError``, auth errors, network errors) are not
wrapped: they reach the caller exactly as the Supabase SDK raised them.
"""


class BudglyError(Exception):
    """Base class for errors raised by this package."""


class ValidationError(BudglyError):
    """User input rejected before any backend call."""


class NotAuthenticatedError(BudglyError):
    """An operation needed a signed-in user and there was none."""


class BudgetConflictError(BudglyError):
    """A budget kept changing underneath a conditional update."""

    def __init__(self, budget_id: str, attempts: int):
        super().__init__(f"Budget {budget_id} changed concurrently; gave up after {attempts} attempts")
        self.budget_id = budget_id
        self.attempts = attempts


class SettingsStorageError(BudglyError):
    """The settings file exists but cannot be read back, so it is not overwritten."""
