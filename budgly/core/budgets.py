# budgly/core/budgets.py
"""Monthly budgets and the spent-vs-budgeted aggregation.

A user has at most one budget per month ("YYYY-MM"). Each budget carries a
list of category allocations whose ``spent`` field is a cache: the
authoritative figure is the sum of the user's expense transactions for that
category, which :func:`compute_summary` recomputes on every read. The
incremental path (:func:`increment_category_spent`) keeps the stored numbers
roughly current between recomputes and is never corrected by deletions.

Writes that read a budget first are sent conditioned on the ``updatedAt``
stamp that was read. If somebody else wrote in between, the budget is read
again and the change re-applied.
"""
import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from supabase import Client

from budgly.core import db
from budgly.core import ledger
from budgly.core.exceptions import BudgetConflictError, ValidationError
from budgly.core.models import Budget, CategoryBudget, Transaction, format_timestamp, utc_now

logger = logging.getLogger(__name__)

MAX_UPDATE_ATTEMPTS = 3

DEFAULT_CATEGORIES = [
    "Housing",
    "Insurance",
    "Phone",
    "Utilities",
    "Groceries",
    "Transportation",
    "Entertainment",
    "Other",
]


def current_month(now: Optional[datetime] = None) -> str:
    """Month key for ``now`` (default: the current UTC time)."""
    return (now or utc_now()).strftime("%Y-%m")


def get_budget(supabase_client: Client, user_id: str, month: str) -> Optional[Budget]:
    record = db.select_budget(supabase_client, user_id, month)
    if record is None:
        return None
    return Budget.from_record(record)


def create_budget(supabase_client: Client, user_id: str, month: str) -> str:
    now = format_timestamp(utc_now())
    budget_id = db.insert_budget(supabase_client, {
        "userId": user_id,
        "month": month,
        "totalIncome": 0,
        "totalExpenses": 0,
        "categoryBudgets": [],
        "createdAt": now,
        "updatedAt": now,
    })
    logger.info("Created budget %s for user %s, month %s", budget_id, user_id, month)
    return budget_id


def get_or_create_budget(supabase_client: Client, user_id: str, month: str) -> Budget:
    """Returns the month's budget, creating an empty one first if needed.

    Two callers racing on a month with no budget can both create one;
    :func:`get_budget` then always hands back the oldest of them.
    """
    budget = get_budget(supabase_client, user_id, month)
    if budget is None:
        create_budget(supabase_client, user_id, month)
        budget = get_budget(supabase_client, user_id, month)
    return budget


def increment_category_spent(
    supabase_client: Client,
    user_id: str,
    category: str,
    amount: float,
    month: Optional[str] = None,
) -> None:
    """Adds a freshly recorded expense to the stored running totals.

    Does nothing when the month has no budget yet. ``totalExpenses`` always
    grows by ``amount``; a category's ``spent`` only if that exact category is
    already allocated (no entry is created for it).
    """
    month = month or current_month()
    budget = None
    for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
        budget = get_budget(supabase_client, user_id, month)
        if budget is None:
            logger.debug("No budget for user %s in %s; spent increment skipped", user_id, month)
            return

        categories = [
            {**entry.to_record(), "spent": entry.spent + amount} if entry.category == category else entry.to_record()
            for entry in budget.category_budgets
        ]
        updates = {
            "categoryBudgets": categories,
            "totalExpenses": budget.total_expenses + amount,
        }
        if db.update_budget(supabase_client, budget.id, updates, expected_updated_at=budget.version):
            return
        logger.warning("Budget %s changed while adding spent (attempt %d)", budget.id, attempt)

    raise BudgetConflictError(budget.id, MAX_UPDATE_ATTEMPTS)


def summarize_spending(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Sum of expense amounts per category."""
    spending: Dict[str, float] = defaultdict(float)
    for transaction in transactions:
        if transaction.is_expense:
            spending[transaction.category] += transaction.amount
    return dict(spending)


def apply_spending(budget: Budget, spending: Dict[str, float]) -> Budget:
    """Copy of ``budget`` whose categories' spent come from ``spending``."""
    categories = [
        replace(entry, spent=spending.get(entry.category, 0.0))
        for entry in budget.category_budgets
    ]
    return budget.copy(category_budgets=categories)


def compute_summary(supabase_client: Client, user_id: str, month: str) -> Optional[Budget]:
    """Budget for ``month`` with every category's spent recomputed.

    All of the user's transactions are summed, whatever their date. The
    result is for display only and is not written back, so stored fields
    such as ``totalExpenses`` keep whatever value they had.
    """
    budget = get_budget(supabase_client, user_id, month)
    if budget is None:
        return None
    transactions = ledger.get_transactions(supabase_client, user_id)
    return apply_spending(budget, summarize_spending(transactions))


def total_budgeted(budget: Budget) -> float:
    return sum(entry.budgeted for entry in budget.category_budgets)


def total_spent(budget: Budget) -> float:
    return sum(entry.spent for entry in budget.category_budgets)


def remaining(budget: Budget) -> float:
    """Income left once every category's spent is taken out."""
    return budget.total_income - total_spent(budget)


class BudgetDraft:
    """Working copy of a budget's income and per-category allocations.

    Edits stay local until :meth:`save` sends them in a single update. A
    budget with no categories yet starts from ``default_categories``.
    """

    def __init__(self, budget: Budget, default_categories: Sequence[str] = DEFAULT_CATEGORIES):
        self.budget = budget
        self.total_income = budget.total_income
        if budget.category_budgets:
            self.category_budgets: List[CategoryBudget] = [replace(c) for c in budget.category_budgets]
        else:
            self.category_budgets = [CategoryBudget(category=name) for name in default_categories]

    @property
    def total_budgeted(self) -> float:
        return sum(entry.budgeted for entry in self.category_budgets)

    def find_category(self, category: str) -> Optional[CategoryBudget]:
        for entry in self.category_budgets:
            if entry.category == category:
                return entry
        return None

    def set_income(self, value: float) -> None:
        if value < 0:
            raise ValidationError("Income cannot be negative")
        self.total_income = float(value)

    def set_category_budgeted(self, category: str, value: float) -> None:
        category = (category or "").strip()
        if not category:
            raise ValidationError("Category name is required")
        if value < 0:
            raise ValidationError("Budgeted amount cannot be negative")
        entry = self.find_category(category)
        if entry is None:
            self.category_budgets.append(CategoryBudget(category=category, budgeted=float(value)))
        else:
            entry.budgeted = float(value)

    def _rebase(self, fresh: Budget) -> None:
        # keep spent written by others since the draft was opened
        for entry in self.category_budgets:
            stored = fresh.find_category(entry.category)
            if stored is not None:
                entry.spent = stored.spent
        for stored in fresh.category_budgets:
            if self.find_category(stored.category) is None:
                self.category_budgets.append(replace(stored))
        self.budget = fresh

    def save(self, supabase_client: Client) -> Budget:
        """Persists income and categories; returns the budget as stored."""
        for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
            updates = {
                "totalIncome": self.total_income,
                "categoryBudgets": [entry.to_record() for entry in self.category_budgets],
            }
            if db.update_budget(supabase_client, self.budget.id, updates, expected_updated_at=self.budget.version):
                saved = get_budget(supabase_client, self.budget.user_id, self.budget.month)
                self.budget = saved or self.budget
                return self.budget

            logger.warning("Budget %s changed since it was opened (attempt %d)", self.budget.id, attempt)
            fresh = get_budget(supabase_client, self.budget.user_id, self.budget.month)
            if fresh is None:
                break
            self._rebase(fresh)

        raise BudgetConflictError(self.budget.id, MAX_UPDATE_ATTEMPTS)
