# budgly/core/ledger.py
import logging
from typing import Any, Dict, Iterable, List

from supabase import Client

from budgly.core import db
from budgly.core.models import EXPENSE, INCOME, Transaction, format_timestamp, utc_now

logger = logging.getLogger(__name__)

# Offered when entering a transaction; any other label is accepted too.
TRANSACTION_CATEGORIES = [
    "Food",
    "Transportation",
    "Shopping",
    "Bills",
    "Entertainment",
    "Health",
    "Salary",
    "Other",
]


def add_transaction(
    supabase_client: Client, user_id: str, data: Dict[str, Any], update_budget: bool = True
) -> str:
    """Records a transaction for ``user_id`` and returns its id.

    ``data`` holds amount, description, category, type and date (a datetime;
    defaults to now). Expenses also bump the current month's budget totals.
    If that second write fails the transaction stays recorded. Callers that
    want to report the two writes apart pass ``update_budget=False`` and call
    :func:`budgly.core.budgets.increment_category_spent` themselves.
    """
    date = data.get("date") or utc_now()
    record = {
        "userId": user_id,
        "amount": float(data["amount"]),
        "category": data["category"],
        "description": data.get("description", ""),
        "type": data["type"],
        "date": format_timestamp(date),
        "createdAt": format_timestamp(utc_now()),
    }
    transaction_id = db.insert_transaction(supabase_client, record)
    logger.info("Recorded %s %s of %.2f in '%s' for user %s",
                record["type"], transaction_id, record["amount"], record["category"], user_id)

    if update_budget and record["type"] == EXPENSE:
        # local import: budgets reads transactions through this module
        from budgly.core.budgets import increment_category_spent
        increment_category_spent(supabase_client, user_id, record["category"], record["amount"])

    return transaction_id


def get_transactions(supabase_client: Client, user_id: str) -> List[Transaction]:
    """Every transaction of the user, newest first."""
    return [Transaction.from_record(row) for row in db.select_transactions(supabase_client, user_id)]


def delete_transaction(supabase_client: Client, transaction_id: str) -> None:
    """Removes a transaction for good. Stored budget totals are left as they are."""
    deleted = db.delete_transaction(supabase_client, transaction_id)
    logger.info("Deleted transaction %s (%d row(s))", transaction_id, deleted)


def filter_by_month(transactions: Iterable[Transaction], month: str) -> List[Transaction]:
    return [t for t in transactions if t.date.strftime("%Y-%m") == month]


def calculate_totals(transactions: Iterable[Transaction]) -> Dict[str, float]:
    income = 0.0
    expenses = 0.0
    for transaction in transactions:
        if transaction.type == INCOME:
            income += transaction.amount
        elif transaction.type == EXPENSE:
            expenses += transaction.amount
    return {"income": income, "expenses": expenses, "balance": income - expenses}
