# budgly/core/db.py
import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from budgly.config import BUDGETS_TABLE, SUPABASE_KEY, SUPABASE_URL, TRANSACTIONS_TABLE
from budgly.core.models import format_timestamp, utc_now

logger = logging.getLogger(__name__)

# Thin wrappers over the two tables. Nothing here catches backend errors:
# APIError and friends go straight up to whoever called.


def get_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """Returns a fresh Supabase client; each one carries its own auth session."""
    return create_client(url or SUPABASE_URL, key or SUPABASE_KEY)


# --- transactions ---

def insert_transaction(supabase_client: Client, record: Dict[str, Any]) -> str:
    """Inserts one transaction row and returns the id the backend generated."""
    response = supabase_client.table(TRANSACTIONS_TABLE).insert(record).execute()
    return str(response.data[0]["id"])


def select_transactions(supabase_client: Client, user_id: str) -> List[Dict[str, Any]]:
    """All of a user's transaction rows, newest date first."""
    response = (
        supabase_client.table(TRANSACTIONS_TABLE)
        .select("*")
        .eq("userId", user_id)
        .order("date", desc=True)
        .execute()
    )
    return response.data or []


def delete_transaction(supabase_client: Client, transaction_id: str) -> int:
    response = supabase_client.table(TRANSACTIONS_TABLE).delete().eq("id", transaction_id).execute()
    return len(response.data or [])


# --- budgets ---

def select_budget(supabase_client: Client, user_id: str, month: str) -> Optional[Dict[str, Any]]:
    """Budget row for (user, month). Oldest first, in case a race created two."""
    response = (
        supabase_client.table(BUDGETS_TABLE)
        .select("*")
        .eq("userId", user_id)
        .eq("month", month)
        .order("createdAt")
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return response.data[0]


def insert_budget(supabase_client: Client, record: Dict[str, Any]) -> str:
    response = supabase_client.table(BUDGETS_TABLE).insert(record).execute()
    return str(response.data[0]["id"])


def update_budget(
    supabase_client: Client,
    budget_id: str,
    updates: Dict[str, Any],
    expected_updated_at: Optional[str] = None,
) -> bool:
    """Updates a budget row, always refreshing ``updatedAt``.

    With ``expected_updated_at`` the write only lands if the row still carries
    that stamp. Returns False when no row matched.
    """
    payload = {**updates, "updatedAt": format_timestamp(utc_now())}
    query = supabase_client.table(BUDGETS_TABLE).update(payload).eq("id", budget_id)
    if expected_updated_at is not None:
        query = query.eq("updatedAt", expected_updated_at)
    response = query.execute()
    if not response.data:
        logger.debug("Budget %s update matched no row (expected updatedAt=%s)", budget_id, expected_updated_at)
        return False
    return True
