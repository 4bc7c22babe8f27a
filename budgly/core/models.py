# budgly/core/models.py
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Rows come back from Supabase as dicts with the camelCase column names below.
# These dataclasses give them attributes and convert in both directions.

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accepts a datetime or an ISO-8601 string as returned by PostgREST."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


@dataclass(frozen=True)
class User:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class Transaction:
    id: str
    user_id: str
    amount: float
    category: str
    description: str
    date: datetime
    type: str
    created_at: Optional[datetime] = None

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Transaction":
        return cls(
            id=str(record["id"]),
            user_id=record["userId"],
            amount=float(record["amount"]),
            category=record.get("category") or "",
            description=record.get("description") or "",
            date=parse_timestamp(record["date"]),
            type=record["type"],
            created_at=parse_timestamp(record.get("createdAt")),
        )


@dataclass
class CategoryBudget:
    category: str
    budgeted: float = 0.0
    spent: float = 0.0

    @property
    def remaining(self) -> float:
        return self.budgeted - self.spent

    def to_record(self) -> Dict[str, Any]:
        return {"category": self.category, "budgeted": self.budgeted, "spent": self.spent}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CategoryBudget":
        return cls(
            category=record["category"],
            budgeted=float(record.get("budgeted") or 0),
            spent=float(record.get("spent") or 0),
        )


@dataclass
class Budget:
    id: str
    user_id: str
    month: str
    total_income: float = 0.0
    total_expenses: float = 0.0
    category_budgets: List[CategoryBudget] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # updatedAt exactly as the backend returned it; conditional writes compare against it
    version: Optional[str] = None

    def find_category(self, category: str) -> Optional[CategoryBudget]:
        for entry in self.category_budgets:
            if entry.category == category:
                return entry
        return None

    def copy(self, **changes: Any) -> "Budget":
        changes.setdefault("category_budgets", [replace(c) for c in self.category_budgets])
        return replace(self, **changes)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Budget":
        return cls(
            id=str(record["id"]),
            user_id=record["userId"],
            month=record["month"],
            total_income=float(record.get("totalIncome") or 0),
            total_expenses=float(record.get("totalExpenses") or 0),
            category_budgets=[CategoryBudget.from_record(c) for c in record.get("categoryBudgets") or []],
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
            version=record.get("updatedAt"),
        )
