# backend/filters.py
"""Turn transaction-list query parameters into a SQL predicate."""
from .helpers import require_date
from .models import UNCATEGORIZED

ALL_CATEGORIES = "All"


class TransactionFilter:
    """Conjunction of ``column op ?`` clauses, always scoped to one user."""

    def __init__(self, user_id):
        self.user_id = user_id
        self.clauses = ["user_id = ?"]
        self.params = [user_id]

    def add(self, clause, value):
        self.clauses.append(clause)
        self.params.append(value)
        return self

    def where(self):
        return " AND ".join(self.clauses), list(self.params)

    def __repr__(self):
        sql, params = self.where()
        return f"<TransactionFilter {sql} {params}>"


def build_transaction_filter(user_id, start_date=None, end_date=None, tx_type=None, category=None):
    """Build the listing predicate.

    Date bounds are inclusive; a start after the end simply matches nothing.
    ``category`` of None/"" or "All" means no category restriction, anything
    else (the "Uncategorized" sentinel included) is an exact match.
    """
    f = TransactionFilter(user_id)
    if start_date:
        f.add("date >= ?", require_date(start_date, "startDate").isoformat())
    if end_date:
        f.add("date <= ?", require_date(end_date, "endDate").isoformat())
    if tx_type:
        f.add("type = ?", tx_type)
    if category and category != ALL_CATEGORIES:
        if category == UNCATEGORIZED:
            f.add("category = ?", UNCATEGORIZED)
        else:
            f.add("category = ?", category)
    return f
