"""
Groups transactions into per-category spending totals.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from ledger_mcp.models import Transaction
from ledger_mcp.services.category_classifier import CategoryGroupInfo, UNKNOWN_GROUP


@dataclass
class CategorySpending:
    """Running total for one category. Totals are signed cents."""
    id: str
    name: str
    group: str
    is_income: bool
    total: int = 0
    transactions: int = 0


class TransactionGrouper:
    """Buckets a transaction stream into CategorySpending entries."""

    def group_by_category(
        self,
        transactions: Iterable[Transaction],
        get_category_name: Callable[[str], str],
        get_group_info: Callable[[str], Optional[CategoryGroupInfo]],
        include_income: bool = False,
    ) -> Dict[str, CategorySpending]:
        """
        Sum signed amounts per category.

        Uncategorized transactions never appear. When include_income is False,
        transactions whose group is income are skipped entirely.

        Args:
            transactions: Transactions to group
            get_category_name: Resolves a category id to a display name
            get_group_info: Resolves a category id to its group (None if unknown)
            include_income: Whether income categories are included

        Returns:
            Dict mapping category id to its CategorySpending
        """
        spending: Dict[str, CategorySpending] = {}

        for txn in transactions:
            if not txn.category:
                continue

            group = get_group_info(txn.category) or UNKNOWN_GROUP
            if group.is_income and not include_income:
                continue

            entry = spending.get(txn.category)
            if entry is None:
                entry = CategorySpending(
                    id=txn.category,
                    name=get_category_name(txn.category),
                    group=group.name,
                    is_income=group.is_income,
                )
                spending[txn.category] = entry

            entry.total += txn.amount
            entry.transactions += 1

        return spending
