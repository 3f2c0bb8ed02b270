"""
Rolls category totals up into category groups.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from ledger_mcp.services.transaction_grouper import CategorySpending


@dataclass
class GroupSpending:
    name: str
    total: int = 0
    categories: List[CategorySpending] = field(default_factory=list)


class GroupAggregator:

    def aggregate_and_sort(self, spending_by_category: Dict[str, CategorySpending]) -> List[GroupSpending]:
        """
        Fold categories into groups (by group name) and sort both levels by
        absolute total, largest first. Ties keep their input order.
        """
        by_group: Dict[str, GroupSpending] = {}
        for category in spending_by_category.values():
            group = by_group.get(category.group)
            if group is None:
                group = GroupSpending(name=category.group)
                by_group[category.group] = group
            group.total += category.total
            group.categories.append(category)

        # sorted() is stable, so equal magnitudes stay in insertion order
        groups = sorted(by_group.values(), key=lambda g: abs(g.total), reverse=True)
        for group in groups:
            group.categories.sort(key=lambda c: abs(c.total), reverse=True)
        return groups
