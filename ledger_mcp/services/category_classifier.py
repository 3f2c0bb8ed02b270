"""
Category classification.

Maps each category to its group and derives the income and
savings/investment flags used by the spending and monthly reports.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set

from ledger_mcp.models import Category, CategoryGroup

UNKNOWN_CATEGORY_NAME = "Unknown Category"
UNKNOWN_GROUP_NAME = "Unknown Group"

SAVINGS_GROUP_KEYWORDS = ("investment", "savings")


@dataclass(frozen=True)
class CategoryGroupInfo:
    """Group a category belongs to, with the flags derived for it."""
    id: Optional[str]
    name: str
    is_income: bool
    is_savings_or_investment: bool


# Used wherever a category cannot be resolved to a group
UNKNOWN_GROUP = CategoryGroupInfo(
    id=None,
    name=UNKNOWN_GROUP_NAME,
    is_income=False,
    is_savings_or_investment=False,
)


def is_savings_or_investment_group(group_name: str) -> bool:
    lowered = group_name.lower()
    return any(keyword in lowered for keyword in SAVINGS_GROUP_KEYWORDS)


class CategoryMapper:
    """
    Lookup tables built from the full category and category-group lists.

    Income is taken from the category's own is_income flag, which wins over
    the group's flag when the two disagree. Savings/investment is derived from
    the group name.
    """

    def __init__(self, categories: Iterable[Category], category_groups: Iterable[CategoryGroup]):
        self.category_names: Dict[str, str] = {}
        self.group_names: Dict[str, str] = {}
        self.category_to_group: Dict[str, CategoryGroupInfo] = {}
        self.investment_categories: Set[str] = set()
        self.income_categories: Set[str] = set()

        categories = list(categories)
        for group in category_groups:
            self.group_names[group.id] = group.name

        for cat in categories:
            self.category_names[cat.id] = cat.name

            group_name = self.group_names.get(cat.group_id) or UNKNOWN_GROUP_NAME
            info = CategoryGroupInfo(
                id=cat.group_id,
                name=group_name,
                is_income=bool(cat.is_income),
                is_savings_or_investment=is_savings_or_investment_group(group_name),
            )
            self.category_to_group[cat.id] = info

            if info.is_savings_or_investment:
                self.investment_categories.add(cat.id)
            if info.is_income:
                self.income_categories.add(cat.id)

    def get_category_name(self, category_id: str) -> str:
        return self.category_names.get(category_id) or UNKNOWN_CATEGORY_NAME

    def get_group_info(self, category_id: str) -> Optional[CategoryGroupInfo]:
        return self.category_to_group.get(category_id)

    def is_investment_category(self, category_id: str) -> bool:
        return category_id in self.investment_categories

    def is_income_category(self, category_id: str) -> bool:
        return category_id in self.income_categories
