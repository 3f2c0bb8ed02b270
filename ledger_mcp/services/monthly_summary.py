"""
Monthly income / expense / savings summary.

Two steps:
1. MonthlyTransactionAggregator buckets transactions per calendar month into
   income, regular expenses and investments/savings.
2. MonthlySummaryCalculator averages the buckets and derives two savings rates:
   - traditional: (income - expenses) / income
   - total: (income - expenses + investments) / income

Usage:
    months = MonthlyTransactionAggregator().aggregate(txns, income_ids, investment_ids)
    summary = MonthlySummaryCalculator().calculate_averages(months)
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from ledger_mcp.models import Transaction


@dataclass
class MonthData:
    """
    Totals for one calendar month.

    income, expenses and investments are magnitudes (never negative).
    """
    year: int
    month: int
    income: int = 0
    expenses: int = 0
    investments: int = 0
    transactions: int = 0

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month:02d}"


@dataclass
class MonthlySummary:
    avg_income: float = 0
    avg_expenses: float = 0
    avg_investments: float = 0
    avg_traditional_savings: float = 0
    avg_total_savings: float = 0
    avg_traditional_savings_rate: float = 0
    avg_total_savings_rate: float = 0


def parse_year_month(date_str: str) -> Tuple[int, int]:
    """
    Read year and month straight from a "YYYY-MM-DD" string.

    The digits are parsed as text so a date can never shift into a
    neighbouring month through timezone conversion.
    """
    year, month = date_str[:7].split("-")
    return int(year), int(month)


class MonthlyTransactionAggregator:

    def aggregate(
        self,
        transactions: Iterable[Transaction],
        income_categories: Set[str],
        investment_savings_categories: Set[str],
    ) -> List[MonthData]:
        """
        Bucket transactions per month, oldest month first.

        Rules, checked in order:
        - transfer between own accounts (transfer_id, no category): skipped, not counted
        - category flagged income, or positive amount: income
        - category flagged investment/savings: investments
        - anything else: expenses

        A transfer that carries a category is counted like any other transaction.
        """
        monthly: Dict[str, MonthData] = {}

        for txn in transactions:
            if txn.is_pure_transfer:
                continue

            year, month = parse_year_month(txn.date)
            key = f"{year}-{month:02d}"
            data = monthly.get(key)
            if data is None:
                data = MonthData(year=year, month=month)
                monthly[key] = data

            is_income = bool(txn.category) and txn.category in income_categories
            is_investment = bool(txn.category) and txn.category in investment_savings_categories

            if is_income or txn.amount > 0:
                data.income += abs(txn.amount)
            elif is_investment:
                data.investments += abs(txn.amount)
            else:
                data.expenses += abs(txn.amount)

            data.transactions += 1

        return sorted(monthly.values(), key=lambda m: (m.year, m.month))


class MonthlySummaryCalculator:

    def calculate_averages(self, months: List[MonthData]) -> MonthlySummary:
        month_count = len(months)
        if month_count == 0:
            return MonthlySummary()

        avg_income = sum(m.income for m in months) / month_count
        avg_expenses = sum(m.expenses for m in months) / month_count
        avg_investments = sum(m.investments for m in months) / month_count

        avg_traditional_savings = avg_income - avg_expenses
        avg_total_savings = avg_traditional_savings + avg_investments

        # Rates are 0 (never NaN) when there is no income to divide by
        if avg_income > 0:
            traditional_rate = avg_traditional_savings / avg_income * 100
            total_rate = (avg_traditional_savings + avg_investments) / avg_income * 100
        else:
            traditional_rate = 0
            total_rate = 0

        return MonthlySummary(
            avg_income=avg_income,
            avg_expenses=avg_expenses,
            avg_investments=avg_investments,
            avg_traditional_savings=avg_traditional_savings,
            avg_total_savings=avg_total_savings,
            avg_traditional_savings_rate=traditional_rate,
            avg_total_savings_rate=total_rate,
        )
