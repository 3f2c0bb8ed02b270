"""
Analytics tools for the MCP server.

All amounts are integer cents. Every report is rebuilt from the ledger on each
call; nothing is cached between calls.
"""
import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from ledger_mcp.ledger import LedgerClient
from ledger_mcp.mcp.dependencies import get_date_range, get_date_range_for_months, validate_date
from ledger_mcp.services.balance_history import BalanceHistoryCalculator
from ledger_mcp.services.category_classifier import CategoryMapper
from ledger_mcp.services.data_fetcher import LedgerDataFetcher, on_budget_accounts
from ledger_mcp.services.group_aggregator import GroupAggregator
from ledger_mcp.services.monthly_summary import MonthlySummaryCalculator, MonthlyTransactionAggregator
from ledger_mcp.services.transaction_grouper import TransactionGrouper

logger = logging.getLogger(__name__)

ALL_ACCOUNTS_LABEL = "All on-budget accounts"
MAX_MONTHS = 60


def _clamp_months(months: Optional[int], default: int) -> int:
    if not isinstance(months, int) or months <= 0:
        return default
    return min(months, MAX_MONTHS)


def _account_label(accounts, account_id: Optional[str]) -> str:
    if not account_id:
        return ALL_ACCOUNTS_LABEL
    account = next((a for a in accounts if a.id == account_id), None)
    return account.name if account else account_id


async def get_spending_by_category(
    ledger: LedgerClient,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    account_id: Optional[str] = None,
    include_income: bool = False
) -> dict:
    """
    Get spending breakdown by category, grouped by category group.

    Groups and the categories inside them are sorted by absolute total,
    largest first. Uncategorized transactions are left out.

    Args:
        ledger: Ledger client
        start_date: Start date in ISO format (optional, default: 3 months ago)
        end_date: End date in ISO format (optional, default: today)
        account_id: Filter by account ID (optional, default: all on-budget accounts)
        include_income: Whether to include income categories (default: False)

    Returns:
        Dict with period, account label and the sorted groups with their categories
    """
    start, end = get_date_range(start_date, end_date)

    snapshot = await LedgerDataFetcher(ledger).fetch_for_categories(account_id, start, end)
    mapper = CategoryMapper(snapshot.categories, snapshot.category_groups)

    spending = TransactionGrouper().group_by_category(
        snapshot.transactions,
        mapper.get_category_name,
        mapper.get_group_info,
        include_income,
    )
    groups = GroupAggregator().aggregate_and_sort(spending)

    logger.info(
        f"[SPENDING] {len(spending)} categories in {len(groups)} groups "
        f"from {len(snapshot.transactions)} transactions ({start} to {end})"
    )

    return {
        "period": {"start_date": start, "end_date": end},
        "account": _account_label(snapshot.accounts, account_id),
        "include_income": include_income,
        "total": sum(g.total for g in groups),
        "groups": [asdict(g) for g in groups],
    }


async def get_monthly_summary(
    ledger: LedgerClient,
    months: int = 3,
    account_id: Optional[str] = None
) -> dict:
    """
    Get monthly income, regular expenses, investments and savings.

    Transfers between own accounts (no category) are left out. Positive amounts
    count as income even outside income categories. Spending in categories
    whose group name contains "investment" or "savings" is tracked as
    investments instead of expenses.

    Args:
        ledger: Ledger client
        months: Number of months to include, current month included (default: 3)
        account_id: Filter by account ID (optional, default: all on-budget accounts)

    Returns:
        Dict with the per-month breakdown (oldest first) and period averages
    """
    months = _clamp_months(months, 3)
    start, end = get_date_range_for_months(months)

    snapshot = await LedgerDataFetcher(ledger).fetch_for_categories(account_id, start, end)
    mapper = CategoryMapper(snapshot.categories, snapshot.category_groups)

    month_data = MonthlyTransactionAggregator().aggregate(
        snapshot.transactions,
        mapper.income_categories,
        mapper.investment_categories,
    )
    averages = MonthlySummaryCalculator().calculate_averages(month_data)

    logger.info(f"[MONTHLY] Summarized {len(month_data)} month(s) from {start} to {end}")

    breakdown = []
    for m in month_data:
        traditional_savings = m.income - m.expenses
        total_savings = traditional_savings + m.investments
        breakdown.append({
            "month_key": m.key,
            **asdict(m),
            "traditional_savings": traditional_savings,
            "total_savings": total_savings,
            "total_savings_rate": total_savings / m.income * 100 if m.income > 0 else None,
        })

    return {
        "period": {"start_date": start, "end_date": end},
        "account_id": account_id,
        "account": _account_label(snapshot.accounts, account_id),
        "months": breakdown,
        "averages": asdict(averages),
    }


async def get_balance_history(
    ledger: LedgerClient,
    account_id: Optional[str] = None,
    months: int = 12,
    include_off_budget: bool = False,
    end_date: Optional[str] = None
) -> dict:
    """
    Get month-end balance history.

    Balances are reconstructed backward from each account's balance on the
    reference date (today unless end_date is given), so the newest month
    always equals that balance. `change` is None
    for the earliest month of each account.

    Args:
        ledger: Ledger client
        account_id: Account to report on (optional, default: all accounts)
        months: Number of months to include (default: 12)
        include_off_budget: In all-accounts mode, also include off-budget accounts (default: False)
        end_date: Reference date for the newest month (optional, default: today)

    Returns:
        Dict with period and month-end balances, newest first
    """
    months = _clamp_months(months, 12)
    reference = validate_date(end_date) or date.today()
    start, end = get_date_range_for_months(months, today=reference)

    fetcher = LedgerDataFetcher(ledger)
    accounts = await ledger.get_accounts()
    # A past reference date anchors at the balance on that date, not today's
    cutoff = end if validate_date(end_date) else None

    if account_id:
        account = next((a for a in accounts if a.id == account_id), None)
        if not account:
            return {"success": False, "error": f"Account with ID {account_id} not found"}
        await fetcher.fetch_accounts_with_balances([account], cutoff)
        transactions = await ledger.get_transactions(account_id, start, end)
        selected = [account]
    else:
        account = None
        if include_off_budget:
            selected = [a for a in accounts if not a.closed]
        else:
            selected = on_budget_accounts(accounts)
        await fetcher.fetch_accounts_with_balances(selected, cutoff)
        transactions = await fetcher.fetch_transactions(selected, start, end)

    history = BalanceHistoryCalculator().calculate(account, selected, transactions, months, reference)

    logger.info(f"[BALANCE] Reconstructed {len(history)} month-end balances for {len(selected)} account(s)")

    return {
        "period": {"start_date": start, "end_date": end},
        "account": account.name if account else ALL_ACCOUNTS_LABEL,
        "balances": [
            {"month_key": entry.key, **asdict(entry)}
            for entry in history
        ],
    }
