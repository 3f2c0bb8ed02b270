"""
Service for reconstructing month-end balance history.

Balances are not forward-simulated from zero. Each series is anchored at the
account's current balance and walked backward through its transactions:
subtracting a transaction's amount undoes it, so once every transaction dated
after a month has been undone, the running balance is that month's closing
balance.

Handles:
1. Single-account history
2. All-accounts history (one independent series per account)
3. Month-over-month change per series
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ledger_mcp.models import Account, Transaction
from ledger_mcp.services.monthly_summary import parse_year_month

logger = logging.getLogger(__name__)


@dataclass
class MonthBalance:
    year: int
    month: int
    balance: int
    transactions: int = 0
    change: Optional[int] = None  # None for the earliest month of a series
    account: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month:02d}"


def generate_month_range(end_date: date, months: int) -> List[Tuple[int, int]]:
    """
    (year, month) pairs stepping backward from end_date's month, newest first.
    """
    result = []
    year, month = end_date.year, end_date.month
    for _ in range(months):
        result.append((year, month))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return result


def _month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


class BalanceHistoryCalculator:
    """Builds MonthBalance series from current balances and transactions."""

    def calculate(
        self,
        account: Optional[Account],
        accounts: Sequence[Account],
        transactions: Iterable[Transaction],
        months: int,
        end_date: date,
    ) -> List[MonthBalance]:
        """
        Calculate month-end balances for the window ending at end_date.

        Args:
            account: Target account (single-account mode), or None for all accounts
            accounts: Accounts to include in all-accounts mode
            transactions: Transactions covering the window
            months: Number of months in the window
            end_date: Last day of the window

        Returns:
            MonthBalance entries, newest first. In all-accounts mode entries are
            tagged with the account name and ordered by account name (ignoring case) within a month.
        """
        month_range = generate_month_range(end_date, months)
        # ISO dates sort lexically; newest first
        newest_first = sorted(transactions, key=lambda t: t.date, reverse=True)

        if account is not None:
            series = self._calculate_series(account, newest_first, month_range)
            self._calculate_changes(series)
            return sorted(series, key=lambda m: (m.year, m.month), reverse=True)

        transactions_by_account: Dict[str, List[Transaction]] = {a.id: [] for a in accounts}
        skipped = 0
        for txn in newest_first:
            bucket = transactions_by_account.get(txn.account)
            if bucket is None:
                skipped += 1
                continue
            bucket.append(txn)
        if skipped:
            logger.debug(f"[BALANCE] Ignored {skipped} transactions for accounts outside the selection")

        result: List[MonthBalance] = []
        for acc in accounts:
            series = self._calculate_series(acc, transactions_by_account[acc.id], month_range)
            self._calculate_changes(series)
            for entry in series:
                entry.account = acc.name
            result.extend(series)

        result.sort(key=lambda m: (m.account or "").casefold())
        result.sort(key=lambda m: (m.year, m.month), reverse=True)
        return result

    def _calculate_series(
        self,
        account: Account,
        newest_first: List[Transaction],
        month_range: List[Tuple[int, int]],
    ) -> List[MonthBalance]:
        running_balance = account.balance or 0

        history: Dict[str, MonthBalance] = {
            _month_key(year, month): MonthBalance(year=year, month=month, balance=running_balance)
            for year, month in month_range
        }

        for txn in newest_first:
            txn_key = _month_key(*parse_year_month(txn.date))
            running_balance -= txn.amount

            # With this transaction undone, the running balance is the closing
            # balance of every month before it; its own month keeps the later value
            for key, entry in history.items():
                if key < txn_key:
                    entry.balance = running_balance

            if txn_key in history:
                history[txn_key].transactions += 1

        return list(history.values())

    def _calculate_changes(self, series: List[MonthBalance]) -> None:
        oldest_first = sorted(series, key=lambda m: (m.year, m.month))
        for previous, current in zip(oldest_first, oldest_first[1:]):
            current.change = current.balance - previous.balance
        if oldest_first:
            oldest_first[0].change = None
