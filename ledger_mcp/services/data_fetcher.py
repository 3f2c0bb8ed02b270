"""
Service for gathering the ledger data each report needs.

All lookup tables (accounts, categories, groups) are fully loaded before any
classification starts. Transactions for several accounts are fetched
concurrently.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ledger_mcp.ledger import LedgerClient
from ledger_mcp.models import Account, Category, CategoryGroup, Transaction

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    accounts: List[Account] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    category_groups: List[CategoryGroup] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)


def on_budget_accounts(accounts: List[Account]) -> List[Account]:
    """Accounts included in "all accounts" views: on budget and open."""
    return [a for a in accounts if a.on_budget]


class LedgerDataFetcher:
    """Fetches accounts, categories and transactions from the ledger."""

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    async def fetch_transactions(
        self,
        accounts: List[Account],
        start_date: str,
        end_date: str,
    ) -> List[Transaction]:
        results = await asyncio.gather(
            *(self.ledger.get_transactions(a.id, start_date, end_date) for a in accounts)
        )
        transactions = [txn for batch in results for txn in batch]
        logger.info(
            f"[FETCH] Loaded {len(transactions)} transactions from {len(accounts)} account(s) "
            f"between {start_date} and {end_date}"
        )
        return transactions

    async def fetch_for_categories(
        self,
        account_id: Optional[str],
        start_date: str,
        end_date: str,
    ) -> LedgerSnapshot:
        """
        Fetch everything the category-based reports need.

        Args:
            account_id: Restrict transactions to this account (optional, default: all on-budget accounts)
            start_date: Start date (YYYY-MM-DD)
            end_date: End date (YYYY-MM-DD)
        """
        accounts, categories, category_groups = await asyncio.gather(
            self.ledger.get_accounts(),
            self.ledger.get_categories(),
            self.ledger.get_category_groups(),
        )

        if account_id:
            transactions = await self.ledger.get_transactions(account_id, start_date, end_date)
        else:
            transactions = await self.fetch_transactions(on_budget_accounts(accounts), start_date, end_date)

        return LedgerSnapshot(
            accounts=accounts,
            categories=categories,
            category_groups=category_groups,
            transactions=transactions,
        )

    async def fetch_accounts_with_balances(
        self,
        accounts: Optional[List[Account]] = None,
        cutoff_date: Optional[str] = None,
    ) -> List[Account]:
        """Fill in each account's balance, as of cutoff_date when given (default: current)."""
        if accounts is None:
            accounts = await self.ledger.get_accounts()
        balances = await asyncio.gather(
            *(self.ledger.get_account_balance(a.id, cutoff_date) for a in accounts)
        )
        for account, balance in zip(accounts, balances):
            account.balance = balance
        return accounts
