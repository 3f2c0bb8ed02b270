"""
Async client for the external ledger.

The ledger is an Actual Budget file exposed over HTTP by actual-http-api.
Every endpoint lives under /v1/budgets/{sync_id} and wraps its payload in a
{"data": ...} envelope.

Documentation: https://github.com/jhonderson/actual-http-api

Usage:
    client = LedgerClient.from_settings()
    accounts = await client.get_accounts()
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ledger_mcp.config import Settings, settings as default_settings
from ledger_mcp.models import Account, Category, CategoryGroup, Payee, Transaction

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised when the ledger cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LedgerClient:
    """HTTP adapter for the ledger with a one-time, shared initialization."""

    API_VERSION = "v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        budget_sync_id: str,
        encryption_password: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the ledger client.

        Args:
            base_url: Root URL of the actual-http-api service
            api_key: Value sent in the x-api-key header
            budget_sync_id: Sync ID of the budget file to operate on
            encryption_password: Budget file encryption password (optional)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.budget_sync_id = budget_sync_id

        headers = {"x-api-key": api_key}
        if encryption_password:
            headers["budget-encryption-password"] = encryption_password

        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

        self._initialized = False
        self._init_future: Optional[asyncio.Future] = None

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "LedgerClient":
        config = config or default_settings
        return cls(
            base_url=config.actual_http_api_url,
            api_key=config.actual_http_api_key,
            budget_sync_id=config.actual_budget_sync_id,
            encryption_password=config.actual_budget_encryption_password,
            timeout=config.ledger_timeout_seconds,
        )

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def ensure_initialized(self) -> None:
        """
        Verify the budget is reachable, exactly once.

        Concurrent callers await the same in-flight future. If initialization
        fails, every waiter receives the error and the next call retries. If
        the caller running it is cancelled, a waiter takes over.
        """
        while not self._initialized:
            future = self._init_future
            if future is None:
                await self._initialize()
                return

            # asyncio.wait never cancels the shared future, even if this caller is cancelled
            await asyncio.wait([future])
            if not future.cancelled():
                future.result()

    async def _initialize(self) -> None:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._init_future = future

        try:
            if not self.budget_sync_id:
                raise LedgerError("ACTUAL_BUDGET_SYNC_ID is not configured.")
            logger.info(f"[LEDGER] Loading budget {self.budget_sync_id}")
            await self._request("GET", "accounts")
            self._initialized = True
            logger.info("[LEDGER] Ledger initialized successfully")
            future.set_result(None)
        except asyncio.CancelledError:
            logger.warning("[LEDGER] Ledger initialization cancelled")
            future.cancel()
            raise
        except Exception as e:
            logger.error(f"[LEDGER] Failed to initialize ledger: {e}")
            future.set_exception(e)
            # Mark retrieved so an unawaited failure is not reported on GC
            future.exception()
            raise
        finally:
            self._init_future = None

    async def close(self) -> None:
        await self.client.aclose()
        self._initialized = False

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _budget_path(self, path: str) -> str:
        return f"/{self.API_VERSION}/budgets/{self.budget_sync_id}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a request against the budget and unwrap the data envelope.

        Raises:
            LedgerError: If the request fails or the ledger returns an error
        """
        url = self._budget_path(path)
        try:
            response = await self.client.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"[LEDGER] HTTP error calling {method} {url}: {e}")
            raise LedgerError(f"Failed to reach ledger: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(f"[LEDGER] {method} {url} returned {response.status_code}: {detail}")
            raise LedgerError(detail, status_code=response.status_code)

        if not response.content:
            return None

        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        await self.ensure_initialized()
        return await self._request(method, path, **kwargs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_accounts(self) -> List[Account]:
        data = await self._call("GET", "accounts")
        return [Account.model_validate(a) for a in data or []]

    async def get_account_balance(self, account_id: str, cutoff_date: Optional[str] = None) -> int:
        params = {"cutoff_date": cutoff_date} if cutoff_date else None
        data = await self._call("GET", f"accounts/{account_id}/balance", params=params)
        return int(data or 0)

    async def get_categories(self) -> List[Category]:
        data = await self._call("GET", "categories")
        # Group rows can be mixed into the category listing; only rows with a group_id are categories
        return [Category.model_validate(c) for c in data or [] if c.get("group_id")]

    async def get_category_groups(self) -> List[CategoryGroup]:
        data = await self._call("GET", "categorygroups")
        return [CategoryGroup.model_validate(g) for g in data or []]

    async def get_payees(self) -> List[Payee]:
        data = await self._call("GET", "payees")
        return [Payee.model_validate(p) for p in data or []]

    async def get_rules(self) -> List[dict]:
        data = await self._call("GET", "rules")
        return list(data or [])

    async def get_transactions(self, account_id: str, start_date: str, end_date: str) -> List[Transaction]:
        data = await self._call(
            "GET",
            f"accounts/{account_id}/transactions",
            params={"since_date": start_date, "until_date": end_date},
        )
        return [Transaction.model_validate({**t, "account": t.get("account") or account_id}) for t in data or []]

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def create_account(self, account: Dict[str, Any], initial_balance: int = 0) -> str:
        return await self._call(
            "POST", "accounts", json={"account": account, "initialBalance": initial_balance}
        )

    async def update_account(self, account_id: str, fields: Dict[str, Any]) -> None:
        await self._call("PATCH", f"accounts/{account_id}", json={"account": fields})

    async def close_account(
        self,
        account_id: str,
        transfer_account_id: Optional[str] = None,
        transfer_category_id: Optional[str] = None,
    ) -> None:
        body = {}
        if transfer_account_id:
            body["transferAccountId"] = transfer_account_id
        if transfer_category_id:
            body["transferCategoryId"] = transfer_category_id
        await self._call("PUT", f"accounts/{account_id}/close", json=body)

    async def reopen_account(self, account_id: str) -> None:
        await self._call("PUT", f"accounts/{account_id}/reopen")

    async def delete_account(self, account_id: str) -> None:
        await self._call("DELETE", f"accounts/{account_id}")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def create_transaction(self, account_id: str, transaction: Dict[str, Any]) -> Any:
        return await self._call(
            "POST",
            f"accounts/{account_id}/transactions",
            json={"transaction": transaction, "learnCategories": False, "runTransfers": True},
        )

    async def update_transaction(self, transaction_id: str, fields: Dict[str, Any]) -> None:
        await self._call("PATCH", f"transactions/{transaction_id}", json={"transaction": fields})

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._call("DELETE", f"transactions/{transaction_id}")

    # ------------------------------------------------------------------
    # Categories and category groups
    # ------------------------------------------------------------------

    async def create_category(self, category: Dict[str, Any]) -> str:
        return await self._call("POST", "categories", json={"category": category})

    async def update_category(self, category_id: str, fields: Dict[str, Any]) -> None:
        await self._call("PATCH", f"categories/{category_id}", json={"category": fields})

    async def delete_category(self, category_id: str, transfer_category_id: Optional[str] = None) -> None:
        params = {"transfer_category_id": transfer_category_id} if transfer_category_id else None
        await self._call("DELETE", f"categories/{category_id}", params=params)

    async def create_category_group(self, group: Dict[str, Any]) -> str:
        return await self._call("POST", "categorygroups", json={"category_group": group})

    async def update_category_group(self, group_id: str, fields: Dict[str, Any]) -> None:
        await self._call("PATCH", f"categorygroups/{group_id}", json={"category_group": fields})

    async def delete_category_group(self, group_id: str, transfer_category_id: Optional[str] = None) -> None:
        params = {"transfer_category_id": transfer_category_id} if transfer_category_id else None
        await self._call("DELETE", f"categorygroups/{group_id}", params=params)

    # ------------------------------------------------------------------
    # Payees
    # ------------------------------------------------------------------

    async def create_payee(self, payee: Dict[str, Any]) -> str:
        return await self._call("POST", "payees", json={"payee": payee})

    async def update_payee(self, payee_id: str, fields: Dict[str, Any]) -> None:
        await self._call("PATCH", f"payees/{payee_id}", json={"payee": fields})

    async def delete_payee(self, payee_id: str) -> None:
        await self._call("DELETE", f"payees/{payee_id}")

    # ------------------------------------------------------------------
    # Rules (stored and returned as-is)
    # ------------------------------------------------------------------

    async def create_rule(self, rule: Dict[str, Any]) -> Any:
        return await self._call("POST", "rules", json={"rule": rule})

    async def update_rule(self, rule_id: str, rule: Dict[str, Any]) -> Any:
        return await self._call("PATCH", f"rules/{rule_id}", json={"rule": {**rule, "id": rule_id}})

    async def delete_rule(self, rule_id: str) -> None:
        await self._call("DELETE", f"rules/{rule_id}")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)
