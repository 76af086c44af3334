"""Shared fixtures: an in-memory accounts API served through httpx.MockTransport."""

import asyncio
import json
import re
from decimal import Decimal
from typing import Any

import httpx
import pytest
import pytest_asyncio

from asset_sync.services.dashboard_session import DashboardSession
from asset_sync.services.ledger_client import LedgerClient
from asset_sync.services.repositories.local_state import LocalPortfolioState

BASE_URL = "http://ledger.test/api"

_ASSET_PATH = re.compile(r"^/accounts/(\d+)/assets/(\d+)(/refresh-price)?$")
_ACCOUNT_PATH = re.compile(r"^/accounts/(\d+)(/summary|/sync|/export|/assets)?$")


def _num(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


class FakeLedger:
    """Minimal stand-in for the accounts API.

    Attributes:
        prices: asset id -> price returned by refresh-price; missing means the
            response carries no newPrice
        price_errors: asset id -> HTTP status returned by refresh-price
        gates: asset id -> event refresh-price waits on before answering
        sync_statuses: values returned by successive sync-status polls; the last repeats
        failures: "METHOD /path" -> (status, json body) forced error responses
        transport_errors: "METHOD /path" -> httpx transport error class raised instead
            of answering
        raw_bodies: "METHOD /path" -> non-JSON text answered with status 200
    """

    def __init__(self) -> None:
        self.accounts: dict[int, dict] = {}
        self.assets: dict[int, list[dict]] = {}
        self.prices: dict[int, Any] = {}
        self.price_errors: dict[int, int] = {}
        self.gates: dict[int, asyncio.Event] = {}
        self.sync_statuses: list[bool] = [False]
        self.failures: dict[str, tuple[int, dict | None]] = {}
        self.transport_errors: dict[str, type[httpx.TransportError]] = {}
        self.raw_bodies: dict[str, str] = {}
        self.sheet_names: list[str] = []
        self.requests: list[tuple[str, str]] = []
        self.bodies: list[Any] = []
        self._next_id = 1000

    # ── Seeding ───────────────────────────────────────────────────

    def add_account(
        self,
        account_id: int,
        name: str = "Main",
        owner: str | None = "Alex",
        sheet_name: str | None = None,
        account_type: str = "REGULAR",
    ) -> dict:
        account = {
            "id": account_id,
            "name": name,
            "description": None,
            "sheetName": sheet_name or f"sheet-{account_id}",
            "owner": owner,
            "accountType": account_type,
            "financialInstitution": "Bank",
            "accountNumber": f"000-{account_id}",
        }
        self.accounts[account_id] = account
        self.assets.setdefault(account_id, [])
        return account

    def add_asset(
        self,
        account_id: int,
        asset_id: int,
        type: str = "STOCK_KR",
        code: str | None = "KRX:005930",
        name: str = "Samsung",
        quantity: Any = 10,
        average_purchase_price: Any = 50000,
        current_price: Any = None,
        last_price_update: str | None = None,
        dividend_cycle: str | None = None,
        dividend_per_share: Any = None,
    ) -> dict:
        asset = {
            "id": asset_id,
            "type": type,
            "code": code,
            "name": name,
            "quantity": quantity,
            "averagePurchasePrice": average_purchase_price,
            "currentPrice": current_price,
            "lastPriceUpdate": last_price_update,
            "dividendCycle": dividend_cycle,
            "dividendPerShare": dividend_per_share,
        }
        self.assets.setdefault(account_id, []).append(asset)
        return asset

    def summary_payload(self, account_id: int) -> dict:
        account = self.accounts[account_id]
        payments = {"1개월": 12, "3개월": 4, "6개월": 2, "12개월": 1}
        total_purchase = total_value = total_income = Decimal("0")
        details = []
        for asset in self.assets.get(account_id, []):
            quantity = _num(asset["quantity"])
            purchase = quantity * _num(asset["averagePurchasePrice"])
            price = asset["currentPrice"]
            value = quantity * _num(price) if price is not None else Decimal("0")
            total_purchase += purchase
            total_value += value
            total_income += (
                _num(asset["dividendPerShare"])
                * payments.get(asset["dividendCycle"] or "", 0)
                * quantity
            )
            details.append(
                {
                    **asset,
                    "currentValue": float(value),
                    "profitLoss": float(value - purchase),
                    "returnRate": 0,
                }
            )
        profit_loss = total_value - total_purchase
        rate = profit_loss / total_purchase * 100 if total_purchase else Decimal("0")
        return {
            "accountId": account_id,
            "accountName": account["name"],
            "owner": account["owner"],
            "accountType": account["accountType"],
            "financialInstitution": account["financialInstitution"],
            "accountNumber": account["accountNumber"],
            "totalPurchaseAmount": float(total_purchase),
            "totalCurrentValue": float(total_value),
            "totalProfitLoss": float(profit_loss),
            "totalReturnRate": float(round(rate, 2)),
            "totalExpectedDividend": float(total_income),
            "assets": details,
        }

    def find_asset(self, account_id: int, asset_id: int) -> dict | None:
        return next((a for a in self.assets.get(account_id, []) if a["id"] == asset_id), None)

    def count(self, method: str, path: str) -> int:
        return sum(1 for request in self.requests if request == (method, path))

    # ── Transport ─────────────────────────────────────────────────

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.requests.append((method, path))
        body = None
        if request.content:
            body = json.loads(request.content)
            self.bodies.append(body)

        key = f"{method} {path}"
        error = self.transport_errors.get(key)
        if error is not None:
            raise error("connection reset", request=request)
        if key in self.raw_bodies:
            return httpx.Response(200, text=self.raw_bodies[key])

        failure = self.failures.get(key)
        if failure is not None:
            status, payload = failure
            return httpx.Response(status, json=payload)

        if path == "/accounts" and method == "GET":
            return httpx.Response(200, json=list(self.accounts.values()))
        if path == "/accounts" and method == "POST":
            self._next_id += 1
            created = {"id": self._next_id, **body}
            self.accounts[created["id"]] = created
            self.assets[created["id"]] = []
            return httpx.Response(200, json=created)
        if path == "/accounts/summary":
            return httpx.Response(200, json=[self.summary_payload(i) for i in self.accounts])
        if path == "/accounts/sync-status":
            status = self.sync_statuses.pop(0) if len(self.sync_statuses) > 1 else self.sync_statuses[0]
            return httpx.Response(200, json={"isInitialSyncing": status})
        if path == "/accounts/sheet-names":
            return httpx.Response(200, json=self.sheet_names)

        match = _ASSET_PATH.match(path)
        if match:
            return await self._handle_asset(method, int(match[1]), int(match[2]), bool(match[3]), body)

        match = _ACCOUNT_PATH.match(path)
        if match:
            return self._handle_account(method, int(match[1]), match[2], body)

        return httpx.Response(404, json={"message": f"No route for {method} {path}"})

    def _handle_account(self, method: str, account_id: int, suffix: str | None, body: Any) -> httpx.Response:
        if account_id not in self.accounts:
            return httpx.Response(500, json={"message": "Account not found"})
        if suffix == "/summary":
            return httpx.Response(200, json=self.summary_payload(account_id))
        if suffix == "/sync":
            return httpx.Response(200, json={"status": "success", "message": "Synced with Google Sheets"})
        if suffix == "/export":
            return httpx.Response(200, json={"status": "success", "message": "Exported to Google Sheets"})
        if suffix == "/assets" and method == "POST":
            self._next_id += 1
            created = self.add_asset(
                account_id,
                self._next_id,
                type=body.get("type"),
                code=body.get("code"),
                name=body.get("name"),
                quantity=body.get("quantity"),
                average_purchase_price=body.get("averagePurchasePrice"),
            )
            return httpx.Response(200, json=created)
        if method == "PUT":
            self.accounts[account_id].update(body)
            return httpx.Response(200, json=self.accounts[account_id])
        if method == "DELETE":
            del self.accounts[account_id]
            self.assets.pop(account_id, None)
            return httpx.Response(200)
        return httpx.Response(405)

    async def _handle_asset(
        self, method: str, account_id: int, asset_id: int, refresh: bool, body: Any
    ) -> httpx.Response:
        asset = self.find_asset(account_id, asset_id)
        if refresh:
            gate = self.gates.get(asset_id)
            if gate is not None:
                await gate.wait()
            if asset_id in self.price_errors:
                status = self.price_errors[asset_id]
                return httpx.Response(status, json={"message": f"Lookup failed for {asset_id}"})
            price = self.prices.get(asset_id)
            if price is None:
                return httpx.Response(200, json={"status": "success", "forced": True})
            if asset is not None:
                asset["currentPrice"] = float(price)
                asset["lastPriceUpdate"] = "2026-10-19T09:00:00"
            return httpx.Response(200, json={"status": "success", "newPrice": float(price), "forced": True})
        if asset is None:
            return httpx.Response(500, json={"message": "Asset not found"})
        if method == "PUT":
            for key in ("quantity", "averagePurchasePrice", "dividendPerShare", "name", "code", "type"):
                if body.get(key) is not None:
                    asset[key] = body[key]
            return httpx.Response(200, json=asset)
        if method == "DELETE":
            self.assets[account_id].remove(asset)
            return httpx.Response(200)
        return httpx.Response(405)


@pytest.fixture
def ledger():
    """Empty fake accounts API."""
    return FakeLedger()


@pytest_asyncio.fixture
async def client(ledger):
    """LedgerClient wired to the fake accounts API, without retry delays."""
    client = LedgerClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(ledger.handle),
        retry_wait=0,
    )
    yield client
    await client.close()


@pytest.fixture
def state():
    return LocalPortfolioState()


@pytest.fixture
def session(client, state):
    """DashboardSession with fast polling and KRX-only lookups."""
    return DashboardSession(client=client, state=state, poll_interval=0.01, code_prefix="KRX:")
