"""Shared fixtures: a fake XT client and a TestClient wired to it."""

import os
import tempfile

os.environ.setdefault("BACKEND_LOG_DIR", tempfile.mkdtemp(prefix="orderdesk-logs-"))

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.modules.bot.routers.bot import get_bot
from backend.app.modules.bot.services.alternating_bot import AlternatingOrderBot
from backend.app.modules.orderdesk.clients.xt_client import XtApiError, get_xt_client


class FakeXtClient:
    """In-memory stand-in for XtClient; records every mutating call."""

    def __init__(self):
        self.depth = {
            "rc": 0,
            "mc": "SUCCESS",
            "result": {
                "bids": [["100", "1"], ["99", "2"], ["97", "5"]],
                "asks": [["101", "1.5"], ["102", "3"], ["110", "4"]],
            },
        }
        self.depth_calls = []
        self.open_orders = {}
        self.open_order_calls = []
        self.all_orders = []
        self.failing_symbols = set()
        self.balances_response = {"rc": 0, "result": {"assets": []}}
        self.balances_error = None
        self.balance_responses = {}
        self.batch_cancel_error = None
        self.cancel_errors = set()
        self.cancelled = []
        self.created = []
        self.create_response = {"rc": 0, "mc": "SUCCESS", "result": {"orderId": "9001"}}
        self.create_error = None
        self.create_hook = None
        self.ticker = {"rc": 0, "result": [{"s": "deps_btc", "t": 1, "p": "0.00000120"}]}
        self.symbol_info = {"rc": 0, "result": {"symbols": [{"symbol": "deps_btc", "pricePrecision": 10}]}}

    def get_depth(self, symbol, limit=None):
        self.depth_calls.append((symbol, limit))
        return self.depth

    def get_ticker_price(self, symbol):
        return self.ticker

    def get_symbol_info(self, symbol):
        return self.symbol_info

    def get_open_orders(self, symbol=None, biz_type="SPOT"):
        self.open_order_calls.append(symbol)
        if symbol is None:
            return {"rc": 0, "result": self.all_orders}
        if symbol in self.failing_symbols:
            raise XtApiError("AUTH_001")
        return {"rc": 0, "result": self.open_orders.get(symbol, [])}

    def get_balances(self, currencies):
        if self.balances_error is not None:
            raise self.balances_error
        return self.balances_response

    def get_balance(self, currency):
        response = self.balance_responses.get(currency)
        if isinstance(response, Exception):
            raise response
        return response

    def create_order(self, params):
        self.created.append(params)
        if self.create_hook is not None:
            self.create_hook()
        if self.create_error is not None:
            raise self.create_error
        return self.create_response

    def cancel_order(self, order_id):
        if order_id in self.cancel_errors:
            raise XtApiError("ORDER_NOT_FOUND")
        self.cancelled.append(order_id)
        return {"rc": 0, "result": {"cancelId": f"c-{order_id}"}}

    def cancel_order_batch(self, order_ids):
        if self.batch_cancel_error is not None:
            raise self.batch_cancel_error
        self.cancelled.extend(order_ids)
        return {"rc": 0, "result": None}


@pytest.fixture
def fake_client():
    return FakeXtClient()


@pytest.fixture
def bot(fake_client):
    b = AlternatingOrderBot(fake_client)
    yield b
    b.stop(timeout=5)


@pytest.fixture
def api(fake_client, bot):
    app.dependency_overrides[get_xt_client] = lambda: fake_client
    app.dependency_overrides[get_bot] = lambda: bot
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
