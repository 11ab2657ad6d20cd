"""Tests for the account service: balances, cancels, order placement, quotes."""

import pytest

from backend.app.modules.orderdesk.clients.xt_client import XtApiError
from backend.app.modules.orderdesk.services import account_service
from backend.app.modules.orderdesk.services.utils import extract_order_list, format_amount, normalize_xt_symbol

CURRENCIES = ["DEURO", "DEPS", "USDT", "BTC"]


class TestUtils:
    @pytest.mark.parametrize("raw,expected", [
        ("DEPS/BTC", "deps_btc"),
        ("deps-btc", "deps_btc"),
        ("DEPS_BTC", "deps_btc"),
    ])
    def test_normalize_symbol(self, raw, expected):
        assert normalize_xt_symbol(raw) == expected

    def test_format_amount_avoids_exponent(self):
        assert format_amount(0.00004754) == "0.00004754"
        assert format_amount(10) == "10"

    @pytest.mark.parametrize("response,expected", [
        ({"result": {"list": [1, 2]}}, [1, 2]),
        ({"result": [3]}, [3]),
        ([4], [4]),
        ({"list": [5]}, [5]),
        ({"result": None}, []),
        (None, []),
    ])
    def test_extract_order_list(self, response, expected):
        assert extract_order_list(response) == expected


class TestOpenOrders:
    def test_per_symbol_failure_is_empty(self, fake_client):
        fake_client.open_orders = {"deps_btc": [{"orderId": "1"}]}
        fake_client.failing_symbols = {"deuro_usdt"}
        result = account_service.fetch_open_orders(fake_client, ["deps_btc", "deuro_usdt"])
        assert result == {"deps_btc": [{"orderId": "1"}], "deuro_usdt": []}

    def test_blank_symbol_never_widens_to_all_pairs(self, fake_client):
        fake_client.all_orders = [{"orderId": "a1", "symbol": "deuro_usdt"}]
        result = account_service.fetch_open_orders(fake_client, ["", "  "])
        assert result == {"": [], "  ": []}
        assert fake_client.open_order_calls == []

    @pytest.mark.parametrize("symbol", ["", "   ", None])
    def test_single_symbol_requires_symbol(self, fake_client, symbol):
        with pytest.raises(ValueError):
            account_service.fetch_symbol_open_orders(fake_client, symbol)
        assert fake_client.open_order_calls == []

    def test_single_symbol_propagates_upstream_error(self, fake_client):
        fake_client.failing_symbols = {"deps_btc"}
        with pytest.raises(XtApiError):
            account_service.fetch_symbol_open_orders(fake_client, "DEPS/BTC")


class TestBalances:
    def test_batch_assets(self, fake_client):
        fake_client.balances_response = {"rc": 0, "result": {"assets": [
            {"currency": "usdt", "availableAmount": "10", "frozenAmount": "2", "totalAmount": "12"},
            {"currency": "deps", "availableAmount": "5", "frozenAmount": "0", "totalAmount": "5"},
        ]}}
        balances = account_service.fetch_balances(fake_client, CURRENCIES)
        assert list(balances) == CURRENCIES
        assert balances["USDT"].model_dump() == {"available": 10.0, "frozen": 2.0, "total": 12.0}
        assert balances["DEPS"].total == 5.0
        assert balances["BTC"].model_dump() == {"available": 0.0, "frozen": 0.0, "total": 0.0}

    def test_alternate_field_names(self, fake_client):
        fake_client.balances_response = {"data": [{"asset": "BTC", "free": "1", "locked": "0.5", "balance": "1.5"}]}
        balances = account_service.fetch_balances(fake_client, ["BTC"])
        assert balances["BTC"].model_dump() == {"available": 1.0, "frozen": 0.5, "total": 1.5}

    def test_fallback_to_individual_calls(self, fake_client):
        fake_client.balances_error = XtApiError("GATEWAY_001")
        fake_client.balance_responses = {
            "USDT": {"rc": 0, "result": {"currency": "usdt", "availableAmount": "1", "frozenAmount": "0", "totalAmount": "1"}},
            "BTC": RuntimeError("timeout"),
        }
        balances = account_service.fetch_balances(fake_client, CURRENCIES)
        assert balances["USDT"].total == 1.0
        assert balances["BTC"].total == 0.0
        assert balances["DEURO"].total == 0.0


class TestCancelOrders:
    def test_batch(self, fake_client):
        result = account_service.cancel_orders(fake_client, ["1", "2", "3"])
        assert result.success is True
        assert result.cancelled == 3
        assert fake_client.cancelled == ["1", "2", "3"]

    def test_fallback_counts_individual_successes(self, fake_client):
        fake_client.batch_cancel_error = XtApiError("ORDER_001")
        fake_client.cancel_errors = {"2"}
        result = account_service.cancel_orders(fake_client, ["1", "2", "3"])
        assert result.success is True
        assert result.cancelled == 2
        assert len(result.errors) == 1
        assert fake_client.cancelled == ["1", "3"]

    def test_fallback_all_failed(self, fake_client):
        fake_client.batch_cancel_error = RuntimeError("down")
        fake_client.cancel_errors = {"1"}
        result = account_service.cancel_orders(fake_client, ["1"])
        assert result.success is False
        assert result.cancelled == 0


class TestMarketOrders:
    def test_buy_uses_quote_qty(self):
        params = account_service.build_market_order_params("DEPS/BTC", "BUY", quote_qty=0.00004754)
        assert params["symbol"] == "deps_btc"
        assert params["quoteQty"] == "0.00004754"
        assert params["quantity"] is None
        assert params["type"] == "MARKET"
        assert params["timeInForce"] == "IOC"

    def test_buy_falls_back_to_quantity_as_quote(self):
        params = account_service.build_market_order_params("deps_btc", "BUY", quantity=2)
        assert params["quoteQty"] == "2"

    def test_sell_uses_quantity(self):
        params = account_service.build_market_order_params("deps_btc", "SELL", quantity=10)
        assert params["quantity"] == "10"
        assert params["quoteQty"] is None

    def test_place_success(self, fake_client):
        result = account_service.place_market_order(fake_client, "deps_btc", "SELL", quantity=10)
        assert result.success is True
        assert result.order_id == "9001"
        assert fake_client.created[0]["side"] == "SELL"

    def test_precision_error_message(self, fake_client):
        fake_client.create_error = XtApiError("ORDER_008", {"rc": 1, "mc": "ORDER_008"})
        result = account_service.place_market_order(fake_client, "deps_btc", "BUY", quote_qty=0.1)
        assert result.success is False
        assert "precision" in result.error

    def test_missing_order_id(self, fake_client):
        fake_client.create_response = {"rc": 0, "mc": "WEIRD", "result": {}}
        result = account_service.place_market_order(fake_client, "deps_btc", "BUY", quote_qty=0.1)
        assert result.success is False
        assert result.error == "Order failed: WEIRD"


class TestQuotes:
    def test_ticker_price(self, fake_client):
        assert account_service.fetch_ticker_price(fake_client, "deps_btc") == pytest.approx(0.0000012)

    def test_ticker_price_missing(self, fake_client):
        fake_client.ticker = {"rc": 0, "result": []}
        assert account_service.fetch_ticker_price(fake_client, "deps_btc") is None

    def test_depth_uses_default_limit(self, fake_client):
        depth = account_service.fetch_depth(fake_client, "DEPS_BTC")
        assert depth["bids"][0] == ["100", "1"]
        assert fake_client.depth_calls == [("deps_btc", 50)]

    def test_depth_invalid_format(self, fake_client):
        fake_client.depth = {"rc": 0, "result": {"bids": []}}
        with pytest.raises(ValueError):
            account_service.fetch_depth(fake_client, "deps_btc")
