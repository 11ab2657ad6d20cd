# backend/app/modules/orderdesk/services/account_service.py
import logging
from typing import Dict, List, Optional

from backend.app.core import config
from ..clients.xt_client import XtApiError
from ..schemas.schemas import Balance, CancelResult, PlaceOrderResult
from .utils import extract_order_list, first_present, format_amount, normalize_xt_symbol, to_float

logger = logging.getLogger(__name__)

AVAILABLE_KEYS = ("availableAmount", "available", "free", "avail")
FROZEN_KEYS = ("frozenAmount", "frozen", "locked", "freeze")
TOTAL_KEYS = ("totalAmount", "total", "balance", "amount")

ORDER_ERROR_MESSAGES = {
    "ORDER_008": "Order precision error: The quantity may have too many decimal places "
                 "or be below minimum. Try adjusting the amount.",
}


# ---- 미체결 주문 ----
def fetch_symbol_open_orders(client, symbol: str) -> List[dict]:
    """단일 심볼 미체결 주문. 빈 심볼은 전체 조회로 넓어지므로 거부"""
    normalized = normalize_xt_symbol(symbol) if symbol is not None else ""
    if not normalized:
        raise ValueError("Symbol is required")
    return extract_order_list(client.get_open_orders(normalized))


def fetch_open_orders(client, symbols: List[str]) -> Dict[str, List[dict]]:
    """심볼별 미체결 주문. 개별 심볼 실패는 빈 리스트"""
    results = {}
    for symbol in symbols:
        try:
            results[symbol] = fetch_symbol_open_orders(client, symbol)
        except Exception:
            logger.exception("open orders fetch failed | %s", symbol)
            results[symbol] = []
    return results


def fetch_all_open_orders(client) -> List[dict]:
    return extract_order_list(client.get_open_orders())


# ---- 잔고 ----
def _parse_balance(raw) -> Balance:
    if not isinstance(raw, dict):
        return Balance()
    return Balance(
        available=to_float(first_present(raw, *AVAILABLE_KEYS) or 0),
        frozen=to_float(first_present(raw, *FROZEN_KEYS) or 0),
        total=to_float(first_present(raw, *TOTAL_KEYS) or 0),
    )


def _balance_list(response) -> list:
    if isinstance(response, list):
        return response
    if not isinstance(response, dict):
        return []
    result = response.get("result")
    if isinstance(result, dict) and result.get("assets"):
        return result["assets"]
    if result:
        return result if isinstance(result, list) else [result]
    if response.get("list"):
        return response["list"]
    data = response.get("data")
    if data:
        return data if isinstance(data, list) else [data]
    return []


def _match_currency(entry: dict, currency: str) -> bool:
    cur = currency.upper()
    return any(str(entry.get(k) or "").upper() == cur for k in ("currency", "asset", "coin"))


def fetch_balances(client, currencies: Optional[List[str]] = None) -> Dict[str, Balance]:
    """
    통화별 잔고. 일괄 조회 실패 시 통화별 개별 조회로 대체
    응답에 없는 통화 / 개별 실패 통화는 0
    """
    currencies = currencies or config.CURRENCIES
    try:
        entries = _balance_list(client.get_balances(currencies))
        balances = {}
        for currency in currencies:
            entry = next((b for b in entries if isinstance(b, dict) and _match_currency(b, currency)), None)
            balances[currency] = _parse_balance(entry)
        return balances
    except Exception:
        logger.exception("batch balance fetch failed, trying individual calls")

    balances = {}
    for currency in currencies:
        try:
            response = client.get_balance(currency)
            raw = response
            if isinstance(response, dict):
                raw = response.get("result") or response.get("data") or response
            balances[currency] = _parse_balance(raw)
        except Exception:
            logger.exception("balance fetch failed | %s", currency)
            balances[currency] = Balance()
    return balances


# ---- 취소 ----
def _cancel_ok(response) -> bool:
    if not isinstance(response, dict):
        return bool(response)
    return bool(response.get("result") or response.get("rc") == 0 or response.get("code") == 0 or response.get("success"))


def cancel_orders(client, order_ids: List[str]) -> CancelResult:
    """일괄 취소 → 실패 시 주문별 개별 취소"""
    try:
        response = client.cancel_order_batch(order_ids)
        result = response.get("result") if isinstance(response, dict) else response
        cancelled = len(result) if isinstance(result, list) else len(order_ids)
        logger.info("batch cancel | %d orders", cancelled)
        return CancelResult(success=True, cancelled=cancelled)
    except Exception:
        logger.exception("batch cancel failed, trying individual cancels")

    cancelled = 0
    errors = []
    for order_id in order_ids:
        try:
            if _cancel_ok(client.cancel_order(order_id)):
                cancelled += 1
            else:
                errors.append(f"{order_id}: not cancelled")
        except Exception as e:
            logger.exception("cancel failed | %s", order_id)
            errors.append(f"{order_id}: {e}")
    return CancelResult(success=cancelled > 0, cancelled=cancelled, errors=errors or None)


# ---- 시장가 주문 ----
def build_market_order_params(symbol: str, side: str, quantity=None, quote_qty=None) -> dict:
    """
    XT 시장가 주문 파라미터
    - BUY : quoteQty만 (quantity는 null)
    - SELL: quantity만 (quoteQty는 null)
    """
    params = {
        "symbol": normalize_xt_symbol(symbol),
        "side": side,
        "type": "MARKET",
        "timeInForce": "IOC",
        "bizType": "SPOT",
    }
    if side == "BUY":
        amount = quote_qty or quantity
        params["quoteQty"] = format_amount(amount) if amount else None
        params["quantity"] = None
    else:
        amount = quantity or quote_qty
        params["quantity"] = format_amount(amount) if amount else None
        params["quoteQty"] = None
    return params


def _order_error_message(mc) -> str:
    if mc in ORDER_ERROR_MESSAGES:
        return ORDER_ERROR_MESSAGES[mc]
    if mc:
        return f"Order failed: {mc}"
    return "Failed to create order"


def place_market_order(client, symbol: str, side: str, quantity=None, quote_qty=None) -> PlaceOrderResult:
    params = build_market_order_params(symbol, side, quantity, quote_qty)
    try:
        response = client.create_order(params)
    except XtApiError as e:
        logger.warning("order rejected | %s %s | %s", params["symbol"], side, e.mc)
        return PlaceOrderResult(success=False, error=_order_error_message(e.mc), details=e.payload)

    result = response.get("result") if isinstance(response, dict) else None
    if isinstance(result, dict) and result.get("orderId"):
        return PlaceOrderResult(success=True, order_id=str(result["orderId"]), details=result)
    if isinstance(response, dict) and response.get("orderId"):
        return PlaceOrderResult(success=True, order_id=str(response["orderId"]), details=response)
    mc = response.get("mc") if isinstance(response, dict) else None
    return PlaceOrderResult(success=False, error=_order_error_message(mc), details=response)


# ---- 시세 / 심볼 정보 ----
def fetch_ticker_price(client, symbol: str) -> Optional[float]:
    response = client.get_ticker_price(normalize_xt_symbol(symbol))
    if not isinstance(response, dict):
        return None
    result = response.get("result")
    if isinstance(result, list) and result:
        price = to_float(first_present(result[0], "p", "price") or 0)
    elif isinstance(result, dict):
        price = to_float(first_present(result, "p", "price") or 0)
    else:
        price = to_float(first_present(response, "p", "price") or 0)
    return price or None


def fetch_symbol_info(client, symbol: str):
    response = client.get_symbol_info(normalize_xt_symbol(symbol))
    if isinstance(response, dict):
        return response.get("result")
    return None


def fetch_depth(client, symbol: str, limit: Optional[int] = None) -> dict:
    """{bids, asks} 원본. 포맷이 다르면 ValueError"""
    response = client.get_depth(normalize_xt_symbol(symbol), limit or config.DEPTH_LIMIT)
    result = response.get("result") if isinstance(response, dict) else None
    if not isinstance(result, dict) or result.get("bids") is None or result.get("asks") is None:
        raise ValueError("Invalid orderbook response format")
    return result
