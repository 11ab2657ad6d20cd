# backend/app/modules/orderdesk/clients/xt_client.py
"""
XT.com Spot v4 REST 클라이언트 (requests 기반)

- public  : depth / ticker price / symbol info (인증 불필요)
- private : open-order / balance(s) / order 생성·취소 (HMAC-SHA256 서명)

서명 규칙:
  X = "validate-algorithms=HmacSHA256&validate-appkey=..&validate-recvwindow=..&validate-timestamp=.."
  Y = "#METHOD#path[#query][#body]"
  validate-signature = hex(HMAC_SHA256(secret, X + Y))
"""
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from backend.app.core import config

logger = logging.getLogger(__name__)

ALGORITHM = "HmacSHA256"


class XtApiError(Exception):
    """rc != 0 응답 (mc: 거래소 메시지 코드)"""

    def __init__(self, mc: Optional[str], payload: Any = None):
        self.mc = mc
        self.payload = payload
        super().__init__(f"XT API error: {mc}")


class XtClient:
    def __init__(
        self,
        access_key: str = config.XT_ACCESS_KEY,
        secret_key: str = config.XT_SECRET_KEY,
        base_url: str = config.XT_API_BASE,
        recv_window: int = config.XT_RECV_WINDOW,
        timeout: float = config.XT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.access_key = access_key
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.recv_window = recv_window
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---- 서명 ----
    def _sign_headers(self, method: str, path: str, query: str = "", body: str = "") -> Dict[str, str]:
        timestamp = str(int(time.time() * 1000))
        headers = {
            "validate-algorithms": ALGORITHM,
            "validate-appkey": self.access_key,
            "validate-recvwindow": str(self.recv_window),
            "validate-timestamp": timestamp,
        }
        x = "&".join(f"{k}={headers[k]}" for k in sorted(headers))
        y = f"#{method}#{path}"
        if query:
            y += f"#{query}"
        if body:
            y += f"#{body}"
        signature = hmac.new(
            self.secret_key.encode("utf-8"), (x + y).encode("utf-8"), hashlib.sha256
        ).hexdigest()
        headers["validate-signature"] = signature
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        signed: bool = False,
    ) -> Dict[str, Any]:
        params = {k: v for k, v in (params or {}).items() if v is not None}
        query = urlencode(sorted(params.items()))
        data = json.dumps(body, separators=(",", ":")) if body is not None else ""
        headers = {"Content-Type": "application/json"}
        if signed:
            headers.update(self._sign_headers(method, path, query, data))
        url = f"{self.base_url}{path}"
        if query:
            url += f"?{query}"
        resp = self.session.request(method, url, data=data or None, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        payload = resp.json()
        if isinstance(payload, dict) and payload.get("rc", 0) != 0:
            logger.warning("XT %s %s failed: mc=%s", method, path, payload.get("mc"))
            raise XtApiError(payload.get("mc"), payload)
        return payload

    # ---- public ----
    def get_depth(self, symbol: str, limit: Optional[int] = None):
        return self._request("GET", "/v4/public/depth", {"symbol": symbol.lower(), "limit": limit})

    def get_ticker_price(self, symbol: str):
        return self._request("GET", "/v4/public/ticker/price", {"symbol": symbol.lower()})

    def get_symbol_info(self, symbol: str):
        return self._request("GET", "/v4/public/symbol", {"symbol": symbol.lower()})

    # ---- private ----
    def get_open_orders(self, symbol: Optional[str] = None, biz_type: str = "SPOT"):
        return self._request(
            "GET", "/v4/open-order",
            {"symbol": symbol.lower() if symbol else None, "bizType": biz_type},
            signed=True,
        )

    def get_balances(self, currencies: List[str]):
        return self._request(
            "GET", "/v4/balances",
            {"currencies": ",".join(c.lower() for c in currencies)},
            signed=True,
        )

    def get_balance(self, currency: str):
        return self._request("GET", "/v4/balance", {"currency": currency.lower()}, signed=True)

    def create_order(self, params: Dict[str, Any]):
        return self._request("POST", "/v4/order", body=params, signed=True)

    def cancel_order(self, order_id: str):
        return self._request("DELETE", f"/v4/order/{order_id}", signed=True)

    def cancel_order_batch(self, order_ids: List[str]):
        return self._request("DELETE", "/v4/batch-order", body={"orderIds": list(order_ids)}, signed=True)


_client: Optional[XtClient] = None


def get_xt_client() -> XtClient:
    """라우터 의존성 주입용 (테스트에서 dependency_overrides로 교체)"""
    global _client
    if _client is None:
        _client = XtClient()
    return _client
