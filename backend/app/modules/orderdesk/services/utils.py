# [공통 유틸 함수 모음(숫자 변환, 심볼 보정, 응답 포맷 정리)]
# backend/app/modules/orderdesk/services/utils.py
from decimal import Decimal
from typing import Any, Dict, List


def to_float(x):
    try:
        return float(x)
    except Exception:
        return 0.0


def format_amount(x) -> str:
    """지수표기 없이 10진 문자열 (4.754e-05 → 0.00004754, 10.0 → 10)"""
    return format(Decimal(str(x)).normalize(), "f")


def first_present(d: Dict[str, Any], *keys):
    """truthy 한 첫 번째 키 값 (JS의 a || b || c 와 동일)"""
    for k in keys:
        v = d.get(k)
        if v:
            return v
    return None


def normalize_xt_symbol(symbol):
    """
    XT 공식 심볼명으로 자동 보정 (ex: DEPS/BTC, deps-btc, DEPS_BTC → deps_btc)
    """
    return str(symbol).strip().lower().replace("/", "_").replace("-", "_")


def display_symbol(symbol):
    """deps_btc → DEPS/BTC"""
    return normalize_xt_symbol(symbol).upper().replace("_", "/")


def extract_order_list(response) -> List[dict]:
    """
    open-order 응답 포맷이 일정하지 않아 리스트만 꺼냄
    {result: {list: [...]}} | {result: [...]} | [...] | {list: [...]}
    """
    if isinstance(response, list):
        return response
    if not isinstance(response, dict):
        return []
    result = response.get("result")
    if result:
        if isinstance(result, dict):
            return result.get("list") or []
        if isinstance(result, list):
            return result
        return []
    return response.get("list") or []
