# backend/app/modules/orderdesk/services/order_selection.py
from typing import Iterable, List, Optional

import pandas as pd

from ..schemas.schemas import PairLiquidity
from .utils import first_present, to_float


def _side(order: dict) -> str:
    return str(order.get("side") or "").upper()


def _remaining_qty(order: dict) -> float:
    quantity = to_float(first_present(order, "quantity", "origQty") or 0)
    executed = to_float(order.get("executedQty") or 0)
    return quantity - executed


def rank_side(orders: Iterable[dict], side: str) -> List[dict]:
    """
    한쪽 방향 주문을 유리한 가격 순으로 정렬
    BUY: 가격 내림차순 / SELL: 가격 오름차순
    """
    side = side.upper()
    picked = [o for o in orders if _side(o) == side]
    return sorted(picked, key=lambda o: to_float(o.get("price") or 0), reverse=(side == "BUY"))


def select_tail_cancellations(orders: Iterable[dict], keep: int, side: Optional[str] = None) -> List[dict]:
    """
    방향별 상위 keep개만 남기고 나머지(꼬리)를 취소 대상으로 선택
    side를 주면 해당 방향만 처리
    """
    if keep < 0:
        raise ValueError("keep must be >= 0")
    orders = list(orders)
    sides = [side.upper()] if side else ["BUY", "SELL"]
    selected = []
    for s in sides:
        selected.extend(rank_side(orders, s)[keep:])
    return selected


def select_tail_orders(orders: Iterable[dict], side: str, count: int) -> List[dict]:
    """대시보드 '닫기' 동작: 한쪽 방향에서 가장 불리한 count개"""
    if count <= 0:
        return []
    ranked = rank_side(orders, side)
    return ranked[-min(count, len(ranked)):]


def order_ids(orders: Iterable[dict]) -> List[str]:
    return [str(o["orderId"]) for o in orders if o.get("orderId")]


def summarize_pair_liquidity(orders: Iterable[dict]) -> List[PairLiquidity]:
    """전체 미체결 주문 → 거래쌍별 유동성/주문수 (심볼 사전순)"""
    rows = []
    for order in orders:
        symbol = order.get("symbol")
        if not symbol:
            continue
        rows.append({
            "symbol": str(symbol).upper(),
            "side": _side(order),
            "remaining": _remaining_qty(order),
            "price": to_float(order.get("price") or 0),
        })
    if not rows:
        return []

    df = pd.DataFrame(rows)
    is_buy = df["side"] == "BUY"
    is_sell = df["side"] == "SELL"
    df["buy_liquidity"] = (df["remaining"] * df["price"]).where(is_buy, 0.0)
    df["sell_liquidity"] = df["remaining"].where(is_sell, 0.0)
    df["buy_count"] = is_buy.astype(int)
    df["sell_count"] = is_sell.astype(int)
    cols = ["buy_liquidity", "sell_liquidity", "buy_count", "sell_count"]
    grouped = df.groupby("symbol", sort=True)[cols].sum().reset_index()

    return [
        PairLiquidity(
            symbol=r["symbol"],
            buy_liquidity=float(r["buy_liquidity"]),
            sell_liquidity=float(r["sell_liquidity"]),
            buy_count=int(r["buy_count"]),
            sell_count=int(r["sell_count"]),
        )
        for r in grouped.to_dict(orient="records")
    ]
