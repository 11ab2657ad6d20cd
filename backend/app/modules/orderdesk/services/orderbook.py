# backend/app/modules/orderdesk/services/orderbook.py
import math

from ..schemas.schemas import AggregatedMetrics, SideCount, SidePair

BAND_PERCENT = 2.0
TOP_LEVELS = 20


class EmptyOrderBookError(ValueError):
    pass


def _parse_levels(levels):
    prices, qtys = [], []
    for price, qty in levels:
        price, qty = float(price), float(qty)
        # "NaN"/"inf" 레벨은 JSON으로 내보낼 수 없음
        if not (math.isfinite(price) and math.isfinite(qty)):
            raise ValueError(f"Non-finite orderbook level: {price}, {qty}")
        prices.append(price)
        qtys.append(qty)
    return prices, qtys


def _band_depth(prices, quantities, inside):
    # 최우선 호가부터 바깥으로, 밴드를 벗어나는 첫 레벨에서 중단
    total = 0.0
    for price, qty in zip(prices, quantities):
        if not inside(price):
            break
        total += qty
    return total


def _max_gap(prices, levels: int, descending: bool):
    gap_max = 0.0
    for i in range(min(levels, len(prices) - 1)):
        if prices[i] <= 0:
            continue
        if descending:
            gap = (prices[i] - prices[i + 1]) / prices[i]
        else:
            gap = (prices[i + 1] - prices[i]) / prices[i]
        gap_max = max(gap_max, gap)
    return gap_max


def aggregate_orderbook(ob: dict, band_percent: float = BAND_PERCENT, depth: int = TOP_LEVELS) -> AggregatedMetrics:
    """
    호가 스냅샷 요약 지표
    - ob: {"bids": [[price, qty], ...] (가격 내림차순), "asks": [...] (가격 오름차순)}
    - band_percent: 중간가 대비 누적수량 밴드(%)
    - depth: 누적수량/최대 갭 계산 레벨 수
    """
    bids = ob.get("bids") or []
    asks = ob.get("asks") or []
    if not bids or not asks:
        raise EmptyOrderBookError("Empty orderbook")

    bid_prices, bid_qtys = _parse_levels(bids)
    ask_prices, ask_qtys = _parse_levels(asks)

    best_bid = bid_prices[0]
    best_ask = ask_prices[0]
    mid_price = (best_ask + best_bid) / 2
    if not math.isfinite(mid_price) or mid_price <= 0:
        raise EmptyOrderBookError(f"Invalid mid price: {mid_price}")
    spread = (best_ask - best_bid) / mid_price * 100

    band = mid_price * band_percent / 100
    bid_floor = mid_price - band
    ask_ceiling = mid_price + band

    return AggregatedMetrics(
        mid_price=mid_price,
        spread=spread,
        cumulative_qty_2_percent=SidePair(
            bids=_band_depth(bid_prices, bid_qtys, lambda p: p >= bid_floor),
            asks=_band_depth(ask_prices, ask_qtys, lambda p: p <= ask_ceiling),
        ),
        max_gap_percent=SidePair(
            bids=_max_gap(bid_prices, depth, descending=True) * 100,
            asks=_max_gap(ask_prices, depth, descending=False) * 100,
        ),
        cumulative_qty_level_20=SidePair(
            bids=sum(bid_qtys[:depth]),
            asks=sum(ask_qtys[:depth]),
        ),
        # TODO: XT depth는 가격 레벨 단위라 실제 주문 수와 다름 (레벨 수 그대로 노출)
        total_orders=SideCount(bids=len(bids), asks=len(asks)),
    )
