# backend/app/modules/orderdesk/services/order_ages.py
import math
import time
from typing import Iterable, List, Optional

from ..schemas.schemas import AgeBucket, PairAgeData

# (min초, max초, 라벨) / 마지막 구간은 상한 없음
BUCKET_RANGES = [
    (0, 60, "0-1m"),
    (60, 300, "1-5m"),
    (300, 900, "5-15m"),
    (900, 3600, "15m-1h"),
    (3600, 7200, "1-2h"),
    (7200, 14400, "2-4h"),
    (14400, 86400, "4-24h"),
    (86400, math.inf, "24h+"),
]

TIMESTAMP_FIELDS = ("createTime", "time", "updateTime")


def order_timestamp_ms(order: dict) -> Optional[float]:
    """
    주문 생성시각(ms). 없거나 파싱 불가면 None
    1e12 미만이면 초 단위로 보고 ms로 변환
    """
    raw = None
    for key in TIMESTAMP_FIELDS:
        if order.get(key):
            raw = order[key]
            break
    if raw is None:
        return None
    try:
        ts = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ts) or ts <= 0:
        return None
    return ts * 1000 if ts < 1e12 else ts


def bucket_index(age_seconds: float) -> int:
    for i, (lo, hi, _) in enumerate(BUCKET_RANGES):
        if lo <= age_seconds < hi:
            return i
    return len(BUCKET_RANGES) - 1


def bucket_order_ages(orders: Iterable[dict], now: Optional[float] = None) -> List[PairAgeData]:
    """
    미체결 주문 → 거래쌍별 주문 나이 히스토그램 (심볼 사전순)
    - now: epoch seconds (기본: 현재시각)
    """
    now_ms = (time.time() if now is None else now) * 1000
    counts = {}
    for order in orders:
        symbol = order.get("symbol")
        if not symbol:
            continue
        ts_ms = order_timestamp_ms(order)
        if ts_ms is None:
            continue
        age = max(0.0, (now_ms - ts_ms) / 1000)
        tally = counts.setdefault(str(symbol).upper(), [0] * len(BUCKET_RANGES))
        tally[bucket_index(age)] += 1

    result = []
    for symbol in sorted(counts):
        tally = counts[symbol]
        buckets = [
            AgeBucket(min=lo, max=None if math.isinf(hi) else hi, label=label, count=n)
            for (lo, hi, label), n in zip(BUCKET_RANGES, tally)
        ]
        result.append(PairAgeData(symbol=symbol, buckets=buckets, total_orders=sum(tally)))
    return result
