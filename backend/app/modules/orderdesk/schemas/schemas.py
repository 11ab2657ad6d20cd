# [Pydantic 데이터 스키마(요청, 응답, 집계결과 정의)]
# backend/app/modules/orderdesk/schemas/schemas.py

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Literal, Optional, Union

Side = Literal["BUY", "SELL"]
Number = Union[str, float, int]


class CamelModel(BaseModel):
    # 파이썬 속성은 snake_case, JSON은 camelCase (입력은 둘 다 허용)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- 요청 ----
class SymbolRequest(CamelModel):
    symbol: Optional[str] = None


class OrderbookRequest(SymbolRequest):
    limit: Optional[int] = Field(None, ge=1, le=500)


class OrdersRequest(CamelModel):
    symbols: List[str]


class CancelRequest(CamelModel):
    symbol: Optional[str] = None
    order_ids: List[str] = Field(default_factory=list)


class CancelTailRequest(CamelModel):
    """
    keep: 방향별 상위 keep개만 남기고 나머지 취소
    count: side 방향에서 가장 불리한 count개 취소 (side 필수)
    """
    symbol: Optional[str] = None
    keep: Optional[int] = Field(None, ge=0)
    count: Optional[int] = Field(None, ge=1)
    side: Optional[Side] = None

    @model_validator(mode="after")
    def check_mode(self):
        if (self.keep is None) == (self.count is None):
            raise ValueError("Exactly one of keep or count is required")
        if self.count is not None and self.side is None:
            raise ValueError("side is required with count")
        return self


class PlaceOrderRequest(CamelModel):
    symbol: Optional[str] = None
    side: Optional[str] = None
    quantity: Optional[float] = None
    quote_qty: Optional[float] = None


# ---- 호가 집계 ----
class DepthSnapshot(BaseModel):
    bids: List[List[Number]]
    asks: List[List[Number]]


class SidePair(BaseModel):
    bids: float
    asks: float


class SideCount(BaseModel):
    bids: int
    asks: int


class AggregatedMetrics(CamelModel):
    mid_price: float
    spread: float                        # %
    cumulative_qty_2_percent: SidePair
    max_gap_percent: SidePair            # %
    cumulative_qty_level_20: SidePair
    total_orders: SideCount              # 호가 레벨 수 (주문 수 아님)


# ---- 주문 나이 히스토그램 ----
class AgeBucket(BaseModel):
    min: float
    max: Optional[float]                 # None = 상한 없음
    label: str
    count: int = 0


class PairAgeData(CamelModel):
    symbol: str
    buckets: List[AgeBucket]
    total_orders: int


# ---- 잔고 / 유동성 ----
class Balance(BaseModel):
    available: float = 0.0
    frozen: float = 0.0
    total: float = 0.0


class PairLiquidity(CamelModel):
    symbol: str
    buy_liquidity: float = 0.0
    sell_liquidity: float = 0.0
    buy_count: int = 0
    sell_count: int = 0


class CancelResult(BaseModel):
    success: bool
    cancelled: int
    errors: Optional[List[str]] = None


class PlaceOrderResult(CamelModel):
    success: bool
    order_id: Optional[str] = None
    error: Optional[str] = None
    details: Any = None
