# [봇 설정/상태 스키마]
# backend/app/modules/bot/schemas.py

from typing import List, Literal, Optional

from pydantic import Field

from backend.app.modules.orderdesk.schemas.schemas import CamelModel


class BotConfig(CamelModel):
    symbol: str = "deps_btc"
    interval_seconds: int = Field(25, ge=1)
    starting_side: Literal["BUY", "SELL"] = "SELL"
    buy_amount: float = Field(0.0000475440, gt=0)   # quote 통화 (BUY 1회 지출액)
    sell_amount: float = Field(10, gt=0)            # base 통화 (SELL 1회 수량)


class OrderLog(CamelModel):
    timestamp: str
    side: Literal["BUY", "SELL"]
    quantity: float
    status: Literal["success", "error"]
    message: Optional[str] = None
    order_id: Optional[str] = None


class BotStatus(CamelModel):
    state: str
    running: bool
    config: Optional[BotConfig] = None
    next_side: Optional[str] = None
    cycle_count: int = 0
    seconds_to_next: Optional[float] = None
    logs: List[OrderLog] = []
