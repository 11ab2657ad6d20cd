# backend/app/modules/bot/services/alternating_bot.py
"""
BUY / SELL 시장가 주문을 일정 간격으로 번갈아 넣는 봇 컨트롤러

상태: IDLE → SCHEDULED → SUBMITTING → SCHEDULED (실행 중) / IDLE (정지)
- 주문 성공 시에만 방향 전환, 실패하면 다음 틱에 같은 방향 재시도
- SUBMITTING 중 들어온 틱은 건너뜀 (중복 제출 방지)
- stop()은 Event로 정지 신호를 보내고 스레드 종료를 기다림
"""
import logging
import math
import threading
import time
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Optional

from backend.app.modules.orderdesk.services.account_service import place_market_order
from ..schemas import BotConfig, BotStatus, OrderLog

logger = logging.getLogger(__name__)

MAX_LOGS = 50
PRECISION = 8


class BotState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    SUBMITTING = "submitting"


class BotAlreadyRunning(RuntimeError):
    pass


def round_down(value: float, decimals: int = PRECISION) -> float:
    m = 10 ** decimals
    return math.floor(value * m) / m


def opposite(side: str) -> str:
    return "SELL" if side == "BUY" else "BUY"


class AlternatingOrderBot:
    def __init__(self, client):
        self.client = client
        self.config: Optional[BotConfig] = None
        self.state = BotState.IDLE
        self.next_side = None
        self.cycle_count = 0
        self.logs = deque(maxlen=MAX_LOGS)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._next_tick_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self, config: BotConfig):
        with self._lock:
            if self._running:
                raise BotAlreadyRunning("bot is already running")
            self.config = config
            self.next_side = config.starting_side
            self.cycle_count = 0
            self._running = True
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, daemon=True, name="alternating-bot")
        logger.info(
            "bot start | %s | every %ss | first side %s",
            config.symbol, config.interval_seconds, config.starting_side,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        with self._lock:
            if not self._running:
                return
            self._running = False
            thread = self._thread
        self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        with self._lock:
            self.state = BotState.IDLE
            self._next_tick_at = None
            self._thread = None
        logger.info("bot stopped | cycles=%d", self.cycle_count)

    def _run(self):
        interval = self.config.interval_seconds
        while not self._stop.is_set():
            with self._lock:
                if self.state != BotState.SUBMITTING:
                    self.state = BotState.SCHEDULED
                self._next_tick_at = time.monotonic() + interval
            if self._stop.wait(interval):
                break
            self.tick()

    def tick(self) -> bool:
        """한 사이클 실행. 이미 제출 중이면 False"""
        with self._lock:
            if self.state == BotState.SUBMITTING:
                logger.info("skipping cycle - already submitting")
                return False
            if self.config is None:
                return False
            self.state = BotState.SUBMITTING
            side = self.next_side or self.config.starting_side
            config = self.config

        success = False
        try:
            success = self._submit(config, side)
        finally:
            with self._lock:
                if success:
                    self.next_side = opposite(side)
                    self.cycle_count += 1
                self.state = BotState.SCHEDULED if self._running else BotState.IDLE
        if not success:
            logger.warning("order failed, keeping %s for next cycle", side)
        return success

    def _submit(self, config: BotConfig, side: str) -> bool:
        if side == "BUY":
            amount = round_down(config.buy_amount)
            kwargs = {"quote_qty": amount}
        else:
            amount = round_down(config.sell_amount)
            kwargs = {"quantity": amount}
        try:
            result = place_market_order(self.client, config.symbol, side, **kwargs)
            ok, message, order_id = result.success, result.error or "Market order placed successfully", result.order_id
        except Exception as e:
            logger.exception("bot order error | %s %s", config.symbol, side)
            ok, message, order_id = False, str(e), None

        self.logs.appendleft(OrderLog(
            timestamp=datetime.now().strftime("%H:%M:%S"),
            side=side,
            quantity=amount,
            status="success" if ok else "error",
            message=message,
            order_id=order_id,
        ))
        return ok

    def clear_logs(self):
        with self._lock:
            self.logs.clear()
            self.cycle_count = 0

    def status(self) -> BotStatus:
        with self._lock:
            seconds_to_next = None
            if self._running and self._next_tick_at is not None:
                seconds_to_next = max(0.0, round(self._next_tick_at - time.monotonic(), 1))
            return BotStatus(
                state=self.state.value,
                running=self._running,
                config=self.config,
                next_side=self.next_side if self._running else (self.config.starting_side if self.config else None),
                cycle_count=self.cycle_count,
                seconds_to_next=seconds_to_next,
                logs=list(self.logs),
            )
