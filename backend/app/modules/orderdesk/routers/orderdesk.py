# backend/app/modules/orderdesk/routers/orderdesk.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
import logging

from backend.app.core import config
from ..clients.xt_client import XtClient, get_xt_client
from ..schemas.schemas import (
    CancelRequest,
    CancelTailRequest,
    DepthSnapshot,
    OrderbookRequest,
    OrdersRequest,
    PlaceOrderRequest,
    SymbolRequest,
)
from ..services import account_service
from ..services.order_ages import bucket_order_ages
from ..services.order_selection import (
    order_ids,
    select_tail_cancellations,
    select_tail_orders,
    summarize_pair_liquidity,
)
from ..services.orderbook import aggregate_orderbook
from ..services.utils import display_symbol

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orderdesk", tags=["orderdesk"])


def _require_symbol(symbol):
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail="Symbol is required")
    return symbol


@router.get("/pairs")
def get_pairs():
    return {"pairs": [{"symbol": s, "display": display_symbol(s)} for s in config.PAIRS]}


# [호가창 + 집계 지표]
@router.post("/orderbook")
def post_orderbook(req: OrderbookRequest, client: XtClient = Depends(get_xt_client)):
    symbol = _require_symbol(req.symbol)
    try:
        depth = account_service.fetch_depth(client, symbol, req.limit)
        aggregated = aggregate_orderbook(depth)
    except Exception as e:
        logger.exception("orderbook failed | %s", symbol)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "success": True,
        "symbol": symbol,
        "orderbook": DepthSnapshot(bids=depth["bids"], asks=depth["asks"]).model_dump(),
        "aggregated": aggregated.model_dump(by_alias=True),
    }


# [심볼별 미체결 주문]
@router.post("/orders")
def post_orders(req: OrdersRequest, client: XtClient = Depends(get_xt_client)):
    for symbol in req.symbols:
        _require_symbol(symbol)
    return account_service.fetch_open_orders(client, req.symbols)


# [전체 미체결 주문 → 거래쌍별 유동성]
@router.get("/all_orders")
def get_all_orders(client: XtClient = Depends(get_xt_client)):
    try:
        orders = account_service.fetch_all_open_orders(client)
    except Exception as e:
        logger.exception("all orders failed")
        raise HTTPException(status_code=500, detail=str(e))
    return [p.model_dump(by_alias=True) for p in summarize_pair_liquidity(orders)]


# [주문 나이 히스토그램]
@router.get("/order_ages")
def get_order_ages(client: XtClient = Depends(get_xt_client)):
    try:
        orders = account_service.fetch_all_open_orders(client)
    except Exception as e:
        logger.exception("order ages failed")
        raise HTTPException(status_code=500, detail=str(e))
    return [p.model_dump(by_alias=True) for p in bucket_order_ages(orders)]


# [잔고]
@router.get("/balance")
def get_balance(client: XtClient = Depends(get_xt_client)):
    balances = account_service.fetch_balances(client, config.CURRENCIES)
    return {cur: b.model_dump() for cur, b in balances.items()}


# [선택 주문 취소]
@router.post("/cancel_orders")
def post_cancel_orders(req: CancelRequest, client: XtClient = Depends(get_xt_client)):
    if not req.symbol or not req.symbol.strip() or not req.order_ids:
        raise HTTPException(status_code=400, detail="Symbol and orderIds array are required")
    result = account_service.cancel_orders(client, req.order_ids)
    return result.model_dump(exclude_none=True)


# [꼬리 취소: keep = 방향별 상위 keep개만 남김 / count = 한쪽에서 가장 불리한 count개]
@router.post("/cancel_tail")
def post_cancel_tail(req: CancelTailRequest, client: XtClient = Depends(get_xt_client)):
    symbol = _require_symbol(req.symbol)
    try:
        orders = account_service.fetch_symbol_open_orders(client, symbol)
    except Exception as e:
        logger.exception("cancel tail fetch failed | %s", symbol)
        raise HTTPException(status_code=500, detail=str(e))

    if req.count is not None:
        ids = order_ids(select_tail_orders(orders, req.side, req.count))
    else:
        ids = order_ids(select_tail_cancellations(orders, req.keep, req.side))
    if not ids:
        return {"success": True, "cancelled": 0, "orderIds": []}
    result = account_service.cancel_orders(client, ids)
    return {"success": result.success, "cancelled": result.cancelled, "orderIds": ids}


# [시장가 주문]
@router.post("/place_order")
def post_place_order(req: PlaceOrderRequest, client: XtClient = Depends(get_xt_client)):
    if not req.symbol or not req.side or not (req.quantity or req.quote_qty):
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: symbol, side, and either quantity or quote_qty",
        )
    if req.side not in ("BUY", "SELL"):
        raise HTTPException(status_code=400, detail="Side must be either BUY or SELL")
    try:
        result = account_service.place_market_order(client, req.symbol, req.side, req.quantity, req.quote_qty)
    except Exception as e:
        logger.exception("place order failed | %s %s", req.symbol, req.side)
        raise HTTPException(status_code=500, detail=str(e))
    if not result.success:
        return JSONResponse(status_code=500, content=result.model_dump(by_alias=True))
    return result.model_dump(by_alias=True)


# [현재가]
@router.post("/ticker_price")
def post_ticker_price(req: SymbolRequest, client: XtClient = Depends(get_xt_client)):
    symbol = _require_symbol(req.symbol)
    try:
        price = account_service.fetch_ticker_price(client, symbol)
    except Exception as e:
        logger.exception("ticker price failed | %s", symbol)
        raise HTTPException(status_code=500, detail=str(e))
    if not price:
        raise HTTPException(status_code=500, detail="Failed to get ticker price")
    return {"success": True, "symbol": symbol, "price": price}


# [심볼 거래 정보]
@router.post("/symbol_info")
def post_symbol_info(req: SymbolRequest, client: XtClient = Depends(get_xt_client)):
    symbol = _require_symbol(req.symbol)
    try:
        info = account_service.fetch_symbol_info(client, symbol)
    except Exception as e:
        logger.exception("symbol info failed | %s", symbol)
        raise HTTPException(status_code=500, detail=str(e))
    if not info:
        raise HTTPException(status_code=500, detail="Failed to get symbol info")
    return {"success": True, "info": info}
