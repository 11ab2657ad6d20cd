# backend/app/modules/bot/routers/bot.py
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from backend.app.modules.orderdesk.clients.xt_client import XtClient, get_xt_client
from ..schemas import BotConfig
from ..services.alternating_bot import AlternatingOrderBot, BotAlreadyRunning

router = APIRouter(prefix="/bot", tags=["bot"])

bot: Optional[AlternatingOrderBot] = None


def get_bot(client: XtClient = Depends(get_xt_client)) -> AlternatingOrderBot:
    global bot
    if bot is None:
        bot = AlternatingOrderBot(client)
    return bot


def shutdown_bot():
    if bot is not None:
        bot.stop(timeout=5)


@router.post("/start")
def start_bot(config: BotConfig, bot: AlternatingOrderBot = Depends(get_bot)):
    try:
        bot.start(config)
    except BotAlreadyRunning as e:
        raise HTTPException(status_code=409, detail=str(e))
    return bot.status().model_dump(by_alias=True)


@router.post("/stop")
def stop_bot(bot: AlternatingOrderBot = Depends(get_bot)):
    bot.stop()
    return bot.status().model_dump(by_alias=True)


@router.get("/status")
def get_status(bot: AlternatingOrderBot = Depends(get_bot)):
    return bot.status().model_dump(by_alias=True)


@router.post("/clear_logs")
def clear_logs(bot: AlternatingOrderBot = Depends(get_bot)):
    bot.clear_logs()
    return {"ok": True}
