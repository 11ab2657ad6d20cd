from backend.app.core.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager
from fastapi import FastAPI

from backend.app.modules.bot.routers.bot import router as bot_router, shutdown_bot
from backend.app.modules.orderdesk.routers.orderdesk import router as orderdesk_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown_bot()

app = FastAPI(title="XT Order Desk", lifespan=lifespan)
app.include_router(orderdesk_router)
app.include_router(bot_router)

@app.get("/api/ping")
def ping():
    return {"message": "pong"}
