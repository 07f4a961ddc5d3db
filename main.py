import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from telegram.ext import Application

from ledger.api.routes import router
from ledger.config import get_settings

settings = get_settings()

logger.remove()
logger.add(sys.stderr, level=settings.log_level, format="{time:HH:mm:ss} | {level:<7} | {message}")


async def start_bot() -> Application | None:
    """Start Telegram polling next to the HTTP bridge, when a token is configured."""
    if not settings.telegram_bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN not set, only the HTTP bridge is available")
        return None

    from ledger.bot.handler import build_bot_app

    bot_app = build_bot_app()
    await bot_app.initialize()
    await bot_app.start()
    await bot_app.updater.start_polling(drop_pending_updates=True)
    logger.info("Telegram bot polling")
    return bot_app


async def stop_bot(bot_app: Application) -> None:
    await bot_app.updater.stop()
    await bot_app.stop()
    await bot_app.shutdown()
    logger.info("Telegram bot stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.bot = await start_bot()
    try:
        yield
    finally:
        if app.state.bot is not None:
            await stop_bot(app.state.bot)


app = FastAPI(title="Gastos Ledger", version="0.1.0", lifespan=lifespan)
app.include_router(router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("{} {} → {} ({:.0f} ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port)
