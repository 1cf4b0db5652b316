from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from src.config import config
from src.dependencies import get_generation_client, get_notifier

scheduler = AsyncIOScheduler(timezone=config.CREDITS_TIMEZONE)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    scheduler.start()
    yield
    scheduler.shutdown()
    await get_generation_client().aclose()
    await get_notifier().aclose()
