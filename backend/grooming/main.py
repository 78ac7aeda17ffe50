import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis import RedisError

from .config import settings
from .database import init_db
from .redis_client import redis_client
from .routers import (
    admin,
    bookings,
    calendar_overrides,
    customers,
    revenue,
    services,
    shop_settings,
    shops,
)
from .services.completion_checker import completion_checker_loop

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    task = asyncio.create_task(completion_checker_loop())
    logger.info("Grooming booking API started")
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Grooming Booking API", lifespan=lifespan)

app.include_router(shops.router)
app.include_router(shop_settings.router)
app.include_router(services.router)
app.include_router(calendar_overrides.router)
app.include_router(bookings.router)
app.include_router(customers.router)
app.include_router(revenue.router)
app.include_router(admin.router)


@app.get("/health")
def health():
    if redis_client is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis_client.ping()}
    except RedisError:
        return {"status": "ok", "redis": False}
