# bundle_deals/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bundle_deals import __version__
from bundle_deals.api.discounts import router as discounts_router
from bundle_deals.core.logging_config import logger, setup_logging
from bundle_deals.engine.discount_engine import get_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # fail fast on a broken pricing config instead of on the first cart
    engine = get_engine()
    logger.info("bundle_deals_startup", categories=engine.table.categories)
    yield


app = FastAPI(title="Bundle Deals", version=__version__, lifespan=lifespan)
app.include_router(discounts_router)


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}
