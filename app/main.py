from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.database import engine, Base
from app import models  # noqa: F401
from app.api import (
    auth,
    cart,
    categories,
    coupons,
    dashboard,
    health,
    orders,
    products,
    reviews,
    shipping_addresses,
    users,
    wishlist,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    REST backend for an online store:

    - **Catalog**: Categories and products with URL slugs and soft delete
    - **Stock**: Conditional stock updates that never go negative
    - **Coupons**: Percentage and fixed discounts with validity windows and usage limits
    - **Orders**: Multi-item orders placed in a single all-or-nothing transaction
    - **Cart, wishlist, reviews, shipping addresses** and an admin **dashboard**

    ## Features

    ### Atomic order placement
    Product and coupon rows are locked with `SELECT FOR UPDATE`; the order,
    its items, the stock decrements and the coupon usage commit together or
    not at all.

    ### Background processing
    A Celery task sends the order confirmation after the order commits.

    ### Caching
    Product details are cached in Redis and invalidated on every change.
    """,
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
for module in (
    health,
    auth,
    users,
    categories,
    products,
    coupons,
    cart,
    wishlist,
    orders,
    reviews,
    shipping_addresses,
    dashboard,
):
    app.include_router(module.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
