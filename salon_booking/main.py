# salon_booking/main.py

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .db import create_db_and_tables
from .routers import appointments_routes, availability_routes, blocks_routes, services_routes

logging.basicConfig(
    level=os.getenv("SALON_LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Database ready")
    yield


app = FastAPI(title="Salon Booking", lifespan=lifespan)

app.include_router(services_routes.router)
app.include_router(availability_routes.router)
app.include_router(appointments_routes.router)
app.include_router(blocks_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
