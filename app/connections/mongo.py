import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import certifi
from fastapi import FastAPI
from mongoengine import connect, disconnect

from app.models.user import User
from app.utils.config import settings


logger = logging.getLogger(__name__)


def init_mongo() -> None:
    connect(host=settings.mongo_uri, alias="default", tlsCAFile=certifi.where(), tz_aware=True)
    # Unique indexes on roll_no/email_id are the authoritative duplicate guard
    User.ensure_indexes()
    logger.info("Connected to MongoDB", extra={"db": settings.mongo_db})


def close_mongo() -> None:
    disconnect(alias="default")


@asynccontextmanager
async def mongo_lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_mongo()
    try:
        yield
    finally:
        close_mongo()
