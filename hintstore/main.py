from contextlib import asynccontextmanager
from fastapi import FastAPI
from hintstore.api.v1.router import api_router
from hintstore.core.config import settings
from hintstore.core.logging import configure_logging
from hintstore.db.init_db import init_db

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield

app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.include_router(api_router)
