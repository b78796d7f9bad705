from fastapi import FastAPI
from contextlib import asynccontextmanager
from mocards.api.v1 import routers
import logging
from mocards.core.config import settings
from mocards.db.session import connect_db_pool, close_db_pool

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db_pool()
    yield
    await close_db_pool()

app = FastAPI(
    title="MOCARDS API",
    description="Card issuance, clinic assignment and perk redemption for MOCARDS dental cards",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(routers.router)

@app.get("/")
async def root():
    return {"message": "Welcome to MOCARDS API"}
