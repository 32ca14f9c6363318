"""trsim — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from importlib.metadata import version, PackageNotFoundError

from fastapi import FastAPI

from trsim.api import dice, sheet, sim
from trsim.infra.db import close_db, init_db

logger = logging.getLogger("trsim")

try:
    __version__ = version("trsim")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
    await init_db()
    logger.info("trsim %s ready", __version__)
    yield
    await close_db()


app = FastAPI(
    title="trsim",
    description="Character sheet and scene simulator for tabletop sessions",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(dice.router)
app.include_router(sheet.router)
app.include_router(sim.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "engine": "trsim", "version": __version__}
