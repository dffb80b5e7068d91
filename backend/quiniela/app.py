from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from quiniela.config import Environment, config, environment
from quiniela.database import database
from quiniela.routes import matches, pools, predictions, standings
from quiniela.utils.alembic import alembic_run_migrations
from quiniela.utils.errors import QuinielaError
from quiniela.utils.logging import logger


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await database.connect()
    if config.auto_run_migrations and environment is not Environment.CI:
        alembic_run_migrations()

    yield

    await database.disconnect()


app = FastAPI(
    title="Quiniela API",
    docs_url="/docs" if environment is Environment.DEVELOPMENT else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuinielaError)
async def quiniela_error_handler(request: Request, exc: QuinielaError) -> JSONResponse:
    logger.info("Request failed: path=%s code=%s detail=%s", request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


for router in (predictions.router, matches.router, pools.router, standings.router):
    app.include_router(router)
