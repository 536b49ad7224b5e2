# app/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import api_router
from app.data.database import Base, engine
from app.data.seed import seed
from app.utils.settings import APP_ENV, CORS_ORIGINS
from app.utils.logging import get_logger

# IMPORT WSZYSTKICH MODELI NA POCZĄTKU (PRZED JAKIMKOLWIEK CREATE_ALL)
from app.data import models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    seed()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Shop Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        body = {"success": False, "message": "Unexpected error"}
        # szczegoly tylko w dev, w produkcji nie wyciekaja
        if APP_ENV == "development":
            body["error"] = str(exc)
        return JSONResponse(status_code=500, content=body)

    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
