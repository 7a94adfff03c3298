from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

import models  # registers every table on Base.metadata
from config import get_settings
from database import Base, engine
from routes import (
    users,
    posts,
    follows,
    notifications,
    profiles,
)
from utils.logger import setup_api_logger

# setup file logger for API failures
api_logger = setup_api_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    api_logger.info("Database schema ready")
    yield


app = FastAPI(title=get_settings().APP_NAME, lifespan=lifespan)


@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    # log request info and stacktrace
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.error("Unhandled exception on %s %s | body=%s | error=%s",
                     request.method, request.url.path, body.decode('utf-8', errors='replace'), str(exc),
                     exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.warning("HTTPException on %s %s | status=%s | body=%s | detail=%s",
                       request.method, request.url.path, exc.status_code,
                       body.decode('utf-8', errors='replace'), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail},
                        headers=getattr(exc, "headers", None))


app.include_router(users.router)
app.include_router(posts.router)
app.include_router(follows.router)
app.include_router(notifications.router)
app.include_router(profiles.router)
