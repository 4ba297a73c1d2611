"""
Application entry point.

Run locally with:
    python main.py
or:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import APP_NAME, APP_HOST, APP_PORT
from logs.logging_config import setup_logging, get_proxy_logger
from schemas import HealthResponse
from translation import router as translation_router, close_session

setup_logging()
logger = get_proxy_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"[APP] Startup | name={APP_NAME}")
    try:
        yield
    finally:
        await close_session()
        logger.info("[APP] Shutdown complete")


app = FastAPI(title="Satisfiyworld Translate API", lifespan=lifespan)
app.include_router(translation_router)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(service=APP_NAME)


if __name__ == "__main__":
    uvicorn.run(app, host=APP_HOST, port=APP_PORT, log_level="info")
