import os
import uvicorn
import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from alumni_hub.api.v1.api import api_router
from alumni_hub.core.config import settings
from alumni_hub.core.exceptions import StoreError
from alumni_hub.core.logging import configure_structlog
from alumni_hub.db.session import create_tables, engine

logger = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan_context_manager(app: FastAPI):
    # Startup
    configure_structlog()
    create_tables(engine)
    logger.info("app_started", environment=settings.ENVIRONMENT, instance_id=settings.INSTANCE_ID)
    yield
    # Shutdown
    engine.dispose()
    logger.info("app_stopped", instance_id=settings.INSTANCE_ID)


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for the Alumni Hub: connections, events, jobs, celebrations, fundraising and forums.",
    version="0.1.0",
    lifespan=lifespan_context_manager,
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    # Details are in the log written where the error was raised
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred."},
    )

app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
async def read_root():
    return {"message": "Welcome to the Alumni Hub API"}

@app.get("/health")
async def health_check():
    return {"status": "ok"}

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
