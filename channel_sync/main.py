# channel_sync/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from channel_sync.config import ALLOWED_ORIGINS
from channel_sync.logging_config import setup_logging
from channel_sync.middleware import RequestIDMiddleware
from channel_sync.routes.airbnb import router as airbnb_router
from channel_sync.routes.channex import router as channex_router
from channel_sync.routes.health import router as health_router
from channel_sync.routes.metrics import router as metrics_router
from channel_sync.routes.smart_locks import router as smart_locks_router

setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Channel Sync API",
    description="Tuya smart lock, Channex and Airbnb synchronization for a PMS",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(smart_locks_router, tags=["Smart Locks"])
app.include_router(channex_router, prefix="/channex", tags=["Channex"])
app.include_router(airbnb_router, prefix="/airbnb", tags=["Airbnb"])

logger.info("app_initialized", routers=["health", "metrics", "smart_locks", "channex", "airbnb"])
