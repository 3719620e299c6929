"""
FastAPI Application Entry Point - Storefront Order Service
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.config import settings, configure_logging
from storefront.database import init_db
from storefront.api import orders, inventory, health

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Storefront Order Service",
    description="Order lifecycle and inventory accounting for the storefront",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(orders.router)
app.include_router(inventory.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("Database initialized")
    logger.info("RabbitMQ URL: %s (notifications %s)",
                settings.RABBITMQ_URL, "enabled" if settings.NOTIFICATIONS_ENABLED else "disabled")
    logger.info("%s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
