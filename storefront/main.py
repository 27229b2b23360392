"""
FastAPI Application Entry Point - Storefront
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.config import settings
from storefront.database import SessionLocal, init_db
from storefront.logging_config import configure_logging
from storefront.api import catalog, health, orders, whatsapp
from storefront.publishers.event_publisher import EventPublisher
from storefront.services.fulfillment import build_dispatcher

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("storefront")

# Create FastAPI application
app = FastAPI(
    title="Storefront",
    description="E-commerce backend: catalog, orders and order notifications",
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
app.include_router(catalog.router)
app.include_router(orders.router)
app.include_router(whatsapp.router)

# Process-owned transport clients
app.state.event_publisher = EventPublisher(settings)
app.state.dispatcher = build_dispatcher(settings, SessionLocal, app.state.event_publisher)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("Database initialized")
    logger.info("Stock policy: %s", settings.STOCK_POLICY)
    logger.info("Mail: %s, WhatsApp: %s, events: %s",
                settings.MAIL_ENABLED, settings.WHATSAPP_ENABLED, settings.EVENTS_ENABLED)
    logger.info("%s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
