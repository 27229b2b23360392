"""
Shared FastAPI dependencies
"""
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from storefront.config import Settings, settings
from storefront.database import get_db
from storefront.publishers.event_publisher import EventPublisher
from storefront.services.catalog_service import CatalogService
from storefront.services.fulfillment import FulfillmentDispatcher
from storefront.services.order_service import OrderService

admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def get_settings() -> Settings:
    return settings


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_publisher


def get_dispatcher(request: Request) -> FulfillmentDispatcher:
    return request.app.state.dispatcher


def get_order_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
    config: Settings = Depends(get_settings)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, event_publisher=event_publisher, settings=config)


def get_catalog_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings)
) -> CatalogService:
    """Dependency to get CatalogService instance"""
    return CatalogService(db, settings=config)


def require_admin(
    token: Optional[str] = Security(admin_token_header),
    config: Settings = Depends(get_settings)
) -> None:
    """Allow the request only with a matching X-Admin-Token header"""
    if not config.ADMIN_API_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin API is disabled"
        )
    if not token or not secrets.compare_digest(token, config.ADMIN_API_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
