"""
SQLAlchemy Product model
"""
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Text, Boolean, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base

PRODUCT_STATUSES = ("draft", "active", "archived")


class Product(Base):
    """Product database model"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False, index=True)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    price_in_fils = Column(Integer, nullable=False)
    old_price_in_fils = Column(Integer, nullable=True)
    currency = Column(String(3), nullable=True, default="KWD")
    stock = Column(Integer, nullable=False, default=0)
    rating_rate = Column(Float, nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="products")
    images = relationship(
        "ProductImage",
        back_populates="product",
        order_by="ProductImage.position",
        cascade="all, delete-orphan",
    )

    # Constraints
    __table_args__ = (
        CheckConstraint('price_in_fils >= 0', name='check_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in PRODUCT_STATUSES) + ")",
            name='check_product_status_valid'
        ),
    )

    @property
    def primary_image_url(self):
        """URL of the image flagged primary, else the first image, else None"""
        for image in self.images:
            if image.is_primary:
                return image.url
        return self.images[0].url if self.images else None

    @property
    def discount_percent(self):
        if self.old_price_in_fils is None or self.old_price_in_fils <= self.price_in_fils:
            return None
        return round((1 - self.price_in_fils / self.old_price_in_fils) * 100)

    def __repr__(self):
        return f"<Product(id={self.id}, title='{self.title}', price_in_fils={self.price_in_fils}, stock={self.stock})>"


class ProductImage(Base):
    """Product image reference (stored in object storage)"""

    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="images")
