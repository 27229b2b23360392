"""
SQLAlchemy Order model
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base

ORDER_STATUSES = (
    "pending", "confirmed", "processing", "shipped", "completed", "cancelled", "fulfilled"
)


class Order(Base):
    """Order database model"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    invoice_no = Column(String(32), nullable=False)
    user_id = Column(String(64), nullable=True, index=True)

    # Customer contact
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(8), nullable=False, index=True)
    customer_email = Column(String(255), nullable=True)

    # Shipping address
    ship_area = Column(String(255), nullable=False)
    ship_block = Column(String(64), nullable=False)
    ship_street = Column(String(255), nullable=False)
    ship_avenue = Column(String(255), nullable=False, default="")
    ship_house_no = Column(String(64), nullable=False)
    ship_notes = Column(Text, nullable=False, default="")

    # Totals in fils
    subtotal_in_fils = Column(Integer, nullable=False)
    shipping_in_fils = Column(Integer, nullable=False, default=0)
    total_in_fils = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default='pending', index=True)
    payment_method = Column(String(100), nullable=True)
    payment_status = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint('invoice_no', name='uq_orders_invoice_no'),
        CheckConstraint('subtotal_in_fils >= 0', name='check_subtotal_non_negative'),
        CheckConstraint('shipping_in_fils >= 0', name='check_shipping_non_negative'),
        CheckConstraint('total_in_fils = subtotal_in_fils + shipping_in_fils', name='check_total_is_sum'),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in ORDER_STATUSES) + ")",
            name='check_order_status_valid'
        ),
    )

    @property
    def customer(self):
        return {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "email": self.customer_email,
        }

    @property
    def shipping_address(self):
        return {
            "area": self.ship_area,
            "block": self.ship_block,
            "street": self.ship_street,
            "avenue": self.ship_avenue or "",
            "house_no": self.ship_house_no,
            "notes": self.ship_notes or "",
        }

    def __repr__(self):
        return f"<Order(id={self.id}, invoice_no='{self.invoice_no}', total_in_fils={self.total_in_fils}, status='{self.status}')>"


class OrderItem(Base):
    """Order line snapshotted from the product at order time"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)  # Denormalized for history
    title = Column(String(200), nullable=False)
    price_in_fils = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="KWD")
    qty = Column(Integer, nullable=False)
    image = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint('qty > 0', name='check_qty_positive'),
        CheckConstraint('price_in_fils >= 0', name='check_item_price_non_negative'),
    )
