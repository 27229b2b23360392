"""
Order Repository - Data Access Layer
"""
from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload

from storefront.models.order import Order, OrderItem


class OrderRepository:
    """Repository for Order persistence"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Order).options(selectinload(Order.items))

    def get_all(self, status: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Order]:
        """Get orders newest first, optionally filtered by status"""
        query = self._query()
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(
            desc(Order.created_at), desc(Order.id)
        ).offset(skip).limit(limit).all()

    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return self._query().filter(Order.id == order_id).first()

    def get_by_invoice_no(self, invoice_no: str) -> Optional[Order]:
        """Get order by invoice number"""
        return self._query().filter(Order.invoice_no == invoice_no).first()

    def add(self, order_data: dict, items: List[dict]) -> Order:
        """
        Stage a new order with its line items

        The row is flushed so constraint violations (e.g. a duplicate
        invoice number) surface here, but the transaction is left open
        for the caller to commit or roll back.

        Args:
            order_data: Dictionary with order fields
            items: Dictionaries with order item fields

        Returns:
            Pending order
        """
        order = Order(**order_data)
        order.items = [OrderItem(**item) for item in items]
        self.db.add(order)
        self.db.flush()
        return order

    def update_status(self, order: Order, new_status: str) -> Order:
        """Update order status"""
        order.status = new_status
        self.db.commit()
        self.db.refresh(order)
        return order

    def update_payment(self, order: Order, payment_data: dict) -> Order:
        """Update payment method and/or payment status"""
        for field, value in payment_data.items():
            setattr(order, field, value)
        self.db.commit()
        self.db.refresh(order)
        return order

    def count(self, status: Optional[str] = None) -> int:
        """Get total count of orders, optionally by status"""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.count()
