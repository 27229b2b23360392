"""
Product and Category Repositories - Data Access Layer
"""
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import Session, selectinload

from storefront.models.category import Category
from storefront.models.product import Product

SORT_ORDERS = {
    "priceAsc": (asc(Product.price_in_fils),),
    "priceDesc": (desc(Product.price_in_fils),),
    "ratingDesc": (desc(Product.rating_rate),),
    "titleAsc": (asc(Product.title),),
}
DEFAULT_SORT = (desc(Product.created_at),)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """Repository for Product reads and stock mutations"""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(Product).options(
            selectinload(Product.images),
            selectinload(Product.category),
        ).filter(Product.status == "active")

    def get_active_by_ids(self, product_ids: Iterable[int]) -> List[Product]:
        """Fetch all active products among the given IDs in one query"""
        ids = list(product_ids)
        if not ids:
            return []
        return self._active().filter(Product.id.in_(ids)).all()

    def get_active_by_id(self, product_id: int) -> Optional[Product]:
        """Get active product by ID"""
        return self._active().filter(Product.id == product_id).first()

    def get_active_by_slug(self, slug: str) -> Optional[Product]:
        """Get active product by slug (case-insensitive)"""
        return self._active().filter(func.lower(Product.slug) == slug.lower()).first()

    def search(
        self,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        sort: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Product], int]:
        """
        Search active products

        Args:
            q: Case-insensitive substring of title or description
            category_id: Restrict to one category
            sort: priceAsc | priceDesc | ratingDesc | titleAsc (default newest first)
            skip: Number of products to skip
            limit: Maximum number of products to return

        Returns:
            Page of products and the total number of matches
        """
        query = self._active()
        term = (q or "").strip()
        if term:
            pattern = _like_pattern(term)
            query = query.filter(or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            ))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        total = query.count()
        order_by = SORT_ORDERS.get(sort, DEFAULT_SORT)
        products = query.order_by(*order_by, desc(Product.id)).offset(skip).limit(limit).all()
        return products, total

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """
        Conditionally decrement stock inside the caller's transaction

        The decrement only applies while stock >= quantity, so two
        concurrent orders cannot both take the last units. Does not commit.

        Returns:
            True if the row was decremented
        """
        updated = self.db.query(Product).filter(
            Product.id == product_id,
            Product.stock >= quantity
        ).update(
            {Product.stock: Product.stock - quantity},
            synchronize_session=False
        )
        return updated == 1

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Conditionally decrement stock and commit

        Returns:
            True if decremented, False if the product is gone or short on stock
        """
        decremented = self.reserve_stock(product_id, quantity)
        self.db.commit()
        return decremented

    def get_stock(self, product_id: int) -> Optional[int]:
        """Current stock value read straight from the database"""
        return self.db.query(Product.stock).filter(Product.id == product_id).scalar()


class CategoryRepository:
    """Repository for Category reads"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Category]:
        """Get all categories ordered by name"""
        return self.db.query(Category).order_by(asc(Category.name)).all()

    def get_by_slug(self, slug: str) -> Optional[Category]:
        """Get category by slug (case-insensitive)"""
        return self.db.query(Category).filter(func.lower(Category.slug) == slug.lower()).first()
