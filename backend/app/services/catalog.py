"""
Produce catalog and quote requests.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.config.settings import settings
from app.models import Category, Product, Quote
from app.schemas import ProductResponse, QuoteItem, QuoteResponse
from app.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def to_product_response(product: Product) -> ProductResponse:
    """Storefront card shape for a product row."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        image_url=product.image or "",
        price=product.price,
        unit=product.unit,
        category=product.category.name if product.category else "",
        in_stock=product.in_stock,
        stock_quantity=product.stock_quantity
    )


class CatalogService:
    """Service for products, categories and stock levels."""

    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> List[Product]:
        return (
            self.db.query(Product)
            .options(joinedload(Product.category))
            .order_by(Product.name)
            .all()
        )

    def get_or_create_category(self, name: Optional[str] = None) -> Category:
        name = (name or settings.DEFAULT_CATEGORY).strip()
        category = self.db.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name)
            self.db.add(category)
            self.db.flush()
            logger.info("Created category %s", name)
        return category

    def create_product(
        self,
        name: str,
        price: float,
        stock_quantity: int,
        unit: Optional[str] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        image: Optional[str] = None
    ) -> Product:
        product = Product(
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            unit=unit or settings.DEFAULT_UNIT,
            category=self.get_or_create_category(category),
            description=description,
            image=image,
            in_stock=stock_quantity > 0
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_stock(self, product_id: int, stock_quantity: int) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")

        product.stock_quantity = stock_quantity
        product.in_stock = stock_quantity > 0
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_low_stock(self, threshold: Optional[int] = None) -> List[Product]:
        """Products under the threshold, lowest stock first."""
        if threshold is None:
            threshold = settings.LOW_STOCK_THRESHOLD
        return (
            self.db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.stock_quantity < threshold)
            .order_by(Product.stock_quantity.asc())
            .all()
        )


class QuoteService:
    """Prices a cart against the catalog and records the request."""

    def __init__(self, db: Session):
        self.db = db

    def create_quote(
        self,
        name: str,
        email: str,
        items: List[QuoteItem],
        message: Optional[str] = None
    ) -> QuoteResponse:
        requested_ids = [item.id for item in items]
        rows = (
            self.db.query(Product.id, Product.price)
            .filter(Product.id.in_(requested_ids))
            .all()
        )
        price_map = {row.id: row.price for row in rows}

        sub_total = 0.0
        items_for_db: Dict[str, int] = {}
        for item in items:
            price = price_map.get(item.id)
            if price is None:
                logger.warning("Quote references unknown product %s", item.id)
                raise NotFoundError(f"Product with ID {item.id} not found")
            sub_total += price * item.quantity
            # Repeated lines for the same product accumulate
            key = str(item.id)
            items_for_db[key] = items_for_db.get(key, 0) + item.quantity

        estimated_tax = sub_total * settings.TAX_RATE
        total = sub_total + estimated_tax

        quote = Quote(
            name=name,
            email=email,
            message=message or "",
            items=items_for_db,
            sub_total=sub_total,
            estimated_tax=estimated_tax,
            total=total
        )
        self.db.add(quote)
        self.db.commit()
        logger.info("Quote %s created for %s: total %.2f", quote.id, email, total)

        return QuoteResponse(sub_total=sub_total, estimated_tax=estimated_tax, total=total)
