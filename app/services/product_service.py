"""Tech product catalog."""
import logging
from typing import Any, List, Optional

from app.core.errors import AppError, ErrorKind
from app.db.store import DocumentTable, ItemExists, ItemNotFound, ScanFilter
from app.models.base import utc_now_iso
from app.models.product import Product
from app.utils.ids import epoch_millis

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
DEFAULT_PAGE_SIZE = 20
MAX_ID_ATTEMPTS = 10
IMMUTABLE_FIELDS = {"productId", "createdAt", "updatedAt"}


class ProductService:
    def __init__(self, table: DocumentTable):
        self.table = table

    def create(
        self,
        name: str,
        brand: str,
        category: str,
        price: float,
        rating: float = 0,
        specs: Optional[List[Any]] = None,
        description: str = "",
        affiliate_link: str = "",
        image_url: Optional[str] = None,
    ) -> Product:
        now = utc_now_iso()
        stamp = epoch_millis()
        product = Product(
            product_id=f"{category}-{stamp}",
            name=name,
            brand=brand,
            category=category,
            price=price,
            rating=rating or 0,
            specs=specs or [],
            description=description or "",
            affiliate_link=affiliate_link or "",
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        # two creates in the same millisecond would share an id
        for _ in range(MAX_ID_ATTEMPTS):
            try:
                self.table.put(product.to_item(), if_absent=True)
                break
            except ItemExists:
                stamp += 1
                product.product_id = f"{category}-{stamp}"
        else:
            raise AppError(ErrorKind.CONFLICT, "Could not allocate a product id, please retry")
        logger.info("Created product %s", product.product_id)
        return product

    def get(self, product_id: str) -> Optional[Product]:
        item = self.table.get(product_id)
        return Product.from_item(item) if item else None

    def list_all(self) -> List[Product]:
        return [Product.from_item(item) for item in self.table.scan()]

    def list_by_category(self, category: str) -> List[Product]:
        items = self.table.scan(ScanFilter(equals={"category": category}))
        return [Product.from_item(item) for item in items]

    def search(self, term: str) -> List[Product]:
        """Case-sensitive substring match on name or brand."""
        items = self.table.scan(ScanFilter(contains=term, contains_fields=("name", "brand")))
        return [Product.from_item(item) for item in items]

    def list_page(self, limit: int = DEFAULT_PAGE_SIZE, last_key: Optional[dict] = None) -> dict:
        items, next_key = self.table.scan_page(limit=limit, start_key=last_key)
        return {
            "items": [Product.from_item(item) for item in items],
            "lastEvaluatedKey": next_key,
            "hasMore": bool(next_key),
        }

    def update(self, product_id: str, fields: dict) -> Product:
        """Set only the given attributes (camelCase names); other fields keep their values."""
        changes = {k: v for k, v in fields.items() if k not in IMMUTABLE_FIELDS}
        changes["updatedAt"] = utc_now_iso()
        try:
            item = self.table.update(product_id, changes)
        except ItemNotFound:
            raise AppError(ErrorKind.NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
        return Product.from_item(item)

    def delete(self, product_id: str) -> dict:
        if not self.table.delete(product_id):
            raise AppError(ErrorKind.NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
        logger.info("Deleted product %s", product_id)
        return {"success": True, "productId": product_id}
