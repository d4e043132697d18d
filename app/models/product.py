"""Tech product model."""
from typing import Any, List, Optional

from app.models.base import Document


class Product(Document):
    product_id: str
    name: str
    brand: str
    category: str
    price: float
    rating: float = 0
    specs: List[Any] = []
    description: str = ""
    affiliate_link: str = ""
    image_url: Optional[str] = None
    created_at: str
    updated_at: str
