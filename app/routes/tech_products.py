"""Tech product routes. Reads are public; writes are admin only and accept an image upload."""
import json
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.core.deps import CurrentUser, get_image_storage, get_product_service, require_admin
from app.core.errors import AppError, ErrorKind
from app.services.image_storage import ImageStorage
from app.services.product_service import (
    DEFAULT_PAGE_SIZE,
    PRODUCT_NOT_FOUND_MESSAGE,
    ProductService,
)


router = APIRouter(prefix="/api/tech-products", tags=["Tech Products"])

MAX_PAGE_SIZE = 100


def _parse_number(value: Optional[str], field: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise AppError(ErrorKind.VALIDATION, f"{field} must be a number")


def _parse_specs(value: Optional[str]) -> Optional[List[Any]]:
    if value is None or value == "":
        return None
    try:
        specs = json.loads(value)
    except ValueError:
        raise AppError(ErrorKind.VALIDATION, "specs must be a JSON array")
    if not isinstance(specs, list):
        raise AppError(ErrorKind.VALIDATION, "specs must be a JSON array")
    return specs


def _listing(products, **extra) -> dict:
    return {"success": True, **extra, "count": len(products), "data": [p.to_json() for p in products]}


@router.get("/search")
def search_products(q: Optional[str] = None, products: ProductService = Depends(get_product_service)):
    if not q:
        raise AppError(ErrorKind.VALIDATION, "Search query is required")
    return _listing(products.search(q), query=q)


@router.get("/paginated")
def list_products_paginated(
    limit: Optional[str] = None,
    last_key_json: Optional[str] = Query(None, alias="lastKey"),
    products: ProductService = Depends(get_product_service),
):
    try:
        size = int(limit or 0) or DEFAULT_PAGE_SIZE
    except ValueError:
        size = DEFAULT_PAGE_SIZE
    size = max(1, min(size, MAX_PAGE_SIZE))

    last_key = None
    if last_key_json:
        try:
            last_key = json.loads(last_key_json)
        except ValueError:
            raise AppError(ErrorKind.VALIDATION, "lastKey must be the JSON returned as lastEvaluatedKey")
        if not isinstance(last_key, dict):
            raise AppError(ErrorKind.VALIDATION, "lastKey must be the JSON returned as lastEvaluatedKey")

    page = products.list_page(size, last_key)
    return {
        "success": True,
        "count": len(page["items"]),
        "hasMore": page["hasMore"],
        "lastEvaluatedKey": page["lastEvaluatedKey"],
        "data": [p.to_json() for p in page["items"]],
    }


@router.get("/category/{category}")
def list_products_by_category(category: str, products: ProductService = Depends(get_product_service)):
    return _listing(products.list_by_category(category), category=category)


@router.get("/{product_id}")
def get_product(product_id: str, products: ProductService = Depends(get_product_service)):
    product = products.get(product_id)
    if not product:
        raise AppError(ErrorKind.NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
    return {"success": True, "data": product.to_json()}


@router.get("")
def list_products(products: ProductService = Depends(get_product_service)):
    return _listing(products.list_all())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    name: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    affiliate_link: Optional[str] = Form(None, alias="affiliateLink"),
    image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Create a product from a multipart form.

    ``specs`` is a JSON-encoded array; ``image`` is an optional jpg/png/gif/webp file.
    """
    price_value = _parse_number(price, "price")
    if not name or not brand or not category or price_value is None:
        raise AppError(
            ErrorKind.VALIDATION,
            "Missing required fields: name, brand, category, and price are required",
        )

    spec_list = _parse_specs(specs)
    rating_value = _parse_number(rating, "rating")
    image_url = await storage.save(image) if image and image.filename else None

    product = await run_in_threadpool(
        products.create,
        name=name,
        brand=brand,
        category=category,
        price=price_value,
        rating=rating_value or 0,
        specs=spec_list,
        description=description or "",
        affiliate_link=affiliate_link or "",
        image_url=image_url,
    )
    return {"success": True, "message": "Product created successfully", "data": product.to_json()}


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    affiliate_link: Optional[str] = Form(None, alias="affiliateLink"),
    image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Partial update: only the supplied form fields change."""
    fields = {
        "name": name,
        "brand": brand,
        "category": category,
        "price": _parse_number(price, "price"),
        "rating": _parse_number(rating, "rating"),
        "specs": _parse_specs(specs),
        "description": description,
        "affiliateLink": affiliate_link,
    }
    fields = {k: v for k, v in fields.items() if v is not None}

    if not await run_in_threadpool(products.get, product_id):
        raise AppError(ErrorKind.NOT_FOUND, PRODUCT_NOT_FOUND_MESSAGE)
    if image and image.filename:
        fields["imageUrl"] = await storage.save(image)

    product = await run_in_threadpool(products.update, product_id, fields)
    return {"success": True, "message": "Product updated successfully", "data": product.to_json()}


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    current_user: CurrentUser = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
):
    result = products.delete(product_id)
    return {"success": True, "message": "Product deleted successfully", "data": result}
