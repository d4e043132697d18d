"""Document store tables, one per entity."""
import logging
from dataclasses import dataclass

import boto3

from app.core.config import Settings
from app.db.dynamo import DynamoTable
from app.db.store import DocumentTable, MemoryTable

logger = logging.getLogger("app.db.tables")

# table attribute -> (settings field holding the table name, hash key)
TABLE_SCHEMAS = {
    "users": ("USERS_TABLE_NAME", "email"),
    "problems": ("DSA_TABLE_NAME", "problemId"),
    "progress": ("USER_PROGRESS_TABLE_NAME", "userId"),
    "products": ("TECH_PRODUCTS_TABLE_NAME", "productId"),
}


@dataclass
class Tables:
    users: DocumentTable
    problems: DocumentTable
    progress: DocumentTable
    products: DocumentTable


def dynamodb_resource(settings: Settings):
    return boto3.resource(
        "dynamodb",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.DYNAMODB_ENDPOINT_URL or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
    )


def build_tables(settings: Settings) -> Tables:
    """Create table handles for the configured backend."""
    backend = settings.STORE_BACKEND.lower()
    names = {attr: getattr(settings, field) for attr, (field, _) in TABLE_SCHEMAS.items()}
    logger.info("Document store backend=%s tables=%s", backend, names)

    if backend == "memory":
        return Tables(**{
            attr: MemoryTable(names[attr], hash_key)
            for attr, (_, hash_key) in TABLE_SCHEMAS.items()
        })

    if backend != "dynamodb":
        raise RuntimeError(f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}. Use 'dynamodb' or 'memory'.")

    resource = dynamodb_resource(settings)
    return Tables(**{
        attr: DynamoTable(resource.Table(names[attr]), hash_key)
        for attr, (_, hash_key) in TABLE_SCHEMAS.items()
    })
