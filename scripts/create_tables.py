"""Create the DynamoDB tables used by the API if they do not exist yet.

Usage:
    python scripts/create_tables.py            # every table
    python scripts/create_tables.py users dsa  # a subset
"""
import argparse
import logging
import sys
from pathlib import Path

from botocore.exceptions import ClientError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.config import settings  # noqa: E402
from app.core.logging_config import configure_logging  # noqa: E402
from app.db.tables import TABLE_SCHEMAS, dynamodb_resource  # noqa: E402

logger = logging.getLogger("scripts.create_tables")

ALIASES = {"users": "users", "dsa": "problems", "problems": "problems", "progress": "progress", "products": "products"}


def ensure_table(resource, name: str, hash_key: str) -> bool:
    """Create ``name`` with a string hash key; returns False if it already existed."""
    existing = {table.name for table in resource.tables.all()}
    if name in existing:
        table = resource.Table(name)
        logger.info("Table %s exists (status=%s, items=%s)", name, table.table_status, table.item_count)
        return False

    logger.info("Creating table %s (hash key %s)", name, hash_key)
    table = resource.create_table(
        TableName=name,
        KeySchema=[{"AttributeName": hash_key, "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": hash_key, "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    table.wait_until_exists()
    logger.info("Table %s is ACTIVE", name)
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("tables", nargs="*", help=f"tables to create, any of {sorted(ALIASES)} (default: all)")
    args = parser.parse_args(argv)
    unknown = [t for t in args.tables if t not in ALIASES]
    if unknown:
        parser.error(f"unknown table(s): {', '.join(unknown)}")

    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    wanted = {ALIASES[t] for t in args.tables} or set(TABLE_SCHEMAS)
    logger.info("Region %s, endpoint %s", settings.AWS_REGION, settings.DYNAMODB_ENDPOINT_URL or "default")

    resource = dynamodb_resource(settings)
    try:
        for attr, (field, hash_key) in TABLE_SCHEMAS.items():
            if attr in wanted:
                ensure_table(resource, getattr(settings, field), hash_key)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        logger.error("DynamoDB request failed (%s): %s", code, e)
        if code in ("UnrecognizedClientException", "InvalidSignatureException"):
            logger.error("Check AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY and AWS_REGION")
        elif code == "AccessDeniedException":
            logger.error("The IAM identity lacks DynamoDB permissions")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
