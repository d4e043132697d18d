"""Shared base for stored documents."""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    """ISO-8601 timestamp with millisecond precision, e.g. 2024-01-31T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Document(BaseModel):
    """Stored record; attributes are camelCase in the store and in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_item(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    @classmethod
    def from_item(cls, item: dict):
        return cls.model_validate(item)

    def to_json(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, mode="json", **kwargs)
