"""Base model for JSON-shaped persisted records"""
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """
    Persisted record

    Stored records use camelCase keys (the format the browser extension wrote);
    Python code uses snake_case attribute names. Both are accepted on input.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        """Serialize for the key-value store"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
