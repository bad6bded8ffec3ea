"""
Shared schema base for Deepmetric.

Persisted records and API payloads use camelCase field names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False
    )

    def to_record(self) -> dict:
        """Serialize to the JSON-compatible persisted layout."""
        return self.model_dump(mode="json", by_alias=True)
