"""
Document Model Base.

Every persisted document is camelCase JSON. Models expose snake_case
attributes and accept either spelling on input.

Exports:
    DocumentModel: Base class for persisted documents
    utc_now: Timezone-aware current timestamp
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """
    Base for documents stored in the document store.

    Unknown keys are preserved (extra='allow') so that fields written by
    other clients survive a read-modify-write cycle.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='allow',
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored JSON shape (camelCase, None fields dropped)."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]):
        return cls.model_validate(data)

    @classmethod
    def normalize_patch(cls, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Rewrite snake_case field names in a patch to their stored aliases.

        Keys that are not model fields pass through unchanged (custom keys).
        """
        normalized = {}
        for key, value in patch.items():
            field = cls.model_fields.get(key)
            if field is not None and field.alias:
                normalized[field.alias] = value
            else:
                normalized[key] = value
        return normalized
