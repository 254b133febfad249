from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DESCRIPTION_MAX = 100

CUSTOM_CATEGORY = "custom"

SUGGESTED_CATEGORIES: List[str] = [
    "Code Generation",
    "Code Analysis",
    "Testing",
    "DevOps",
    "Documentation",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    url: str
    description: str = ""
    category: str
    favicon: str = ""
    date_added: datetime = Field(default_factory=utcnow, alias="dateAdded")
    last_used: datetime = Field(default_factory=utcnow, alias="lastUsed")

    @field_validator("date_added", "last_used")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # records written without an offset are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def record(self) -> dict:
        """Store document for this entry; the id lives outside the record."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def public(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EntryDraft(BaseModel):
    name: str
    url: str
    description: str = ""
    category: str = ""
    custom_category: str = ""


class EntryChanges(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    custom_category: str = ""
