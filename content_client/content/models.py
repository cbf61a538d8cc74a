"""Response models parsed from the content service.

The service serialises with PascalCase keys while older deployments emit
camelCase, so incoming keys are matched case-insensitively and without
regard to underscores.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _fold(key: str) -> str:
    return key.replace("_", "").lower()


def _pair(item: Any) -> tuple[str, str]:
    if isinstance(item, dict):
        folded = {_fold(str(k)): v for k, v in item.items()}
        key, value = folded.get("key"), folded.get("value")
    elif isinstance(item, (list, tuple)) and len(item) == 2:
        key, value = item
    else:
        raise ValueError(f"Expected a key/value pair, got {item!r}")
    return str(key or ""), "" if value is None else str(value)


class ServiceModel(BaseModel):
    """Base for models read from service JSON."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def fold_keys(cls, data: Any) -> Any:
        """Map incoming keys onto field names; nulls fall back to defaults."""
        if not isinstance(data, dict):
            return data
        fields = {_fold(name): name for name in cls.model_fields}
        folded: dict[str, Any] = {}
        for key, value in data.items():
            name = fields.get(_fold(str(key)))
            if name is not None and value is not None:
                folded[name] = value
        return folded


class RawContentResponse(ServiceModel):
    """A content item with its rendered markup and metadata."""

    id: int = 0
    name: str = ""
    rendered_content: str = ""
    property_collection: list[tuple[str, str]] | None = None
    meta_tag_collection: list[tuple[str, str]] = Field(default_factory=list)
    rendered_meta_tags: str = ""
    visible_logged_in: bool = True
    visible_logged_out: bool = True
    update_date: datetime | None = None

    @field_validator("property_collection", "meta_tag_collection", mode="before")
    @classmethod
    def parse_pairs(cls, v: Any) -> Any:
        """Accept ``{"Key": ..., "Value": ...}`` objects or two-item sequences."""
        if isinstance(v, list):
            return [_pair(item) for item in v]
        return v

    @classmethod
    def empty(cls) -> RawContentResponse:
        return cls()

    @property
    def is_empty(self) -> bool:
        """True for the empty value returned when a fetch failed."""
        return self.id <= 0

    @property
    def rendered_content_html(self) -> str:
        """The rendered markup, decoded and ready to embed."""
        return html.unescape(self.rendered_content)

    def meta_tag(self, name: str) -> str:
        for key, value in self.meta_tag_collection:
            if key == name:
                return value
        return ""

    def meta_tag_page_title(self) -> str:
        return self.meta_tag("title")

    def meta_tag_page_description(self) -> str:
        return self.meta_tag("description")


class DescendantIdsResponse(ServiceModel):
    """Ids of the items below an origin item, or picked by one of its properties."""

    origin: int = 0
    descendants: list[int] = Field(default_factory=list)
    published_only: bool = False

    @classmethod
    def empty(cls) -> DescendantIdsResponse:
        return cls()

    @property
    def count(self) -> int:
        return len(self.descendants)
