"""Content models, custom queries and the cache-aside request executor."""

from content_client.content.metadata import build_raw_content_response, generate_meta_tags
from content_client.content.models import DescendantIdsResponse, RawContentResponse
from content_client.content.queries import (
    AlternateTemplateQuery,
    ContentRegardlessOfPublishedStatusQuery,
    CustomQuery,
    query_id,
)
from content_client.content.request import ContentRequest

__all__ = [
    "AlternateTemplateQuery",
    "ContentRegardlessOfPublishedStatusQuery",
    "ContentRequest",
    "CustomQuery",
    "DescendantIdsResponse",
    "RawContentResponse",
    "build_raw_content_response",
    "generate_meta_tags",
    "query_id",
]
