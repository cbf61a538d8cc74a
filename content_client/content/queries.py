"""Caller-supplied queries executed through the cache-aside request path.

A query knows its own relative path, how to map a response body, the value
to return when nothing could be fetched, and the key its result is cached
under.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

from content_client.content.models import RawContentResponse
from content_client.policies import api_paths

T_co = TypeVar("T_co", covariant=True)

QUERY_NAMESPACE = uuid.UUID("6f1c2d0e-8b7a-4c59-9e43-2a1d5f7b9c31")


@runtime_checkable
class CustomQuery(Protocol[T_co]):
    """Contract of a query accepted by :meth:`ContentRequest.query`."""

    @property
    def unique_query_id(self) -> str:
        """Cache key of the query result. Must be deterministic."""
        ...

    @property
    def associated_content_id(self) -> int:
        ...

    @property
    def empty_response(self) -> T_co:
        ...

    def relative_request_url(self) -> str:
        ...

    def map_response(self, body: str) -> T_co:
        ...


def query_id(*parts: object) -> str:
    """Derive a stable query id from the values that identify a query."""
    return str(uuid.uuid5(QUERY_NAMESPACE, "/".join(str(part) for part in parts)))


@dataclass(frozen=True)
class ContentRegardlessOfPublishedStatusQuery:
    """Fetches a content item whether or not it is published."""

    content_id: int

    @property
    def unique_query_id(self) -> str:
        return query_id("content-regardless-of-published-status", self.content_id)

    @property
    def associated_content_id(self) -> int:
        return self.content_id

    @property
    def empty_response(self) -> RawContentResponse:
        return RawContentResponse.empty()

    def relative_request_url(self) -> str:
        return api_paths.CONTENT_ID_WITH_TEMPLATE.format(self.content_id)

    def map_response(self, body: str) -> RawContentResponse:
        return RawContentResponse.model_validate_json(body)


@dataclass(frozen=True)
class AlternateTemplateQuery:
    """Renders a published content item with a template other than its own."""

    content_id: int
    template_id: int

    @property
    def unique_query_id(self) -> str:
        return query_id("alternate-template", self.content_id, self.template_id)

    @property
    def associated_content_id(self) -> int:
        return self.content_id

    @property
    def empty_response(self) -> str:
        return ""

    def relative_request_url(self) -> str:
        return api_paths.PUBLISHED_CONTENT_ID_SPECIFIED_TEMPLATE.format(self.content_id, self.template_id)

    def map_response(self, body: str) -> str:
        return RawContentResponse.model_validate_json(body).rendered_content_html
