"""Cache-aside request executor for the content service.

Every request follows the same shape:

1. Unless bypassed, look the value up in the cache (url-keyed requests
   first resolve url → id, then id → value). A hit returns immediately.
2. Otherwise GET the endpoint on the monitor's active target through the
   retry policy.
3. A failed outcome or non-2xx status returns the type's empty value.
4. Parse the body.
5. Write back only non-trivial results: blank content and empty id lists
   are never cached, so absence from the cache keeps meaning "nothing to
   show".

Callers never see an exception for an ordinary failed fetch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote_plus

import httpx
from pydantic import ValidationError

from content_client.cache.base import (
    CUSTOM_QUERY_CACHE_KEY,
    CacheProvider,
    CustomQueryCacheValue,
    content_key,
    descendants_key,
    picker_key,
    url_key,
)
from content_client.content.metadata import build_raw_content_response
from content_client.content.models import DescendantIdsResponse, RawContentResponse
from content_client.content.queries import (
    AlternateTemplateQuery,
    ContentRegardlessOfPublishedStatusQuery,
    CustomQuery,
)
from content_client.core.config import RequestSettings
from content_client.core.errors import InvalidInputError
from content_client.core.hooks import EventHook
from content_client.policies import api_paths
from content_client.policies.retry import PolicyResult, RetryEvent, RetryPolicy

if TYPE_CHECKING:
    from content_client.connections.monitor import TargetMonitor
    from content_client.connections.target import Target

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheLookup = Callable[[], Awaitable[tuple[Any, bool]]]
CacheStore = Callable[[T], Awaitable[None]]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ContentRequest:
    """Fetches content through the cache, the active target and the retry policy.

    Args:
        monitor: Supplies the active target for every outbound call.
        cache: Optional cache provider; ``None`` behaves as an always-empty cache.
        client: HTTP client used for outbound calls.
        settings: Timeout and retry policy; defaults to :class:`RequestSettings`.
    """

    def __init__(
        self,
        monitor: TargetMonitor,
        cache: CacheProvider | None,
        client: httpx.AsyncClient,
        settings: RequestSettings | None = None,
    ) -> None:
        if monitor is None:
            raise InvalidInputError("A request requires a target monitor")
        if client is None:
            raise InvalidInputError("A request requires an http client")

        self._monitor = monitor
        self._cache = cache
        self._client = client
        self.settings = settings or RequestSettings()
        self.on_retry: EventHook[RetryEvent] = EventHook("request_retry")

    @property
    def target(self) -> Target:
        return self._monitor.active_target

    @property
    def cache_available(self) -> bool:
        return self._cache is not None

    def with_settings(self, settings: RequestSettings) -> ContentRequest:
        """Replace the request settings, returning ``self`` for chaining."""
        if settings is None:
            raise InvalidInputError("Request settings are required")
        self.settings = settings
        return self

    # -- Content ----------------------------------------------------------

    async def get_content_regardless_of_published_status(self, content_id: int) -> str:
        """Rendered markup of a content item, published or not. Never cached."""
        query = ContentRegardlessOfPublishedStatusQuery(content_id)
        content = await self.query(query, bypass_cache=True)
        return (content or RawContentResponse.empty()).rendered_content_html

    async def get_published_content(self, content_id: int, bypass_cache: bool = False) -> str:
        content = await self.get_published_content_including_metadata(content_id, bypass_cache)
        return content.rendered_content_html

    async def get_published_content_by_url(self, url: str, bypass_cache: bool = False) -> str:
        content = await self.get_published_content_including_metadata_by_url(url, bypass_cache)
        return content.rendered_content_html

    async def get_published_content_including_metadata(
        self, content_id: int, bypass_cache: bool = False
    ) -> RawContentResponse:
        return await self._execute_content_request(
            api_paths.PUBLISHED_CONTENT_ID_WITH_TEMPLATE.format(content_id),
            bypass_cache,
            lambda: self._lookup(content_key(content_id)),
            self._store_content,
        )

    async def get_published_content_including_metadata_by_url(
        self, url: str, bypass_cache: bool = False
    ) -> RawContentResponse:
        prepared = api_paths.prepare_url_parameter(url)

        async def store(content: RawContentResponse) -> None:
            await self._store_content(content)
            await self._add(url_key(prepared), str(content.id))

        return await self._execute_content_request(
            api_paths.PUBLISHED_CONTENT_BY_URL_WITH_TEMPLATE.format(prepared),
            bypass_cache,
            lambda: self._lookup_by_url(prepared, content_key),
            store,
        )

    async def get_item_with_specified_template(
        self, content_id: int, template_id: int, bypass_cache: bool = False
    ) -> str:
        """Markup of a published item rendered with ``template_id``."""
        return await self.query(AlternateTemplateQuery(content_id, template_id), bypass_cache)

    async def get_item_with_specified_template_by_url(
        self, url: str, template_id: int, bypass_cache: bool = False
    ) -> str:
        content = await self.get_published_content_including_metadata_by_url(url, bypass_cache)
        if content.is_empty:
            return ""
        return await self.get_item_with_specified_template(content.id, template_id, bypass_cache)

    # -- Descendants and tree pickers -------------------------------------

    async def get_published_descendants_of_folder(
        self, content_id: int, bypass_cache: bool = False
    ) -> dict[str, RawContentResponse]:
        descendants = await self._execute_ids_request(
            api_paths.PUBLISHED_DESCENDANT_IDS.format(content_id),
            bypass_cache,
            lambda: self._lookup(descendants_key(content_id)),
            lambda ids: self._add(descendants_key(ids.origin), ids),
        )
        return await self._fetch_children(descendants, bypass_cache)

    async def get_published_descendants_of_folder_by_url(
        self, url: str, bypass_cache: bool = False
    ) -> dict[str, RawContentResponse]:
        prepared = api_paths.prepare_url_parameter(url)

        async def store(ids: DescendantIdsResponse) -> None:
            await self._add(descendants_key(ids.origin), ids)
            await self._add(url_key(prepared), str(ids.origin))

        descendants = await self._execute_ids_request(
            api_paths.PUBLISHED_DESCENDANT_IDS_BY_URL.format(prepared),
            bypass_cache,
            lambda: self._lookup_by_url(prepared, descendants_key),
            store,
        )
        return await self._fetch_children(descendants, bypass_cache)

    async def get_published_content_of_tree_picker(
        self, content_id: int, property_alias: str, bypass_cache: bool = False
    ) -> dict[str, RawContentResponse]:
        """Content items selected by a tree-picker property of ``content_id``."""
        key = picker_key(content_id, property_alias)
        picked = await self._execute_ids_request(
            api_paths.PUBLISHED_TREE_PICKER_IDS.format(content_id, quote_plus(property_alias)),
            bypass_cache,
            lambda: self._lookup(key),
            lambda ids: self._add(key, ids),
        )
        return await self._fetch_children(picked, bypass_cache)

    # -- Custom queries ---------------------------------------------------

    async def query(self, query: CustomQuery[T], bypass_cache: bool = False) -> T:
        """Run a caller-supplied query through the cache-aside path.

        Results are cached under the query's ``unique_query_id`` and listed
        in the custom query index so external tooling can find them.
        """
        if not bypass_cache:
            value, found = await self._lookup(query.unique_query_id)
            if found:
                return value

        result = await self._get(query.relative_request_url().lstrip("/"))
        if not result.is_success:
            return query.empty_response

        try:
            mapped = query.map_response(result.result.text)
        except (ValidationError, ValueError) as exc:
            logger.warning("Could not map response for query %s: %s", query.unique_query_id, exc)
            return query.empty_response

        if self.cache_available and not bypass_cache and not _is_blank(mapped):
            await self._add(query.unique_query_id, mapped)
            await self._index_custom_query(query)

        return mapped

    async def _index_custom_query(self, query: CustomQuery[Any]) -> None:
        index, found = await self._lookup(CUSTOM_QUERY_CACHE_KEY)
        entries: list[CustomQueryCacheValue] = list(index) if found and index else []
        if any(entry.custom_query_key == query.unique_query_id for entry in entries):
            return
        entries.append(
            CustomQueryCacheValue(
                custom_query_key=query.unique_query_id,
                content_id=str(query.associated_content_id),
            )
        )
        await self._add(CUSTOM_QUERY_CACHE_KEY, entries)

    # -- Execution --------------------------------------------------------

    async def _execute_content_request(
        self,
        endpoint: str,
        bypass_cache: bool,
        lookup: CacheLookup,
        store: CacheStore[RawContentResponse],
    ) -> RawContentResponse:
        if not bypass_cache:
            cached, found = await lookup()
            if found:
                return cached

        result = await self._get(endpoint)
        if not result.is_success:
            # Let the caller decide whether missing content is critical.
            return RawContentResponse.empty()

        try:
            content = build_raw_content_response(result.result.text)
        except (ValidationError, ValueError) as exc:
            logger.warning("Unparseable content from %s: %s", endpoint, exc)
            return RawContentResponse.empty()

        if self.cache_available and not bypass_cache and content.rendered_content.strip():
            await store(content)
        return content

    async def _execute_ids_request(
        self,
        endpoint: str,
        bypass_cache: bool,
        lookup: CacheLookup,
        store: CacheStore[DescendantIdsResponse],
    ) -> DescendantIdsResponse:
        if not bypass_cache:
            cached, found = await lookup()
            if found:
                return cached

        result = await self._get(endpoint)
        if not result.is_success:
            return DescendantIdsResponse.empty()

        try:
            ids = DescendantIdsResponse.model_validate_json(result.result.text)
        except (ValidationError, ValueError) as exc:
            logger.warning("Unparseable id list from %s: %s", endpoint, exc)
            return DescendantIdsResponse.empty()

        if self.cache_available and not bypass_cache and ids.count > 0:
            await store(ids)
        return ids

    async def _fetch_children(
        self, ids: DescendantIdsResponse, bypass_cache: bool
    ) -> dict[str, RawContentResponse]:
        """Fetch every listed item concurrently, keyed by content name.

        Items that degraded to empty are dropped. When two items share a
        name, the one whose fetch completed last is kept.
        """
        if ids.count == 0:
            return {}

        children: dict[str, RawContentResponse] = {}
        tasks = [
            asyncio.ensure_future(self.get_published_content_including_metadata(child_id, bypass_cache))
            for child_id in ids.descendants
        ]
        for next_done in asyncio.as_completed(tasks):
            try:
                child = await next_done
            except Exception:
                logger.exception("Fetching a child of %s failed", ids.origin)
                continue
            if child.id > 0:
                children[child.name] = child
        return children

    async def _get(self, relative: str) -> PolicyResult:
        uri = str(self.target.url) + relative
        timeout = self.settings.timeout_seconds
        policy = RetryPolicy(self.settings, on_retry=self.on_retry)
        return await policy.execute(lambda: self._client.get(uri, timeout=timeout))

    # -- Cache helpers ----------------------------------------------------

    async def _lookup(self, key: str) -> tuple[Any, bool]:
        """Read from the cache; an unreachable cache counts as a miss."""
        if self._cache is None:
            return None, False
        try:
            return await self._cache.try_get(key)
        except Exception as exc:
            logger.warning("Cache lookup for %s failed: %s", key, exc)
            return None, False

    async def _lookup_by_url(self, prepared_url: str, key_for_id: Callable[[str], str]) -> tuple[Any, bool]:
        content_id, found = await self._lookup(url_key(prepared_url))
        if not found:
            return None, False
        return await self._lookup(key_for_id(content_id))

    async def _add(self, key: str, value: Any) -> None:
        if self._cache is None:
            return
        expiry = self.settings.cache_expiration_seconds
        try:
            if expiry is None:
                await self._cache.add(key, value)
            else:
                await self._cache.add(key, value, sliding_expiration=timedelta(seconds=expiry))
        except Exception as exc:
            logger.warning("Cache write for %s failed: %s", key, exc)

    async def _store_content(self, content: RawContentResponse) -> None:
        await self._add(content_key(content.id), content)
