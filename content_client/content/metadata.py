"""Build meta tags for a content item from its SEO properties."""

from __future__ import annotations

import html
import json
import logging

from content_client.content.models import RawContentResponse

logger = logging.getLogger(__name__)

SEO_TITLE = "seotitle"
SEO_DESCRIPTION = "seodescription"
SEO_KEYWORDS = "seokeywords"
SEO_ROBOTS = "seorobots"
SEO_META_TAGS = "seometatags"


def build_raw_content_response(body: str) -> RawContentResponse:
    """Parse a content body and attach the meta tags derived from its properties.

    Args:
        body: JSON body returned by the content service.

    Returns:
        The parsed content with ``meta_tag_collection`` and
        ``rendered_meta_tags`` populated when it carries properties.

    Raises:
        pydantic.ValidationError: If the body is not a content object.
    """
    content = RawContentResponse.model_validate_json(body)
    if content.property_collection is None:
        return content

    metas, rendered = generate_meta_tags(content.name, content.property_collection)
    return content.model_copy(update={"meta_tag_collection": metas, "rendered_meta_tags": rendered})


def generate_meta_tags(
    page_name: str,
    properties: list[tuple[str, str]],
) -> tuple[list[tuple[str, str]], str]:
    """Derive meta tag pairs and their HTML rendering.

    Property aliases are matched case-insensitively. The title always
    renders, falling back to ``page_name``; the other tags only when set.
    """
    lookup: dict[str, str] = {}
    for key, value in properties:
        lookup.setdefault(key.lower(), value)

    metas: list[tuple[str, str]] = []
    parts: list[str] = []

    title = lookup.get(SEO_TITLE) or page_name
    parts.append(_tag("property", "og:title", title))
    parts.append(_tag("name", "twitter:title", title))
    metas.extend([("title", title), ("og:title", title), ("twitter:title", title)])

    description = lookup.get(SEO_DESCRIPTION)
    if description:
        parts.append(_tag("name", "description", description))
        parts.append(_tag("property", "og:description", description))
        parts.append(_tag("name", "twitter:description", description))
        metas.extend(
            [
                ("description", description),
                ("og:description", description),
                ("twitter:description", description),
            ]
        )

    for alias, tag_name in ((SEO_KEYWORDS, "keywords"), (SEO_ROBOTS, "robots")):
        value = lookup.get(alias)
        if value:
            parts.append(_tag("name", tag_name, value))
            metas.append((tag_name, value))

    for key, value in _custom_meta_tags(lookup.get(SEO_META_TAGS)):
        metas.append((key, value))
        parts.append(_tag("property" if key.startswith("og:") else "name", key, value))

    return metas, "".join(parts)


def _custom_meta_tags(raw: str | None) -> list[tuple[str, str]]:
    """Parse the JSON list of free-form meta tags an editor entered."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed meta tag property: %.80s", raw)
        return []
    if not isinstance(items, list):
        return []

    pairs: list[tuple[str, str]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        folded = {str(k).lower(): v for k, v in item.items()}
        key = folded.get("key")
        if key:
            value = folded.get("value")
            pairs.append((str(key), "" if value is None else str(value)))
    return pairs


def _tag(attribute: str, key: str, content: str) -> str:
    return f'<meta {attribute}="{html.escape(key)}" content="{html.escape(content)}">'
