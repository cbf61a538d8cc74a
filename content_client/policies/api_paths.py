"""Relative endpoint templates of the content service API.

Templates are formatted with ``str.format`` and appended to a target's
base url, which always ends with a slash.
"""

from __future__ import annotations

from urllib.parse import quote_plus

CONTENT = "content/"
PUBLISHED_CONTENT = CONTENT + "published/"

# content by id
CONTENT_ID = CONTENT + "{0}/"
CONTENT_ID_WITH_TEMPLATE = CONTENT + "{0}/template/"
PUBLISHED_CONTENT_ID = PUBLISHED_CONTENT + "{0}/"
PUBLISHED_CONTENT_ID_WITH_TEMPLATE = PUBLISHED_CONTENT + "{0}/template/"
PUBLISHED_CONTENT_ID_SPECIFIED_TEMPLATE = PUBLISHED_CONTENT + "{0}/{1}/specifiedtemplate"

# content by url
PUBLISHED_CONTENT_BY_URL = PUBLISHED_CONTENT + "byurl?url={0}"
PUBLISHED_CONTENT_BY_URL_WITH_TEMPLATE = PUBLISHED_CONTENT + "byurl/template?url={0}"

# descendant ids
PUBLISHED_DESCENDANT_IDS = PUBLISHED_CONTENT_ID + "descendantids"
PUBLISHED_DESCENDANT_IDS_BY_URL = PUBLISHED_CONTENT + "byurl/descendantids?url={0}"

# tree picker ids
PUBLISHED_TREE_PICKER_IDS = PUBLISHED_CONTENT_ID + "treePickerIds?property={1}"


def prepare_url_parameter(url: str) -> str:
    """Trim surrounding slashes and form-encode a content url for a query string."""
    return quote_plus(url.strip().strip("/"))
