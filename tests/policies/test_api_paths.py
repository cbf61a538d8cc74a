"""Tests for endpoint templates and url parameter preparation."""

from __future__ import annotations

import pytest

from content_client.policies import api_paths


class TestTemplates:
    def test_content_templates(self) -> None:
        """Should format the content templates."""
        assert api_paths.CONTENT_ID_WITH_TEMPLATE.format(12) == "content/12/template/"
        assert api_paths.PUBLISHED_CONTENT_ID_WITH_TEMPLATE.format(12) == "content/published/12/template/"
        assert (
            api_paths.PUBLISHED_CONTENT_ID_SPECIFIED_TEMPLATE.format(12, 7)
            == "content/published/12/7/specifiedtemplate"
        )

    def test_id_list_templates(self) -> None:
        """Should format the id list templates."""
        assert api_paths.PUBLISHED_DESCENDANT_IDS.format(3) == "content/published/3/descendantids"
        assert (
            api_paths.PUBLISHED_DESCENDANT_IDS_BY_URL.format("news")
            == "content/published/byurl/descendantids?url=news"
        )
        assert (
            api_paths.PUBLISHED_TREE_PICKER_IDS.format(3, "related")
            == "content/published/3/treePickerIds?property=related"
        )

    def test_url_template(self) -> None:
        """Should format the url template."""
        assert (
            api_paths.PUBLISHED_CONTENT_BY_URL_WITH_TEMPLATE.format("about")
            == "content/published/byurl/template?url=about"
        )


class TestPrepareUrlParameter:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/about/team/", "about%2Fteam"),
            ("about/team", "about%2Fteam"),
            ("  /news/  ", "news"),
            ("/search results/", "search+results"),
            ("/", ""),
        ],
    )
    def test_trims_slashes_and_form_encodes(self, raw: str, expected: str) -> None:
        """Should trim slashes and form-encode the url."""
        assert api_paths.prepare_url_parameter(raw) == expected
