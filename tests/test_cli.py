"""Tests for the content-client command line."""

from __future__ import annotations

import argparse
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from content_client import cli
from content_client.connections.target import Target
from content_client.content.models import RawContentResponse
from content_client.core.config import Settings
from content_client.core.errors import ConfigurationError


class TestParseArgs:
    def test_ping(self) -> None:
        """Should parse the ping command."""
        args = cli._parse_args(["ping"])
        assert args.command == "ping"
        assert args.log_level is None

    def test_get_by_id(self) -> None:
        """Should parse get by id with options."""
        args = cli._parse_args(["--log-level", "DEBUG", "get", "--id", "12", "--metadata"])
        assert args.content_id == 12
        assert args.url is None
        assert args.metadata is True
        assert args.bypass_cache is False

    def test_get_requires_selector(self) -> None:
        """Should require --id or --url."""
        with pytest.raises(SystemExit):
            cli._parse_args(["get"])

    def test_id_and_url_are_exclusive(self) -> None:
        """Should reject --id together with --url."""
        with pytest.raises(SystemExit):
            cli._parse_args(["get", "--id", "1", "--url", "/a"])


class TestResolveSettings:
    def test_cli_urls_override_environment(self) -> None:
        """Should let command line urls override the environment."""
        base = Settings(_env_file=None, primary_url="https://env.example.com/")
        args = argparse.Namespace(primary_url=None, secondary_url="https://backup.example.com/")

        with patch("content_client.cli.get_settings", return_value=base):
            settings = cli._resolve_settings(args)

        assert settings.primary_url == "https://env.example.com/"
        assert settings.secondary_url == "https://backup.example.com/"


class TestCommands:
    @pytest.mark.asyncio
    async def test_ping_reports_each_target(self, service, capsys: pytest.CaptureFixture[str]) -> None:
        """Should print the status of each target."""
        service.add("content", httpx.Response(200), host="primary.example.com")
        service.add("content", httpx.Response(503), host="secondary.example.com")
        connection = MagicMock()
        connection.primary = Target("https://primary.example.com/api")
        connection.secondary = Target("https://secondary.example.com/api")
        connection.client = service.client()

        exit_code = await cli._ping(connection)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "primary.example.com/api/content  UP" in out
        assert "DOWN  (HTTP 503)" in out

    @pytest.mark.asyncio
    async def test_ping_fails_when_nothing_alive(self, service) -> None:
        """Should fail when no target is alive."""
        service.add("content", httpx.ConnectError("refused"))
        connection = MagicMock()
        connection.primary = Target("https://primary.example.com/api")
        connection.secondary = None
        connection.client = service.client()

        assert await cli._ping(connection) == 1

    @pytest.mark.asyncio
    async def test_get_prints_content(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should print meta tags and markup."""
        request = MagicMock()
        request.get_published_content_including_metadata = AsyncMock(
            return_value=RawContentResponse(id=3, rendered_content="&lt;p&gt;hi&lt;/p&gt;", rendered_meta_tags="<meta>")
        )
        connection = MagicMock()
        connection.new_request.return_value = request
        args = cli._parse_args(["get", "--id", "3", "--metadata"])

        exit_code = await cli._get(connection, args)

        assert exit_code == 0
        assert capsys.readouterr().out == "<meta>\n<p>hi</p>\n"
        request.get_published_content_including_metadata.assert_awaited_once_with(3, False)

    @pytest.mark.asyncio
    async def test_get_by_url_empty_exits_nonzero(self) -> None:
        """Should exit non-zero when content is empty."""
        request = MagicMock()
        request.get_published_content_including_metadata_by_url = AsyncMock(
            return_value=RawContentResponse.empty()
        )
        connection = MagicMock()
        connection.new_request.return_value = request
        args = cli._parse_args(["get", "--url", "/about", "--bypass-cache"])

        assert await cli._get(connection, args) == 1
        request.get_published_content_including_metadata_by_url.assert_awaited_once_with("/about", True)


class TestMain:
    def test_exit_code_from_command(self) -> None:
        """Should exit with the command's code."""
        settings = Settings(_env_file=None, primary_url="https://cms.example.com/")
        with (
            patch("content_client.cli.get_settings", return_value=settings),
            patch("content_client.cli._run", new=AsyncMock(return_value=1)),
            pytest.raises(SystemExit) as exc_info,
        ):
            cli.main(["ping"])
        assert exc_info.value.code == 1

    def test_configuration_error_exits_with_2(self) -> None:
        """Should exit with 2 on a configuration error."""
        settings = Settings(_env_file=None)
        with (
            patch("content_client.cli.get_settings", return_value=settings),
            patch("content_client.cli._run", new=AsyncMock(side_effect=ConfigurationError("missing", "primary_url"))),
            pytest.raises(SystemExit) as exc_info,
        ):
            cli.main(["ping"])
        assert exc_info.value.code == 2
