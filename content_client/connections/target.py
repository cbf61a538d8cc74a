"""A single content service endpoint and its health-check address."""

from __future__ import annotations

import httpx

from content_client.core.errors import InvalidInputError

DEFAULT_PING_PATH = "content"


class Target:
    """A content service API endpoint.

    The base URL always ends with a slash so relative paths resolve beneath
    it rather than replacing its last segment.

    ``alive`` has a single writer (the monitor loop probing this target)
    and any number of readers. A bool attribute assignment is atomic under
    the interpreter, so readers see either the old or the new value and
    no lock is taken.
    """

    def __init__(self, url: str | httpx.URL, ping: str | None = None) -> None:
        raw = str(url).strip() if url is not None else ""
        if not raw:
            raise InvalidInputError("A target requires a base url")

        try:
            parsed = httpx.URL(raw.rstrip("/") + "/")
        except httpx.InvalidURL as exc:
            raise InvalidInputError(f"Invalid target url: {raw}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidInputError(f"Target url must be an absolute http(s) url: {raw}")

        self.url = parsed
        ping_path = ping.lstrip("/") if ping else ""
        self.ping = parsed.join(ping_path or DEFAULT_PING_PATH)
        self.alive = False

    def set_alive(self, alive: bool) -> None:
        self.alive = alive

    def __repr__(self) -> str:
        return f"Target(url={str(self.url)!r}, ping={str(self.ping)!r}, alive={self.alive})"
