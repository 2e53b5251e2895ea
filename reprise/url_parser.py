"""Recognise web URLs of Bitrise apps, builds and pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from reprise.errors import InvalidArgumentError

_WEB_HOST = "app.bitrise.io"
_WEB_ROOT = f"https://{_WEB_HOST}"


class UrlKind(Enum):
    """What a Bitrise web URL points at."""

    APP = "app"
    BUILD = "build"
    PIPELINE = "pipeline"


@dataclass(frozen=True)
class BitriseUrl:
    """A parsed Bitrise web URL.

    ``app_slug`` is set for app and pipeline URLs, ``build_slug`` for build
    URLs and ``pipeline_id`` for pipeline URLs; the others are None.
    """

    kind: UrlKind
    app_slug: str | None = None
    build_slug: str | None = None
    pipeline_id: str | None = None

    @classmethod
    def for_app(cls, slug: str) -> BitriseUrl:
        return cls(UrlKind.APP, app_slug=slug)

    @classmethod
    def for_build(cls, slug: str) -> BitriseUrl:
        return cls(UrlKind.BUILD, build_slug=slug)

    @classmethod
    def for_pipeline(cls, app_slug: str, pipeline_id: str) -> BitriseUrl:
        return cls(UrlKind.PIPELINE, app_slug=app_slug, pipeline_id=pipeline_id)

    def description(self) -> str:
        """Short name of what the URL points at."""
        return self.kind.value

    def to_url(self) -> str:
        """Rebuild the canonical web URL."""
        if self.kind is UrlKind.APP:
            return f"{_WEB_ROOT}/app/{self.app_slug}"
        if self.kind is UrlKind.BUILD:
            return f"{_WEB_ROOT}/build/{self.build_slug}"
        return f"{_WEB_ROOT}/app/{self.app_slug}/pipelines/{self.pipeline_id}"

    def __str__(self) -> str:
        return self.to_url()


def _split(text: str):
    try:
        parts = urlsplit(text)
        # Touching the port validates it; a bad port makes the URL invalid.
        parts.port
    except ValueError:
        raise InvalidArgumentError(f"Invalid URL: {text}") from None
    if not parts.scheme:
        raise InvalidArgumentError(f"Invalid URL: {text}")
    return parts


def parse_bitrise_url(text: str) -> BitriseUrl:
    """Parse an app, build or pipeline URL on app.bitrise.io.

    Raises InvalidArgumentError for anything that is not one of
    ``/app/{slug}``, ``/build/{slug}`` or ``/app/{slug}/pipelines/{id}``.
    """
    parts = _split(text)

    host = parts.hostname
    if not host:
        raise InvalidArgumentError(f"URL has no host: {text}")
    if host != _WEB_HOST:
        raise InvalidArgumentError(
            f"Not a Bitrise URL (expected {_WEB_HOST}, got {host}): {text}"
        )

    path = parts.path or "/"
    segments = path[1:].split("/") if path.startswith("/") else []

    match segments:
        case ["app", slug] if slug:
            return BitriseUrl.for_app(slug)
        case ["app", app_slug, "pipelines", pipeline_id] if app_slug and pipeline_id:
            return BitriseUrl.for_pipeline(app_slug, pipeline_id)
        case ["build", slug] if slug:
            return BitriseUrl.for_build(slug)
        case _:
            raise InvalidArgumentError(
                f"Unrecognized Bitrise URL pattern: {text}. Expected /app/{{slug}}, "
                f"/build/{{slug}}, or /app/{{slug}}/pipelines/{{id}}"
            )