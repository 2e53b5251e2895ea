"""HTTP client for the Bitrise REST API."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlencode, urlsplit

import requests

from reprise.errors import ApiError, InvalidArgumentError, RepriseError, ResponseFormatError
from reprise.models import (
    App,
    AppListResponse,
    AppResponse,
    ArtifactListResponse,
    ArtifactResponse,
    Build,
    BuildListResponse,
    BuildResponse,
    LogResponse,
    TriggerParams,
    TriggerResponse,
    UserResponse,
)
from reprise.pipelines import (
    Pipeline,
    PipelineListResponse,
    PipelineResponse,
    PipelineTriggerParams,
    PipelineTriggerResponse,
)

# Hosts that log and artifact downloads may come from (SSRF protection).
ALLOWED_HOSTS = (
    "bitrise.io",
    "app.bitrise.io",
    "bitrise-build-log-archives.s3.amazonaws.com",
    "bitrise-build-log-archives-eu-west-1.s3.eu-west-1.amazonaws.com",
    "bitrise-prod-build-storage.s3.amazonaws.com",
    "bitrise-prod-build-storage.s3.us-west-2.amazonaws.com",
    "storage.googleapis.com",
)

DEFAULT_BASE_URL = "https://api.bitrise.io/v0.1"
USER_AGENT = "reprise/0.1.5"
TIMEOUT_SECONDS = 30
MAX_REDIRECTS = 5
DEFAULT_ABORT_REASON = "Aborted via reprise CLI"


def validate_external_url(url: str, purpose: str) -> None:
    """Raise InvalidArgumentError unless the URL points at an allowed host."""
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError:
        raise InvalidArgumentError(f"Invalid {purpose} URL: {url}") from None
    if not parts.scheme:
        raise InvalidArgumentError(f"Invalid {purpose} URL: {url}")

    host = parts.hostname
    if not host:
        raise InvalidArgumentError(f"{purpose} URL has no valid host: {url}")

    if not any(host == allowed or host.endswith(f".{allowed}") for allowed in ALLOWED_HOSTS):
        raise InvalidArgumentError(f"{purpose} URL from untrusted host: {host}")


def _environments(pairs: list[tuple[str, str]]) -> list[dict[str, Any]]:
    return [{"mapped_to": key, "value": value, "is_expand": True} for key, value in pairs]


class BitriseClient:
    """Client for the Bitrise API, authenticated with a personal access token."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL) -> None:
        self.token = token
        self.base_url = base_url
        self._session = requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT
        self._session.max_redirects = MAX_REDIRECTS

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> BitriseClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Transport

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(method, url, timeout=TIMEOUT_SECONDS, **kwargs)
        except requests.RequestException as exc:
            raise RepriseError(f"HTTP error: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseFormatError(f"invalid JSON in response: {exc}") from exc

    def _get(self, path: str) -> Any:
        response = self._send(
            "GET", f"{self.base_url}{path}", headers={"Authorization": self.token}
        )
        return self._json(response)

    def _post(self, path: str, body: Any) -> Any:
        response = self._send(
            "POST", f"{self.base_url}{path}", headers={"Authorization": self.token}, json=body
        )
        return self._json(response)

    def _get_raw(self, url: str) -> str:
        return self._send("GET", url).text

    # Users

    def get_me(self) -> UserResponse:
        """Fetch the authenticated user."""
        return UserResponse.from_dict(self._get("/me"))

    # Apps

    def list_apps(self, limit: int = 50) -> AppListResponse:
        return AppListResponse.from_dict(self._get(f"/apps?limit={limit}"))

    def get_app(self, slug: str) -> AppResponse:
        return AppResponse.from_dict(self._get(f"/apps/{slug}"))

    def find_app_by_name(self, name: str) -> App | None:
        """First app among the first hundred whose title contains name, ignoring case."""
        needle = name.lower()
        return next(
            (app for app in self.list_apps(100).data if needle in app.title.lower()), None
        )

    # Builds

    def list_builds(
        self,
        app_slug: str,
        status: int | None = None,
        branch: str | None = None,
        workflow: str | None = None,
        limit: int = 50,
    ) -> BuildListResponse:
        params: list[tuple[str, str]] = [("limit", str(limit))]
        if status is not None:
            params.append(("status", str(status)))
        if branch is not None:
            params.append(("branch", branch))
        if workflow is not None:
            params.append(("workflow", workflow))
        return BuildListResponse.from_dict(
            self._get(f"/apps/{app_slug}/builds?{urlencode(params)}")
        )

    def get_build(self, app_slug: str, build_slug: str) -> BuildResponse:
        return BuildResponse.from_dict(self._get(f"/apps/{app_slug}/builds/{build_slug}"))

    # Logs

    def get_build_log(self, app_slug: str, build_slug: str) -> LogResponse:
        """Fetch log metadata, including the expiring raw log URL if any."""
        return LogResponse.from_dict(self._get(f"/apps/{app_slug}/builds/{build_slug}/log"))

    def fetch_raw_log(self, log_url: str) -> str:
        """Download raw log text from a trusted host."""
        validate_external_url(log_url, "Log")
        return self._get_raw(log_url)

    def get_full_log(self, app_slug: str, build_slug: str) -> str:
        """Full build log, falling back to the joined chunks if no raw URL is given."""
        log = self.get_build_log(app_slug, build_slug)
        if log.expiring_raw_log_url is not None:
            return self.fetch_raw_log(log.expiring_raw_log_url)
        return "".join(chunk.chunk for chunk in log.log_chunks)

    # Artifacts

    def list_artifacts(self, app_slug: str, build_slug: str) -> ArtifactListResponse:
        return ArtifactListResponse.from_dict(
            self._get(f"/apps/{app_slug}/builds/{build_slug}/artifacts")
        )

    def get_artifact(self, app_slug: str, build_slug: str, artifact_slug: str) -> ArtifactResponse:
        return ArtifactResponse.from_dict(
            self._get(f"/apps/{app_slug}/builds/{build_slug}/artifacts/{artifact_slug}")
        )

    def download_artifact(self, url: str, path: str | os.PathLike[str]) -> None:
        """Download an artifact from a trusted host into a file."""
        validate_external_url(url, "Artifact")
        response = self._send("GET", url)
        Path(path).write_bytes(response.content)

    # Build control

    def abort_build(self, app_slug: str, build_slug: str, reason: str | None = None) -> None:
        body = {
            "abort_reason": DEFAULT_ABORT_REASON if reason is None else reason,
            "abort_with_success": False,
            "skip_notifications": False,
        }
        self._post(f"/apps/{app_slug}/builds/{build_slug}/abort", body)

    def trigger_build(self, app_slug: str, params: TriggerParams) -> Build:
        """Start a build and return its details."""
        build_params: dict[str, Any] = {"workflow_id": params.workflow_id}
        if params.branch is not None:
            build_params["branch"] = params.branch
        if params.commit_message is not None:
            build_params["commit_message"] = params.commit_message
        if params.environments:
            build_params["environments"] = _environments(params.environments)
        body = {"hook_info": {"type": "bitrise"}, "build_params": build_params}

        response = TriggerResponse.from_dict(self._post(f"/apps/{app_slug}/builds", body))
        if response.build_slug is None:
            raise ApiError(500, f"Build triggered but no slug returned: {response.message}")
        return self.get_build(app_slug, response.build_slug).data

    # Pipelines

    def list_pipelines(
        self,
        app_slug: str,
        status: int | None = None,
        branch: str | None = None,
        limit: int = 50,
    ) -> PipelineListResponse:
        params: list[tuple[str, str]] = [("limit", str(limit))]
        if status is not None:
            params.append(("status", str(status)))
        if branch is not None:
            params.append(("branch", branch))
        return PipelineListResponse.from_dict(
            self._get(f"/apps/{app_slug}/pipelines?{urlencode(params)}")
        )

    def get_pipeline(self, app_slug: str, pipeline_id: str) -> PipelineResponse:
        """Fetch a pipeline, accepting both wrapped and bare response bodies."""
        raw = self._get(f"/apps/{app_slug}/pipelines/{pipeline_id}")
        if isinstance(raw, dict) and "data" in raw:
            return PipelineResponse.from_dict(raw)
        return PipelineResponse(pipeline=Pipeline.from_dict(raw), wrapped=False)

    def trigger_pipeline(self, app_slug: str, params: PipelineTriggerParams) -> Pipeline:
        """Start a pipeline and return its details."""
        build_params: dict[str, Any] = {"pipeline_id": params.pipeline_id}
        if params.branch is not None:
            build_params["branch"] = params.branch
        if params.environments:
            build_params["environments"] = _environments(params.environments)
        body = {"hook_info": {"type": "bitrise"}, "build_params": build_params}

        response = PipelineTriggerResponse.from_dict(
            self._post(f"/apps/{app_slug}/pipelines", body)
        )
        if response.id is None:
            raise ApiError(500, f"Pipeline triggered but no ID returned: {response.message}")
        return self.get_pipeline(app_slug, response.id).into_pipeline()

    def abort_pipeline(self, app_slug: str, pipeline_id: str, reason: str | None = None) -> None:
        body = {
            "abort_reason": DEFAULT_ABORT_REASON if reason is None else reason,
            "abort_with_success": False,
            "skip_notifications": False,
        }
        self._post(f"/apps/{app_slug}/pipelines/{pipeline_id}/abort", body)

    def rebuild_pipeline(self, app_slug: str, pipeline_id: str, partial: bool = False) -> Pipeline:
        """Rebuild a pipeline; returns the new one, or the original if no new id came back."""
        response = PipelineTriggerResponse.from_dict(
            self._post(f"/apps/{app_slug}/pipelines/{pipeline_id}/rebuild", {"partial": partial})
        )
        target = response.id if response.id is not None else pipeline_id
        return self.get_pipeline(app_slug, target).into_pipeline()