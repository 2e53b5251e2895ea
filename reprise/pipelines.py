"""Data types for Bitrise pipelines and their workflows."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from reprise.errors import ResponseFormatError
from reprise.models import (
    Paging,
    display_duration,
    duration_between,
    parse_timestamp,
    status_name,
)

_STATUS_WORDS = {
    "running": 0,
    "on_hold": 0,
    "initializing": 0,
    "succeeded": 1,
    "success": 1,
    "failed": 2,
    "error": 2,
    "aborted": 3,
    "cancelled": 3,
    "aborted_with_success": 4,
}

_WORKFLOW_STATUS_NAMES = {
    0: "running",
    1: "success",
    2: "failed",
    3: "aborted",
}


def parse_status(value: Any) -> int:
    """Turn a status given as an integer or a word into its numeric code."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return _STATUS_WORDS[value.lower()]
        except KeyError:
            raise ResponseFormatError(f"unknown status: {value}") from None
    raise ResponseFormatError(f"status must be an integer or a string, got {value!r}")


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ResponseFormatError(f"expected an object for {what}, got {type(data).__name__}")
    return data


def _pick(data: Mapping[str, Any], *keys: str) -> tuple[bool, Any]:
    """Return (found, value) for the first of the keys present in data."""
    for key in keys:
        if key in data:
            return True, data[key]
    return False, None


def _str_or_default(data: Mapping[str, Any], *keys: str) -> str:
    found, value = _pick(data, *keys)
    if not found:
        return ""
    if not isinstance(value, str):
        raise ResponseFormatError(f"field `{keys[0]}` must be a string")
    return value


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ResponseFormatError(f"field `{key}` must be a string")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        raise ResponseFormatError(f"missing field `{key}`")
    if not isinstance(value, str):
        raise ResponseFormatError(f"field `{key}` must be a string")
    return value


def _status_or_default(data: Mapping[str, Any]) -> int:
    return parse_status(data["status"]) if "status" in data else 0


@dataclass
class PipelineApp:
    """App reference inside a single-pipeline response."""

    slug: str = ""
    title: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> PipelineApp:
        data = _mapping(data, "pipeline app")
        return cls(slug=_str_or_default(data, "slug"), title=_str_or_default(data, "title"))


@dataclass
class PipelineTriggerParamsResponse:
    """Trigger parameters echoed back in a pipeline response."""

    branch: str | None = None
    pipeline_id: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PipelineTriggerParamsResponse:
        data = _mapping(data, "trigger params")
        return cls(branch=_opt_str(data, "branch"), pipeline_id=_opt_str(data, "pipeline_id"))


@dataclass
class PipelineWorkflow:
    """A workflow run inside a pipeline."""

    id: str = ""
    name: str = ""
    status: int = 0
    status_text: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PipelineWorkflow:
        data = _mapping(data, "pipeline workflow")
        return cls(
            id=_str_or_default(data, "id", "uuid"),
            name=_str_or_default(data, "name"),
            status=_status_or_default(data),
            status_text=_opt_str(data, "status_text"),
        )

    def status_display(self) -> str:
        return _WORKFLOW_STATUS_NAMES.get(self.status, "unknown")


@dataclass
class Pipeline:
    """A Bitrise pipeline, from either the list or the single-item response."""

    id: str = ""
    app_slug: str = ""
    app: PipelineApp | None = None
    status: int = 0
    status_text: str | None = None
    triggered_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    branch: str = ""
    pipeline_id: str = ""
    triggered_by: str | None = None
    abort_reason: str | None = None
    workflows: list[PipelineWorkflow] = field(default_factory=list)
    trigger_params: PipelineTriggerParamsResponse | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Pipeline:
        data = _mapping(data, "pipeline")
        app = data.get("app")
        params = data.get("trigger_params")
        workflows = data.get("workflows", [])
        if not isinstance(workflows, list):
            raise ResponseFormatError("field `workflows` must be a list")
        return cls(
            id=_str_or_default(data, "id", "uuid"),
            app_slug=_str_or_default(data, "app_slug"),
            app=None if app is None else PipelineApp.from_dict(app),
            status=_status_or_default(data),
            status_text=_opt_str(data, "status_text"),
            triggered_at=parse_timestamp(data.get("triggered_at")),
            started_at=parse_timestamp(data.get("started_at")),
            finished_at=parse_timestamp(data.get("finished_at")),
            branch=_str_or_default(data, "branch"),
            pipeline_id=_str_or_default(data, "pipeline_id", "name"),
            triggered_by=_opt_str(data, "triggered_by"),
            abort_reason=_opt_str(data, "abort_reason"),
            workflows=[PipelineWorkflow.from_dict(item) for item in workflows],
            trigger_params=None if params is None else PipelineTriggerParamsResponse.from_dict(params),
        )

    def get_app_slug(self) -> str:
        """App slug from whichever response format supplied it."""
        if self.app_slug:
            return self.app_slug
        if self.app is not None:
            return self.app.slug
        return ""

    def get_branch(self) -> str:
        """Branch from whichever response format supplied it."""
        if self.branch:
            return self.branch
        if self.trigger_params is not None:
            return self.trigger_params.branch or ""
        return ""

    def status_display(self) -> str:
        return status_name(self.status)

    def duration(self) -> timedelta | None:
        return duration_between(self.started_at, self.finished_at)

    def duration_display(self) -> str:
        return display_duration(self.duration())

    def is_running(self) -> bool:
        return self.status == 0

    def is_failed(self) -> bool:
        return self.status == 2


@dataclass
class PipelineListResponse:
    """A page of pipelines."""

    data: list[Pipeline]
    paging: Paging

    @classmethod
    def from_dict(cls, data: Any) -> PipelineListResponse:
        data = _mapping(data, "pipeline list")
        items = data.get("data")
        if not isinstance(items, list):
            raise ResponseFormatError("field `data` must be a list")
        paging = data.get("paging")
        if paging is None:
            raise ResponseFormatError("missing field `paging`")
        return cls(
            data=[Pipeline.from_dict(item) for item in items],
            paging=Paging.from_dict(paging),
        )


@dataclass
class PipelineResponse:
    """A single pipeline, whether or not the API wrapped it in a `data` object."""

    pipeline: Pipeline
    wrapped: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> PipelineResponse:
        data = _mapping(data, "pipeline response")
        if data.get("data") is not None:
            try:
                return cls(pipeline=Pipeline.from_dict(data["data"]), wrapped=True)
            except ResponseFormatError:
                pass
        return cls(pipeline=Pipeline.from_dict(data), wrapped=False)

    def into_pipeline(self) -> Pipeline:
        return self.pipeline


@dataclass
class PipelineTriggerParams:
    """What to start when triggering a pipeline."""

    pipeline_id: str = ""
    branch: str | None = None
    environments: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class PipelineTriggerResponse:
    """Answer to a pipeline trigger or rebuild request."""

    status: str
    message: str
    id: str | None = None
    pipeline_id: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PipelineTriggerResponse:
        data = _mapping(data, "pipeline trigger response")
        return cls(
            status=_required_str(data, "status"),
            message=_required_str(data, "message"),
            id=_opt_str(data, "id"),
            pipeline_id=_opt_str(data, "pipeline_id"),
        )