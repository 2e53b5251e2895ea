"""Data types for the Bitrise API: apps, builds, logs, artifacts and users."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from reprise.errors import ResponseFormatError

_STATUS_NAMES = {
    0: "running",
    1: "success",
    2: "failed",
    3: "aborted",
    4: "aborted-success",
}


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ResponseFormatError(f"expected an object for {what}, got {type(data).__name__}")
    return data


def _required(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ResponseFormatError(f"missing field `{key}`")
    return value


def _check_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ResponseFormatError(f"field `{key}` must be a string")
    return value


def _check_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseFormatError(f"field `{key}` must be an integer")
    return value


def _check_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ResponseFormatError(f"field `{key}` must be a boolean")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    return _check_str(_required(data, key), key)


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else _check_str(value, key)


def _int(data: Mapping[str, Any], key: str) -> int:
    return _check_int(_required(data, key), key)


def _opt_int(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    return None if value is None else _check_int(value, key)


def _bool(data: Mapping[str, Any], key: str) -> bool:
    return _check_bool(_required(data, key), key)


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = _required(data, key)
    if not isinstance(value, list):
        raise ResponseFormatError(f"field `{key}` must be a list")
    return value


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware UTC datetime; None stays None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ResponseFormatError(f"invalid timestamp: {value}") from exc
    else:
        raise ResponseFormatError(f"invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        raise ResponseFormatError(f"timestamp has no UTC offset: {value}")
    return parsed.astimezone(timezone.utc)


def format_duration(seconds: int) -> str:
    """Render a number of seconds as '45s', '5m 30s' or '2h 30m'."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def status_name(status: int) -> str:
    """Human-readable name of a numeric build or pipeline status."""
    return _STATUS_NAMES.get(status, "unknown")


def duration_between(start: datetime | None, end: datetime | None) -> timedelta | None:
    """Time from start to end, or None if either is missing."""
    if start is None or end is None:
        return None
    return end - start


def display_duration(duration: timedelta | None) -> str:
    """Render an optional duration, truncated to whole seconds, or '-'."""
    if duration is None:
        return "-"
    return format_duration(int(duration.total_seconds()))


@dataclass
class Owner:
    """Owner of an app."""

    account_type: str
    name: str
    slug: str

    @classmethod
    def from_dict(cls, data: Any) -> Owner:
        data = _mapping(data, "owner")
        return cls(
            account_type=_str(data, "account_type"),
            name=_str(data, "name"),
            slug=_str(data, "slug"),
        )


@dataclass
class App:
    """A Bitrise application."""

    slug: str
    title: str
    is_disabled: bool
    status: int
    owner: Owner
    project_type: str | None = None
    provider: str | None = None
    repo_owner: str | None = None
    repo_slug: str | None = None
    repo_url: str | None = None
    is_public: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> App:
        data = _mapping(data, "app")
        is_public = data.get("isPublic")
        return cls(
            slug=_str(data, "slug"),
            title=_str(data, "title"),
            is_disabled=_bool(data, "is_disabled"),
            status=_int(data, "status"),
            owner=Owner.from_dict(_required(data, "owner")),
            project_type=_opt_str(data, "project_type"),
            provider=_opt_str(data, "provider"),
            repo_owner=_opt_str(data, "repo_owner"),
            repo_slug=_opt_str(data, "repo_slug"),
            repo_url=_opt_str(data, "repo_url"),
            is_public=False if is_public is None else _check_bool(is_public, "isPublic"),
        )


@dataclass
class Paging:
    """Pagination information of a list response."""

    total_item_count: int
    page_item_limit: int
    next: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Paging:
        data = _mapping(data, "paging")
        return cls(
            total_item_count=_int(data, "total_item_count"),
            page_item_limit=_int(data, "page_item_limit"),
            next=_opt_str(data, "next"),
        )


@dataclass
class AppListResponse:
    """A page of apps."""

    data: list[App]
    paging: Paging

    @classmethod
    def from_dict(cls, data: Any) -> AppListResponse:
        data = _mapping(data, "app list")
        return cls(
            data=[App.from_dict(item) for item in _list(data, "data")],
            paging=Paging.from_dict(_required(data, "paging")),
        )


@dataclass
class AppResponse:
    """A single app."""

    data: App

    @classmethod
    def from_dict(cls, data: Any) -> AppResponse:
        data = _mapping(data, "app response")
        return cls(data=App.from_dict(_required(data, "data")))


@dataclass
class Build:
    """A Bitrise build."""

    slug: str
    triggered_at: datetime
    status: int
    status_text: str
    branch: str
    build_number: int
    triggered_workflow: str
    started_on_worker_at: datetime | None = None
    finished_at: datetime | None = None
    abort_reason: str | None = None
    commit_hash: str | None = None
    commit_message: str | None = None
    tag: str | None = None
    triggered_by: str | None = None
    stack_identifier: str | None = None
    machine_type_id: str | None = None
    pull_request_id: int | None = None
    pull_request_target_branch: str | None = None
    credit_cost: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Build:
        data = _mapping(data, "build")
        return cls(
            slug=_str(data, "slug"),
            triggered_at=parse_timestamp(_required(data, "triggered_at")),
            status=_int(data, "status"),
            status_text=_str(data, "status_text"),
            branch=_str(data, "branch"),
            build_number=_int(data, "build_number"),
            triggered_workflow=_str(data, "triggered_workflow"),
            started_on_worker_at=parse_timestamp(data.get("started_on_worker_at")),
            finished_at=parse_timestamp(data.get("finished_at")),
            abort_reason=_opt_str(data, "abort_reason"),
            commit_hash=_opt_str(data, "commit_hash"),
            commit_message=_opt_str(data, "commit_message"),
            tag=_opt_str(data, "tag"),
            triggered_by=_opt_str(data, "triggered_by"),
            stack_identifier=_opt_str(data, "stack_identifier"),
            machine_type_id=_opt_str(data, "machine_type_id"),
            pull_request_id=_opt_int(data, "pull_request_id"),
            pull_request_target_branch=_opt_str(data, "pull_request_target_branch"),
            credit_cost=_opt_int(data, "credit_cost"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API's JSON shape."""
        return {
            "slug": self.slug,
            "triggered_at": _format_timestamp(self.triggered_at),
            "started_on_worker_at": _format_timestamp(self.started_on_worker_at),
            "finished_at": _format_timestamp(self.finished_at),
            "status": self.status,
            "status_text": self.status_text,
            "abort_reason": self.abort_reason,
            "branch": self.branch,
            "build_number": self.build_number,
            "commit_hash": self.commit_hash,
            "commit_message": self.commit_message,
            "tag": self.tag,
            "triggered_workflow": self.triggered_workflow,
            "triggered_by": self.triggered_by,
            "stack_identifier": self.stack_identifier,
            "machine_type_id": self.machine_type_id,
            "pull_request_id": self.pull_request_id,
            "pull_request_target_branch": self.pull_request_target_branch,
            "credit_cost": self.credit_cost,
        }

    def status_display(self) -> str:
        return status_name(self.status)

    def duration(self) -> timedelta | None:
        return duration_between(self.started_on_worker_at, self.finished_at)

    def duration_display(self) -> str:
        return display_duration(self.duration())

    def is_running(self) -> bool:
        return self.status == 0

    def is_failed(self) -> bool:
        return self.status == 2


@dataclass
class BuildListResponse:
    """A page of builds."""

    data: list[Build]
    paging: Paging

    @classmethod
    def from_dict(cls, data: Any) -> BuildListResponse:
        data = _mapping(data, "build list")
        return cls(
            data=[Build.from_dict(item) for item in _list(data, "data")],
            paging=Paging.from_dict(_required(data, "paging")),
        )


@dataclass
class BuildResponse:
    """A single build."""

    data: Build

    @classmethod
    def from_dict(cls, data: Any) -> BuildResponse:
        data = _mapping(data, "build response")
        return cls(data=Build.from_dict(_required(data, "data")))


@dataclass
class LogChunk:
    """A piece of a build log."""

    chunk: str
    position: int

    @classmethod
    def from_dict(cls, data: Any) -> LogChunk:
        data = _mapping(data, "log chunk")
        return cls(chunk=_str(data, "chunk"), position=_int(data, "position"))


@dataclass
class LogResponse:
    """Build log metadata, with chunks and an optional expiring raw URL."""

    log_chunks: list[LogChunk]
    is_archived: bool
    expiring_raw_log_url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> LogResponse:
        data = _mapping(data, "log response")
        return cls(
            log_chunks=[LogChunk.from_dict(item) for item in _list(data, "log_chunks")],
            is_archived=_bool(data, "is_archived"),
            expiring_raw_log_url=_opt_str(data, "expiring_raw_log_url"),
        )


@dataclass
class TriggerParams:
    """What to start when triggering a build."""

    workflow_id: str = ""
    branch: str | None = None
    commit_message: str | None = None
    environments: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class TriggerResponse:
    """Answer to a build trigger request."""

    status: str
    message: str
    slug: str | None = None
    build_slug: str | None = None
    build_number: int | None = None
    build_url: str | None = None
    triggered_workflow: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TriggerResponse:
        data = _mapping(data, "trigger response")
        return cls(
            status=_str(data, "status"),
            message=_str(data, "message"),
            slug=_opt_str(data, "slug"),
            build_slug=_opt_str(data, "build_slug"),
            build_number=_opt_int(data, "build_number"),
            build_url=_opt_str(data, "build_url"),
            triggered_workflow=_opt_str(data, "triggered_workflow"),
        )


@dataclass
class Artifact:
    """A build artifact."""

    title: str
    slug: str
    is_public_page_enabled: bool
    artifact_type: str | None = None
    file_size_bytes: int | None = None
    expiring_download_url: str | None = None
    public_install_page_url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Artifact:
        data = _mapping(data, "artifact")
        return cls(
            title=_str(data, "title"),
            slug=_str(data, "slug"),
            is_public_page_enabled=_bool(data, "is_public_page_enabled"),
            artifact_type=_opt_str(data, "artifact_type"),
            file_size_bytes=_opt_int(data, "file_size_bytes"),
            expiring_download_url=_opt_str(data, "expiring_download_url"),
            public_install_page_url=_opt_str(data, "public_install_page_url"),
        )

    def size_display(self) -> str:
        """File size as bytes, KB or MB, or '-' if unknown."""
        size = self.file_size_bytes
        if size is None:
            return "-"
        if size < 1024:
            return f"{size} B"
        if size < 1024 * 1024:
            return f"{size / 1024:.1f} KB"
        return f"{size / (1024 * 1024):.1f} MB"


@dataclass
class ArtifactListResponse:
    """A page of artifacts."""

    data: list[Artifact]
    paging: Paging

    @classmethod
    def from_dict(cls, data: Any) -> ArtifactListResponse:
        data = _mapping(data, "artifact list")
        return cls(
            data=[Artifact.from_dict(item) for item in _list(data, "data")],
            paging=Paging.from_dict(_required(data, "paging")),
        )


@dataclass
class ArtifactResponse:
    """A single artifact."""

    data: Artifact

    @classmethod
    def from_dict(cls, data: Any) -> ArtifactResponse:
        data = _mapping(data, "artifact response")
        return cls(data=Artifact.from_dict(_required(data, "data")))


@dataclass
class User:
    """The authenticated user."""

    username: str
    slug: str
    email: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> User:
        data = _mapping(data, "user")
        return cls(
            username=_str(data, "username"),
            slug=_str(data, "slug"),
            email=_opt_str(data, "email"),
            avatar_url=_opt_str(data, "avatar_url"),
        )


@dataclass
class UserResponse:
    """Wrapper around the authenticated user."""

    data: User

    @classmethod
    def from_dict(cls, data: Any) -> UserResponse:
        data = _mapping(data, "user response")
        return cls(data=User.from_dict(_required(data, "data")))