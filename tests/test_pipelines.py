from datetime import datetime, timedelta, timezone

import pytest

from reprise.errors import ResponseFormatError
from reprise.pipelines import (
    Pipeline,
    PipelineApp,
    PipelineListResponse,
    PipelineResponse,
    PipelineTriggerParams,
    PipelineTriggerParamsResponse,
    PipelineTriggerResponse,
    PipelineWorkflow,
    parse_status,
)


def at(hour, minute, second):
    return datetime(2024, 1, 1, hour, minute, second, tzinfo=timezone.utc)


def make_pipeline(status, started=None, finished=None):
    return Pipeline(
        id="test-id",
        app_slug="test-app",
        status=status,
        status_text="test",
        triggered_at=at(12, 0, 0),
        started_at=started,
        finished_at=finished,
        branch="main",
        pipeline_id="test-pipeline",
    )


@pytest.mark.parametrize(
    "status, expected",
    [(0, "running"), (1, "success"), (2, "failed"), (3, "aborted"), (4, "aborted-success"), (99, "unknown")],
)
def test_pipeline_status_display(status, expected):
    assert make_pipeline(status).status_display() == expected


def test_pipeline_duration_with_timestamps():
    pipeline = make_pipeline(1, at(12, 0, 0), at(12, 10, 0))
    assert pipeline.duration() == timedelta(seconds=600)


def test_pipeline_duration_without_timestamps():
    assert make_pipeline(0).duration() is None


@pytest.mark.parametrize(
    "end, expected",
    [(at(12, 0, 30), "30s"), (at(12, 15, 45), "15m 45s"), (at(15, 20, 0), "3h 20m")],
)
def test_pipeline_duration_display(end, expected):
    assert make_pipeline(1, at(12, 0, 0), end).duration_display() == expected


def test_pipeline_duration_display_no_duration():
    assert make_pipeline(0).duration_display() == "-"


def test_pipeline_is_running():
    assert make_pipeline(0).is_running() is True
    assert make_pipeline(1).is_running() is False


def test_pipeline_is_failed():
    assert make_pipeline(2).is_failed() is True
    assert make_pipeline(1).is_failed() is False


@pytest.mark.parametrize(
    "status, expected",
    [(0, "running"), (1, "success"), (2, "failed"), (3, "aborted"), (4, "unknown"), (99, "unknown")],
)
def test_pipeline_workflow_status_display(status, expected):
    wf = PipelineWorkflow(id="wf-id", name="build", status=status, status_text="x")
    assert wf.status_display() == expected


def test_pipeline_deserialize_with_uuid_alias():
    pipeline = Pipeline.from_dict(
        {
            "uuid": "pipeline-uuid-123",
            "app_slug": "app123",
            "status": 1,
            "status_text": "success",
            "triggered_at": "2024-01-01T12:00:00Z",
            "branch": "main",
            "pipeline_id": "test-pipeline",
        }
    )
    assert pipeline.id == "pipeline-uuid-123"
    assert pipeline.triggered_at == at(12, 0, 0)
    assert pipeline.pipeline_id == "test-pipeline"


def test_pipeline_name_alias_and_string_status():
    pipeline = Pipeline.from_dict({"id": "p1", "name": "deploy", "status": "Succeeded"})
    assert pipeline.pipeline_id == "deploy"
    assert pipeline.status == 1


def test_pipeline_defaults_when_empty():
    pipeline = Pipeline.from_dict({})
    assert (pipeline.id, pipeline.branch, pipeline.status, pipeline.workflows) == ("", "", 0, [])


@pytest.mark.parametrize(
    "word, expected",
    [
        ("running", 0),
        ("on_hold", 0),
        ("initializing", 0),
        ("succeeded", 1),
        ("SUCCESS", 1),
        ("failed", 2),
        ("error", 2),
        ("aborted", 3),
        ("cancelled", 3),
        ("aborted_with_success", 4),
    ],
)
def test_parse_status_words(word, expected):
    assert parse_status(word) == expected


def test_parse_status_integer_passes_through():
    assert parse_status(7) == 7


@pytest.mark.parametrize("value", ["bogus", None, 1.5, True])
def test_parse_status_rejects(value):
    with pytest.raises(ResponseFormatError):
        parse_status(value)


def test_get_app_slug_and_branch_fallbacks():
    pipeline = Pipeline.from_dict(
        {
            "id": "p",
            "app": {"slug": "nested-app", "title": "Nested"},
            "trigger_params": {"branch": "develop", "pipeline_id": "ci"},
        }
    )
    assert pipeline.get_app_slug() == "nested-app"
    assert pipeline.get_branch() == "develop"
    assert Pipeline().get_app_slug() == ""
    assert Pipeline().get_branch() == ""


def test_get_app_slug_prefers_top_level():
    pipeline = Pipeline(app_slug="top", app=PipelineApp(slug="nested"), branch="main",
                        trigger_params=PipelineTriggerParamsResponse(branch="other"))
    assert pipeline.get_app_slug() == "top"
    assert pipeline.get_branch() == "main"


def test_workflows_parsed():
    pipeline = Pipeline.from_dict(
        {"workflows": [{"uuid": "w1", "name": "build", "status": "failed", "status_text": "failed"}]}
    )
    assert pipeline.workflows[0].id == "w1"
    assert pipeline.workflows[0].status_display() == "failed"


def test_pipeline_response_wrapped():
    response = PipelineResponse.from_dict({"data": {"id": "pipeline-id", "status": 1}})
    assert response.wrapped is True
    assert response.into_pipeline().id == "pipeline-id"


def test_pipeline_response_unwrapped():
    response = PipelineResponse.from_dict({"id": "direct", "status": "running"})
    assert response.wrapped is False
    assert response.into_pipeline().id == "direct"
    assert response.into_pipeline().is_running() is True


def test_pipeline_list_response():
    response = PipelineListResponse.from_dict(
        {
            "data": [{"id": "pipeline-uuid", "app_slug": "test-app", "status": 1, "workflows": []}],
            "paging": {"total_item_count": 1, "page_item_limit": 10, "next": None},
        }
    )
    assert [p.id for p in response.data] == ["pipeline-uuid"]
    assert response.paging.total_item_count == 1


def test_pipeline_list_response_requires_paging():
    with pytest.raises(ResponseFormatError):
        PipelineListResponse.from_dict({"data": []})


def test_trigger_response():
    response = PipelineTriggerResponse.from_dict({"status": "ok", "message": "started", "id": "abc"})
    assert (response.status, response.message, response.id, response.pipeline_id) == ("ok", "started", "abc", None)


def test_trigger_response_requires_message():
    with pytest.raises(ResponseFormatError):
        PipelineTriggerResponse.from_dict({"status": "ok"})


def test_trigger_params_defaults():
    params = PipelineTriggerParams()
    assert (params.pipeline_id, params.branch, params.environments) == ("", None, [])