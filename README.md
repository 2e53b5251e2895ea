# reprise

A Python client for the Bitrise API. It lists apps, inspects builds and
pipelines, reads build logs, downloads artifacts, and triggers, aborts or
rebuilds runs. It also parses app, build and pipeline links from the
Bitrise web interface.

## Installation

```
pip install reprise
```

The only runtime dependency is `requests`.

## Usage

`reprise.client.BitriseClient` takes a personal access token, which it
sends as the `Authorization` header. The API root defaults to
`https://api.bitrise.io/v0.1` and can be changed with `base_url`. The
client is a context manager and closes its HTTP session on exit.

```python
from reprise.client import BitriseClient

with BitriseClient("token") as client:
    me = client.get_me()
    print(me.data.username)

    apps = client.list_apps(50)
    for app in apps.data:
        print(app.slug, app.title)

    app = client.find_app_by_name("ios")  # case-insensitive title match, or None

    builds = client.list_builds("my-app-slug", status=2, branch="main", limit=10)
    for build in builds.data:
        print(build.build_number, build.status_display(), build.duration_display())

    log_text = client.get_full_log("my-app-slug", builds.data[0].slug)
```

`get_full_log` downloads the raw log when the API supplies an expiring
log URL. Otherwise it joins the log chunks.

Artifacts:

```python
with BitriseClient("token") as client:
    artifacts = client.list_artifacts("my-app-slug", "build-slug")
    for artifact in artifacts.data:
        print(artifact.title, artifact.size_display())

    detail = client.get_artifact("my-app-slug", "build-slug", artifacts.data[0].slug)
    if detail.data.expiring_download_url:
        client.download_artifact(detail.data.expiring_download_url, "app.ipa")
```

`fetch_raw_log` and `download_artifact` first call
`reprise.client.validate_external_url`. That check only accepts
`bitrise.io`, known Bitrise S3 buckets and `storage.googleapis.com`,
including their subdomains.

### Triggering and controlling work

```python
from reprise.client import BitriseClient
from reprise.models import TriggerParams
from reprise.pipelines import PipelineTriggerParams

with BitriseClient("token") as client:
    build = client.trigger_build(
        "my-app-slug",
        TriggerParams(workflow_id="primary", branch="main", environments=[("FLAVOR", "beta")]),
    )
    client.abort_build("my-app-slug", build.slug, "Superseded")

    pipeline = client.trigger_pipeline(
        "my-app-slug",
        PipelineTriggerParams(pipeline_id="build-and-test", branch="main"),
    )
    client.abort_pipeline("my-app-slug", pipeline.id, None)  # default reason

    rebuilt = client.rebuild_pipeline("my-app-slug", pipeline.id, partial=True)
```

`get_pipeline` returns a `PipelineResponse` and accepts a body either
wrapped in `data` or sent bare. Call `into_pipeline()` on it to get the
`Pipeline`. Pipeline and workflow statuses may arrive as integers or as
words such as `"succeeded"`. `reprise.pipelines.parse_status` maps them
onto the numeric codes:

| Code | Meaning         |
|------|-----------------|
| 0    | running         |
| 1    | success         |
| 2    | failed          |
| 3    | aborted         |
| 4    | aborted-success |

### Parsing Bitrise links

```python
from reprise.url_parser import parse_bitrise_url

link = parse_bitrise_url("https://app.bitrise.io/app/abc123/pipelines/def456")
print(link.kind, link.description(), link.app_slug, link.pipeline_id)
print(link.to_url())
```

Supported link shapes are `/app/{slug}`, `/build/{slug}` and
`/app/{slug}/pipelines/{id}` on `app.bitrise.io`.

## Errors

All failures raise a subclass of `reprise.errors.RepriseError`. Each error
has an `exit_code()` method that returns a sysexits-style code.

- `ApiError` covers non-success HTTP statuses. It has `status` and `message` attributes. Its exit codes are:
  - 401 or 403 gives 77
  - 404 gives 66
  - 429 gives 75
  - any other status gives 69
- `InvalidArgumentError` covers malformed links and log or artifact URLs from untrusted hosts. It gives 64 and is also a `ValueError`.
- `ResponseFormatError` covers response bodies that are not valid JSON or lack required fields. It gives 65.
- Transport failures raise a plain `RepriseError`, which gives 1.

## What it does not do

This is a library only:

- It has no command-line program.
- It does not read tokens from configuration files or the environment.
- It sends no desktop notifications.
- It has no watch or polling loop.

The caller supplies the token and decides what to do with the results.

## Running the tests

```
pip install -e ".[test]"
pytest
```